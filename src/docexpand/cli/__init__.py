"""
Command-line interface for the docexpand package.

Provides commands for validating a documentation corpus, building the
assembled output and inspecting the anchor registry.
"""

import click
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from docexpand import __version__
from docexpand.config import load_config


# Common options that can be reused across commands
def common_options(func):
    """Decorator to add common CLI options."""
    func = click.option(
        '--config-dir',
        type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
        default=Path('config'),
        help='Path to configuration directory (default: ./config)',
    )(func)
    func = click.option(
        '--log-level',
        type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
        default='WARNING',
        help='Logging level (default: WARNING)',
    )(func)
    func = click.option(
        '--log-file',
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help='Also write logs to this file',
    )(func)
    func = click.option(
        '--workers',
        type=click.IntRange(min=1),
        default=None,
        help='Worker threads per processing phase (default: from config)',
    )(func)
    return func


def placeholder_options(func):
    """Decorator to add placeholder value options."""
    func = click.option(
        '--version',
        'release',
        default=None,
        help='Release version substituted for $VERSION$',
    )(func)
    func = click.option(
        '--set',
        'assignments',
        multiple=True,
        metavar='NAME=VALUE',
        help='Set a placeholder value (repeatable)',
    )(func)
    return func


def parse_assignments(assignments: Iterable[str]) -> Dict[str, str]:
    """
    Parse NAME=VALUE pairs.

    Example:
        >>> parse_assignments(["SCALA_VERSION=2.13"])
        {'SCALA_VERSION': '2.13'}
    """
    values = {}
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        name = name.strip()
        if not sep or not name:
            raise click.BadParameter(
                f"Expected NAME=VALUE, got '{assignment}'", param_hint="'--set'"
            )
        values[name] = value
    return values


def load_run_config(
    config_dir: Path,
    release: Optional[str] = None,
    assignments: Iterable[str] = (),
    workers: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Load configuration and apply command-line overrides.

    ``--set`` values win over ``--version`` for the same name.
    """
    values = {}
    if release:
        values["VERSION"] = release
    values.update(parse_assignments(assignments))

    overrides: Dict[str, Any] = {}
    if values:
        overrides["placeholders"] = {"values": values}
    if workers is not None:
        overrides["processing"] = {"max_workers": workers}

    return load_config(config_dir, overrides)


@click.group()
@click.version_option(version=__version__, prog_name='docexpand')
@click.pass_context
def cli(ctx):
    """
    Documentation Macro-Expander CLI.
    
    Expands version placeholders, groups multi-language code tabs and
    validates cross-document links across a Markdown/MDX corpus, reporting
    every problem in a single run.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)


@cli.command()
def version():
    """Display version information."""
    click.echo(f"docexpand v{__version__}")


def main():
    """Main entry point for the CLI."""
    # Import commands to register them
    from docexpand.cli.commands import anchors, build, validate
    
    cli()


if __name__ == '__main__':
    main()
