"""
Build command for writing assembled documents.

Assembles the corpus and writes the substituted documents plus a manifest
of their code-tab groups to an output directory.
"""

import click
import yaml
from pathlib import Path
from rich.console import Console
from rich.markup import escape

from docexpand.cli import cli, common_options, load_run_config, placeholder_options
from docexpand.ingestion.reader import CorpusReader
from docexpand.ingestion.writer import write_corpus
from docexpand.logger import configure_logging
from docexpand.processing.assembler import DocumentAssembler


console = Console(legacy_windows=False)


@cli.command()
@common_options
@placeholder_options
@click.argument(
    'input_dir',
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.argument(
    'output_dir',
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option(
    '--force',
    is_flag=True,
    help='Write documents even when validation errors are found',
)
@click.option(
    '--overwrite',
    is_flag=True,
    help='Overwrite existing output files',
)
@click.option(
    '--versioned',
    is_flag=True,
    help='Write into OUTPUT_DIR/<version>',
)
@click.option(
    '--no-manifest',
    is_flag=True,
    help='Do not write manifest.json',
)
@click.pass_context
def build(
    ctx,
    input_dir,
    output_dir,
    release,
    assignments,
    force,
    overwrite,
    versioned,
    no_manifest,
    config_dir,
    log_level,
    log_file,
    workers,
):
    """
    Assemble INPUT_DIR and write the result to OUTPUT_DIR.

    Nothing is written when any error is found, unless --force is given.
    Errors are printed to standard error, one per line.

    Examples:

        docexpand build docs site-src --version 3.5.0

        docexpand build docs site-src --version 3.5.0 --versioned --overwrite
    """
    configure_logging(level=log_level, log_file=log_file, console_output=True)

    console.print("\n[bold blue]Documentation Corpus - Build[/bold blue]\n")

    try:
        config = load_run_config(config_dir, release, assignments, workers)
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error: Invalid configuration: {escape(str(e))}[/red]")
        raise click.Abort()

    version = config["placeholders"]["values"].get("VERSION")
    if versioned and not version:
        console.print("[red]Error: --versioned requires --version[/red]")
        raise click.Abort()

    try:
        documents = CorpusReader(input_dir, config["corpus"]["patterns"]).read_documents()
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error reading corpus: {escape(str(e))}[/red]")
        raise click.Abort()

    result = DocumentAssembler.from_config(config).assemble(documents)

    for line in result.error_lines():
        click.echo(line, err=True)

    if result.is_valid:
        to_write = result.documents
    elif force:
        console.print(f"[yellow]Writing despite {len(result.errors)} errors (--force)[/yellow]")
        to_write = {
            key: outcome.document
            for key, outcome in result.outcomes.items()
            if outcome.document is not None
        }
    else:
        console.print(f"[bold red]Build failed with {len(result.errors)} errors; nothing written[/bold red]")
        ctx.exit(1)

    try:
        paths = write_corpus(
            to_write,
            output_dir,
            version=version,
            versioned=versioned,
            overwrite=overwrite,
            manifest=not no_manifest,
        )
    except (OSError, ValueError) as e:
        console.print(f"[red]Error writing output: {escape(str(e))}[/red]")
        raise click.Abort()

    console.print(f"[green]Wrote {len(paths)} documents to {output_dir}[/green]")

    if not result.is_valid:
        ctx.exit(1)
