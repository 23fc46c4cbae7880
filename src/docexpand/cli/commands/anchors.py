"""
Anchors command for inspecting the link-target registry.

Shows every document of a corpus with the anchors other documents may link to.
"""

import json
import click
import yaml
from pathlib import Path
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docexpand.cli import cli, common_options, load_run_config, placeholder_options
from docexpand.ingestion.reader import CorpusReader
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
@click.option(
    '--document',
    'document_key',
    default=None,
    help='Only show anchors of this document key',
)
@click.option(
    '--output-format',
    type=click.Choice(['console', 'json']),
    default='console',
    help='Output format (default: console)',
)
def anchors(
    input_dir,
    document_key,
    output_format,
    release,
    assignments,
    config_dir,
    log_level,
    log_file,
    workers,
):
    """
    List the anchors defined by each document under INPUT_DIR.

    Examples:

        docexpand anchors docs

        docexpand anchors docs --document delta-batch.md --output-format json
    """
    configure_logging(level=log_level, log_file=log_file, console_output=True)

    try:
        config = load_run_config(config_dir, release, assignments, workers)
        documents = CorpusReader(input_dir, config["corpus"]["patterns"]).read_documents()
    except (ValueError, yaml.YAMLError, OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise click.Abort()

    registry = DocumentAssembler.from_config(config).assemble(documents).registry
    entries = registry.to_dict()

    if document_key is not None:
        resolved = registry.resolve_key(document_key)
        if resolved is None:
            console.print(f"[red]Error: Document not found: {document_key}[/red]")
            raise click.Abort()
        entries = {resolved: entries[resolved]}

    if output_format == 'json':
        click.echo(json.dumps(entries, indent=2))
        return

    table = Table(title="Anchor Registry", show_header=True, header_style="bold magenta")
    table.add_column("Document", style="cyan", no_wrap=True)
    table.add_column("Anchors", justify="right", style="magenta")
    table.add_column("Names", style="white")

    for key, names in entries.items():
        table.add_row(escape(key), str(len(names)), escape(", ".join(names)))

    console.print(table)
