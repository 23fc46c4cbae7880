"""
Validate command for checking a documentation corpus.

Runs the full assembly pipeline over every document and reports every
unresolved placeholder, malformed tab group and broken link in one pass.
"""

import json
import click
import yaml
from pathlib import Path
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from docexpand.cli import cli, common_options, load_run_config, placeholder_options
from docexpand.ingestion.reader import CorpusReader
from docexpand.logger import configure_logging
from docexpand.processing.assembler import DocumentAssembler
from docexpand.validation.report import build_reports
from docexpand.validation.reporter import ValidationReporter


console = Console(legacy_windows=False)


@cli.command()
@common_options
@placeholder_options
@click.argument(
    'input_dir',
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option(
    '--output-format',
    type=click.Choice(['console', 'json', 'text']),
    default='console',
    help='Output format for validation report (default: console)',
)
@click.option(
    '--save-report',
    is_flag=True,
    help='Save validation report to file',
)
@click.option(
    '--output-dir',
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help='Directory to save validation reports (default: ./validation_reports)',
)
@click.option(
    '--detailed',
    is_flag=True,
    help='Show per-document statistics',
)
@click.pass_context
def validate(
    ctx,
    input_dir,
    release,
    assignments,
    output_format,
    save_report,
    output_dir,
    detailed,
    config_dir,
    log_level,
    log_file,
    workers,
):
    """
    Validate every document under INPUT_DIR.

    Checks performed:
    - Placeholder substitution (unknown placeholders are warnings)
    - Code-tab groups (unclosed fences, empty or duplicate language tags)
    - Cross-references (missing documents, missing anchors)

    Every error is printed to standard error, one per line. Exits with
    status 1 when any error is found.

    Examples:

        # Validate a corpus for a release
        docexpand validate docs --version 3.5.0

        # Machine-readable report
        docexpand validate docs --version 3.5.0 --output-format json

        # Save the report to a file
        docexpand validate docs --save-report --output-dir reports
    """
    configure_logging(level=log_level, log_file=log_file, console_output=True)

    try:
        config = load_run_config(config_dir, release, assignments, workers)
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error: Invalid configuration: {escape(str(e))}[/red]")
        raise click.Abort()

    placeholders = config["placeholders"]["values"]
    version = placeholders.get("VERSION", "")

    if output_format == 'console':
        console.print("\n[bold blue]Documentation Corpus - Validate[/bold blue]\n")
        console.print(f"[cyan]Input directory:[/cyan] {input_dir}")
        console.print(f"[cyan]Version:[/cyan] {version or '(not set)'}")
        console.print(f"[cyan]Placeholders:[/cyan] {', '.join(sorted(placeholders)) or '(none)'}")
        console.print("")

    try:
        documents = CorpusReader(input_dir, config["corpus"]["patterns"]).read_documents()
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error reading corpus: {escape(str(e))}[/red]")
        raise click.Abort()

    if not documents:
        console.print(f"[yellow]No documents found in {input_dir}[/yellow]")
        return

    assembler = DocumentAssembler.from_config(config)
    if output_format == 'console':
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Validating {len(documents)} documents...", total=None)
            result = assembler.assemble(documents)
    else:
        result = assembler.assemble(documents)

    reports = build_reports(result, version)

    # Set default output directory for validation reports
    if save_report and output_dir is None:
        output_dir = Path("validation_reports")

    reporter = ValidationReporter(output_dir if save_report else None, output_console=console)

    if output_format == 'console':
        reporter.display_report(reports, detailed=detailed)
    elif output_format == 'json':
        click.echo(json.dumps(reporter.generate_summary_report(reports, format='json'), indent=2))
    else:
        click.echo(reporter.generate_summary_report(reports, format='text'))

    if save_report:
        try:
            saved_path = reporter.save_report(reports, format=output_format)
            if output_format == 'console':
                console.print(f"\n[green]Validation report saved to: {saved_path}[/green]")
        except OSError as e:
            console.print(f"\n[yellow]Warning: Could not save report: {escape(str(e))}[/yellow]")

    for line in result.error_lines():
        click.echo(line, err=True)

    if not result.is_valid:
        ctx.exit(1)
