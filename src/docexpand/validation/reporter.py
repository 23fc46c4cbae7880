"""
Validation report generation and formatting.

Provides utilities for generating human-readable and machine-readable validation reports.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docexpand.logger import get_default_logger
from docexpand.validation.report import ValidationReport


logger = get_default_logger()
console = Console(legacy_windows=False)


class ValidationReporter:
    """Generates validation reports in multiple formats."""

    def __init__(self, output_dir: Optional[Path] = None, output_console: Optional[Console] = None):
        """
        Initialize validation reporter.

        Args:
            output_dir: Directory to save reports (optional)
            output_console: Rich console to display on (default: module console)
        """
        self.output_dir = Path(output_dir) if output_dir else None
        if self.output_dir:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        self.console = output_console or console

    def generate_summary_report(
        self,
        reports: Dict[str, ValidationReport],
        format: str = "console"
    ) -> Union[str, Table, Dict[str, Any]]:
        """
        Generate a summary report across all documents.

        Args:
            reports: Dictionary of validation reports keyed by document
            format: Output format ("console", "json", "text")

        Returns:
            Rich table, formatted string or dictionary
        """
        if format == "json":
            return self._generate_json_summary(reports)
        elif format == "text":
            return self._generate_text_summary(reports)
        else:
            return self._generate_console_summary(reports)

    def _generate_console_summary(self, reports: Dict[str, ValidationReport]) -> Table:
        """Generate console-formatted summary table."""
        table = Table(title="Validation Summary", show_header=True, header_style="bold magenta")
        table.add_column("Document", style="cyan", no_wrap=True)
        table.add_column("Status", justify="center")
        table.add_column("Tab Groups", justify="right", style="magenta")
        table.add_column("References", justify="right", style="magenta")
        table.add_column("Errors", justify="right", style="red")
        table.add_column("Warnings", justify="right", style="yellow")

        total_errors = 0
        total_warnings = 0

        for name, report in reports.items():
            errors = len(report.get_errors())
            warnings = len(report.get_warnings())

            if errors > 0:
                status = "[red]FAIL[/red]"
            elif warnings > 0:
                status = "[yellow]WARN[/yellow]"
            else:
                status = "[green]PASS[/green]"

            table.add_row(
                escape(name),
                status,
                str(report.statistics.get("tab_groups", 0)),
                str(report.statistics.get("references", 0)),
                str(errors),
                str(warnings),
            )

            total_errors += errors
            total_warnings += warnings

        overall_status = "[green]PASS[/green]" if total_errors == 0 else "[red]FAIL[/red]"
        table.add_row(
            "[bold]TOTAL[/bold]",
            overall_status,
            "",
            "",
            str(total_errors),
            str(total_warnings),
        )

        return table

    def _generate_text_summary(self, reports: Dict[str, ValidationReport]) -> str:
        """Generate plain text summary."""
        lines = []
        lines.append("=" * 60)
        lines.append("VALIDATION SUMMARY REPORT")
        lines.append("=" * 60)
        lines.append(f"Total Documents: {len(reports)}")
        lines.append("")

        total_errors = 0
        total_warnings = 0

        for name, report in reports.items():
            errors = report.get_errors()
            warnings = report.get_warnings()

            lines.append(f"Document: {name}")
            lines.append(f"  State: {report.state}")
            lines.append(f"  Errors: {len(errors)}")
            lines.append(f"  Warnings: {len(warnings)}")

            for issue in report.issues:
                lines.append(f"    - {issue.format()}")

            lines.append("")

            total_errors += len(errors)
            total_warnings += len(warnings)

        lines.append("=" * 60)
        lines.append("OVERALL SUMMARY")
        lines.append("=" * 60)
        lines.append(f"Errors: {total_errors}")
        lines.append(f"Warnings: {total_warnings}")
        lines.append(f"Overall Status: {'PASS' if total_errors == 0 else 'FAIL'}")

        return "\n".join(lines)

    def _generate_json_summary(self, reports: Dict[str, ValidationReport]) -> Dict[str, Any]:
        """Generate JSON summary."""
        summary: Dict[str, Any] = {
            "total_documents": len(reports),
            "documents": {},
        }

        total_errors = 0
        total_warnings = 0

        for name, report in reports.items():
            errors = len(report.get_errors())
            warnings = len(report.get_warnings())

            summary["documents"][name] = {
                "state": report.state,
                "version": report.version,
                "errors": errors,
                "warnings": warnings,
                "status": "pass" if errors == 0 else "fail",
                "statistics": report.statistics,
                "issues": [issue.to_dict() for issue in report.issues],
            }

            total_errors += errors
            total_warnings += warnings

        summary["overall"] = {
            "errors": total_errors,
            "warnings": total_warnings,
            "status": "pass" if total_errors == 0 else "fail",
        }

        return summary

    def save_report(
        self,
        reports: Dict[str, ValidationReport],
        filename: Optional[str] = None,
        format: str = "json"
    ) -> Path:
        """
        Save validation reports to file.

        Args:
            reports: Dictionary of validation reports
            filename: Custom filename (optional)
            format: Output format ("json", "text")

        Returns:
            Path to saved file
        """
        if not self.output_dir:
            raise ValueError("Output directory not specified")

        if format not in ("json", "text"):
            format = "json"

        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            extension = "json" if format == "json" else "txt"
            filename = f"validation_report_{timestamp}.{extension}"

        file_path = self.output_dir / filename

        if format == "json":
            content = self.generate_summary_report(reports, format="json")
            content["generated"] = datetime.now().isoformat()
            with open(file_path, 'w', encoding="utf-8") as f:
                json.dump(content, f, indent=2)
        else:
            content = self.generate_summary_report(reports, format="text")
            with open(file_path, 'w', encoding="utf-8") as f:
                f.write(content)

        logger.info(f"Validation report saved to {file_path}")
        return file_path

    def display_report(self, reports: Dict[str, ValidationReport], detailed: bool = False):
        """Display validation reports in console."""
        self.console.print("\n[bold blue]Validation Results[/bold blue]\n")

        self.console.print(self.generate_summary_report(reports, format="console"))

        failed = [
            (name, report) for name, report in reports.items()
            if len(report.get_errors()) > 0
        ]

        if failed:
            self.console.print("\n[bold red]Failed Documents:[/bold red]\n")

            for name, report in failed:
                self.console.print(f"[bold yellow]{name}:[/bold yellow]")
                for issue in report.get_errors():
                    self.console.print(f"  [red]✗[/red] {issue.kind.value} (line {issue.line}): {escape(issue.message)}", highlight=False)
                self.console.print("")

        with_warnings = [
            (name, report) for name, report in reports.items()
            if len(report.get_warnings()) > 0
        ]

        if with_warnings:
            self.console.print("[bold yellow]Warnings:[/bold yellow]\n")

            for name, report in with_warnings:
                self.console.print(f"[yellow]{name}:[/yellow]")
                for issue in report.get_warnings():
                    self.console.print(f"  [yellow]⚠[/yellow] {issue.kind.value} (line {issue.line}): {escape(issue.message)}", highlight=False)
                self.console.print("")

        if detailed:
            self._display_statistics(reports)

        total_errors = sum(len(report.get_errors()) for report in reports.values())
        if total_errors == 0:
            self.console.print("\n[bold green]✓ All validations passed![/bold green]")
        else:
            self.console.print(f"\n[bold red]✗ {total_errors} validation errors found[/bold red]")

    def _display_statistics(self, reports: Dict[str, ValidationReport]):
        """Show per-document statistics."""
        self.console.print("\n[bold blue]Detailed Statistics[/bold blue]\n")

        for name, report in reports.items():
            self.console.print(f"[bold cyan]{name}[/bold cyan]")
            self.console.print(f"  State: {report.state}")
            for key, value in report.statistics.items():
                self.console.print(f"    {key}: {value}")
            self.console.print("")
