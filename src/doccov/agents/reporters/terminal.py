"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from doccov.agents.reporters.table import coverage_table
from doccov.models.coverage import CoverageStatus

if TYPE_CHECKING:
    from doccov.models.coverage import ProjectCoverage
    from doccov.utils.locales import LocalesHelper

console = Console()

_STATUS_COLORS = {
    CoverageStatus.LOW: "red",
    CoverageStatus.MEDIUM: "yellow",
    CoverageStatus.GOOD: "cyan",
    CoverageStatus.VERY_GOOD: "green",
}

_MAX_FILE_PATH_LENGTH = 60


class CLIReporter:
    """Rich terminal output reporter for coverage runs."""

    def __init__(self) -> None:
        """Initialize the CLI reporter."""
        self.console = console

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    def print_doc_coverage(
        self,
        coverage: ProjectCoverage,
        *,
        locales: LocalesHelper | None = None,
    ) -> None:
        """Print the per-entity documentation coverage table."""
        data = coverage_table(coverage, locales)
        table = Table(title=data.title, title_style="bold cyan", caption=data.caption)
        file_heading, type_heading, name_heading, statements_heading = data.header
        table.add_column(file_heading, style="bold")
        table.add_column(type_heading)
        table.add_column(name_heading)
        table.add_column(statements_heading, justify="right")

        for record, row in zip(coverage.files, data.rows, strict=True):
            color = _STATUS_COLORS[record.status]
            file_path, entity_type, name, statements = row
            table.add_row(
                _truncate(file_path, _MAX_FILE_PATH_LENGTH),
                entity_type,
                name,
                f"[{color}]{statements}[/{color}]",
            )

        if coverage.files:
            color = _STATUS_COLORS[coverage.status]
            table.add_section()
            table.add_row(
                "[bold]Overall[/bold]",
                "",
                "",
                f"[bold {color}]{coverage.count}%[/bold {color}]",
            )

        self.console.print(table)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return "…" + text[-(limit - 1) :]


reporter = CLIReporter()
