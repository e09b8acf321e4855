"""Console output formatting for the CLI and the sync engine."""

import json
import sys
from typing import Any, Optional

from rich.console import Console
from rich.table import Table

from .utils import format_size


class OutputFormatter:
    """Writes human-readable or JSON output through rich consoles.

    Informational messages are suppressed in quiet mode and in JSON mode;
    warnings and errors always go to stderr.
    """

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize the formatter.

        Args:
            json_output: Emit JSON documents instead of formatted text
            quiet: Suppress non-essential output
        """
        self.json_output = json_output
        self.quiet = quiet or json_output
        self.console = Console(soft_wrap=True)
        self.err_console = Console(stderr=True, soft_wrap=True)

    def print(self, message: str = "") -> None:
        if not self.quiet:
            self.console.print(message, highlight=False)

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(message, highlight=False)

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[green]✓[/green] {message}", highlight=False)

    def warning(self, message: str) -> None:
        self.err_console.print(f"[yellow]Warning:[/yellow] {message}", highlight=False)

    def error(self, message: str) -> None:
        self.err_console.print(f"[red]Error:[/red] {message}", highlight=False)

    def output_json(self, data: Any) -> None:
        """Write data as a JSON document to stdout."""
        sys.stdout.write(json.dumps(data, indent=2, default=str) + "\n")

    def output_table(
        self,
        columns: list[str],
        rows: list[list[Any]],
        title: Optional[str] = None,
    ) -> None:
        """Render rows as a table.

        Args:
            columns: Column headers
            rows: Row values (converted with str)
            title: Optional table title
        """
        table = Table(title=title)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*("" if value is None else str(value) for value in row))
        self.console.print(table)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a titled list of label/value pairs."""
        if self.quiet:
            return
        self.console.print(f"\n[bold]{title}[/bold]")
        for label, value in items:
            self.console.print(f"  {label}: {value}", highlight=False)

    def format_size(self, size_bytes: int) -> str:
        return format_size(size_bytes)
