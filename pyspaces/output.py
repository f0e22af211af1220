"""Console output formatting for the pyspaces CLI."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape as _escape
from rich.table import Table


class OutputFormatter:
    """Formats messages, tables and JSON for the terminal."""

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress non-essential output
            console: Rich console for stdout (created if not provided)
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        """Print a plain line."""
        if self.quiet or self.json_output:
            return
        self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if self.quiet or self.json_output:
            return
        self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        """Print a success message in green."""
        if self.quiet or self.json_output:
            return
        self.console.print(f"[green]{_escape(message)}[/green]")

    def warning(self, message: str) -> None:
        """Print a warning to stderr."""
        if self.quiet:
            return
        self.err_console.print(f"[yellow]{_escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        """Print an error to stderr. Errors are shown even in quiet mode."""
        self.err_console.print(f"[red]Error:[/red] {_escape(message)}")

    def output_json(self, data: Any) -> None:
        """Print data as JSON."""
        self.console.print_json(json.dumps(data, default=str))

    def print_table(
        self, title: str, columns: list[str], rows: list[list[str]]
    ) -> None:
        """Print rows as a rich table."""
        if self.quiet:
            return
        table = Table(title=title)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*[_escape(str(v)) for v in row])
        self.console.print(table)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a titled list of label/value pairs."""
        if self.quiet:
            return
        if self.json_output:
            self.output_json(dict(items))
            return
        self.console.print(f"\n[bold]{_escape(title)}[/bold]")
        for label, value in items:
            self.console.print(f"  {_escape(label)}: {_escape(value)}")
