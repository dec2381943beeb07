"""Console output formatting for the Codex sync CLI."""

import json
from typing import Any, Optional

from rich.console import Console


class OutputFormatter:
    """Prints status messages with rich markup.

    Errors always go to stderr, even in quiet mode. JSON mode silences the
    prose so that ``print_json`` produces the only document on stdout.
    """

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        self.json_output = json_output
        self.quiet = quiet or json_output
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        if not self.quiet:
            self.console.print(message)

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[blue]ℹ[/blue] {message}")

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[yellow]⚠[/yellow] {message}")

    def error(self, message: str) -> None:
        self.err_console.print(f"[red]✗[/red] {message}")

    def print_json(self, data: Any) -> None:
        """Print data as a JSON document (stdout, no markup)."""
        self.console.print_json(json.dumps(data))
