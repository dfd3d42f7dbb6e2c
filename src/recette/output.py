"""Console and JSON output for recette commands.

Every command reports through the OutputContext installed by the CLI
callback. With --json, only JSON objects reach stdout.
"""

import json
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.markup import escape


@dataclass
class OutputContext:
    """Where and how a command reports its results."""

    console: Console
    json_mode: bool = False

    def print(self, message: str, style: str | None = None) -> None:
        """Print a console message; silent in JSON mode."""
        if not self.json_mode:
            self.console.print(message, style=style)

    def print_json(self, data: dict[str, Any]) -> None:
        if self.json_mode:
            # Accented labels (Étape, Vérifier) stay readable.
            print(json.dumps(data, indent=2, default=str, ensure_ascii=False))

    def result(self, data: dict[str, Any], message: str = "") -> None:
        """Report data as JSON, or message on the console."""
        if self.json_mode:
            self.print_json(data)
        elif message:
            self.console.print(message)

    def error(self, message: str, data: dict[str, Any] | None = None) -> None:
        # Messages quote user values like '[TMX]', which are not Rich markup.
        if self.json_mode:
            self.print_json({"error": message, **(data or {})})
        else:
            self.console.print(f"[red]Error: {escape(message)}[/red]")

    def success(self, message: str, data: dict[str, Any] | None = None) -> None:
        if self.json_mode:
            self.print_json({"success": message, **(data or {})})
        else:
            self.console.print(f"[green]{escape(message)}[/green]")


_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Return the context set by the CLI, or a plain console one."""
    if _ctx is None:
        return OutputContext(Console())
    return _ctx


def set_output_context(ctx: OutputContext | None) -> None:
    global _ctx
    _ctx = ctx
