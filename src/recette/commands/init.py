"""Init command implementation."""

from pathlib import Path

from rich.markup import escape

from ..config import write_config_template
from ..constants import CONFIG_FILENAME
from ..output import get_output_context


def init() -> None:
    """Write a recette.toml config template in the current directory."""
    ctx = get_output_context()
    config_path = Path.cwd() / CONFIG_FILENAME

    if config_path.exists():
        ctx.console.print(f"[yellow]Config already exists:[/yellow] {escape(str(config_path))}")
        return

    write_config_template(Path.cwd())
    ctx.success(f"Created config template: {config_path}", {"path": str(config_path)})
