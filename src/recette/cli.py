"""Recette CLI: author test records and render them for print."""

import typer
from rich.console import Console

from recette import __version__

from .commands import (
    export,
    image,
    init,
    new,
    preview,
    print_document,
    save,
    set_field,
    show,
    sql,
    step_app,
)
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"recette {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="recette",
    help="Author test records and render them to print and PDF",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
) -> None:
    """Recette CLI - test record authoring."""
    configure_logging(verbosity=verbose, quiet=quiet, no_color=no_color)
    console = Console(no_color=no_color, highlight=False)
    set_output_context(OutputContext(console=console, json_mode=json_output))


app.command()(init)
app.command()(new)
app.command()(show)
app.command("set")(set_field)
app.command()(image)
app.command()(sql)
app.command()(save)
app.command()(preview)
app.command("print")(print_document)
app.command()(export)
app.add_typer(step_app, name="step")


if __name__ == "__main__":
    app()
