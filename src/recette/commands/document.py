"""Document command implementations."""

from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from ..core import DocumentStore, Session, format_date, new_document, sql_query, write_document
from ..errors import RecetteError
from ..output import get_output_context
from ..services import image_to_data_uri
from .common import fail, load_cli_config, open_session, save_session


def new(
    out: Path | None = typer.Option(
        None, "--out", "-o", help="Output file (defaults to the export name)"
    ),
    number: str = typer.Option("", "--number", "-n", help="JIRA number"),
    name: str = typer.Option("", "--name", help="JIRA name"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """Create a new test record with one empty step."""
    ctx = get_output_context()
    config = load_cli_config(ctx)
    session = Session(store=DocumentStore(new_document()), config=config)
    try:
        if number:
            session.store.set_field("jiraNumber", number)
        if name:
            session.store.set_field("jiraName", name)
    except RecetteError as exc:
        raise fail(ctx, exc) from None

    path = out or Path.cwd() / session.export_name()
    if path.exists() and not force:
        ctx.error(f"File already exists: {path} (use --force to overwrite)")
        raise typer.Exit(1)

    write_document(path, session.document)
    ctx.success(f"Created {path}", {"path": str(path), "steps": session.document.step_ids()})


def show(
    file: Path = typer.Argument(..., help="Document file"),
) -> None:
    """Show a summary of a test record."""
    ctx = get_output_context()
    session = open_session(file, ctx)
    document = session.document

    if ctx.json_mode:
        ctx.print_json(document.model_dump(mode="json", by_alias=True))
        return

    ctx.console.print(f"\n[bold]JIRA:[/bold] {escape(document.jira_number or '-')}")
    ctx.console.print(f"[bold]Name:[/bold] {escape(document.jira_name or '-')}")
    ctx.console.print(f"[bold]Type:[/bold] {document.record_type.value}")
    ctx.console.print(f"[bold]Date:[/bold] {format_date(document.date)}")
    ctx.console.print(f"[bold]Environment:[/bold] {document.environment.value}")
    style = "green" if document.conclusion.passed else "red"
    ctx.console.print(f"[bold]Conclusion:[/bold] [{style}]{document.conclusion.value}[/{style}]")
    ctx.console.print(f"[bold]Screenshot:[/bold] {'yes' if document.attached_image else 'no'}")

    table = Table(title=f"Steps ({len(document.steps)})")
    table.add_column("#", justify="right")
    table.add_column("Id")
    table.add_column("Title")
    table.add_column("Content")
    for index, step in enumerate(document.steps, start=1):
        table.add_row(
            str(index),
            escape(step.id),
            escape(step.title),
            f"{len(step.content)} chars" if step.content else "[dim]empty[/dim]",
        )
    ctx.console.print(table)


def set_field(
    file: Path = typer.Argument(..., help="Document file"),
    key: str = typer.Argument(..., help="Field name (jiraNumber, jiraName, type, date, ...)"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set one header field of a test record."""
    ctx = get_output_context()
    session = open_session(file, ctx)
    try:
        session.store.set_field(key, value)
    except RecetteError as exc:
        raise fail(ctx, exc) from None
    save_session(session, file)
    ctx.success(f"Set {key} = {value}", {"field": key, "value": value})


def image(
    file: Path = typer.Argument(..., help="Document file"),
    image_path: Path | None = typer.Argument(None, help="Screenshot image file"),
    clear: bool = typer.Option(False, "--clear", help="Remove the attached screenshot"),
) -> None:
    """Attach or remove the query execution screenshot."""
    ctx = get_output_context()
    if image_path is None and not clear:
        ctx.error("Provide an image file or --clear")
        raise typer.Exit(1)

    session = open_session(file, ctx)
    try:
        value = None if clear else image_to_data_uri(image_path)
        session.store.set_field("attachedImage", value)
    except RecetteError as exc:
        raise fail(ctx, exc) from None
    save_session(session, file)
    ctx.success("Screenshot removed" if clear else f"Attached {image_path}")


def sql(
    file: Path = typer.Argument(..., help="Document file"),
) -> None:
    """Print the script lookup query derived from the JIRA number."""
    ctx = get_output_context()
    session = open_session(file, ctx)
    query = sql_query(session.document.jira_number)
    if ctx.json_mode:
        ctx.print_json({"sql": query})
    else:
        typer.echo(query)


def save(
    file: Path = typer.Argument(..., help="Document file"),
    directory: Path = typer.Option(Path("."), "--dir", "-d", help="Destination directory"),
) -> None:
    """Save a copy of a test record under its export name."""
    ctx = get_output_context()
    session = open_session(file, ctx)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / session.export_name()
    path.write_bytes(session.save())
    ctx.success(f"Saved {path}", {"path": str(path)})
