"""Step command implementations."""

from pathlib import Path

import typer
from rich.markup import escape

from ..errors import RecetteError
from ..output import get_output_context
from ..services import ExternalEditorSurface
from .common import fail, open_session, save_session

step_app = typer.Typer(help="Step management commands")


@step_app.command("add")
def step_add(
    file: Path = typer.Argument(..., help="Document file"),
    title: str | None = typer.Option(None, "--title", "-t", help="Title for the new step"),
) -> None:
    """Append a new step."""
    ctx = get_output_context()
    session = open_session(file, ctx)
    try:
        step = session.store.add_step()
        if title is not None:
            session.store.update_step(step.id, title=title)
    except RecetteError as exc:
        raise fail(ctx, exc) from None
    save_session(session, file)
    step = session.document.steps[-1]
    ctx.success(f"Added {step.title} ({step.id})", {"id": step.id, "title": step.title})


@step_app.command("remove")
def step_remove(
    file: Path = typer.Argument(..., help="Document file"),
    step_id: str = typer.Argument(..., help="Step id"),
) -> None:
    """Remove a step. Unknown ids are ignored."""
    ctx = get_output_context()
    session = open_session(file, ctx)
    before = len(session.document.steps)
    session.store.remove_step(step_id)
    removed = len(session.document.steps) < before
    if removed:
        save_session(session, file)
        ctx.success(f"Removed step {step_id}", {"id": step_id, "removed": True})
    else:
        message = f"[yellow]No step {escape(step_id)}[/yellow]"
        ctx.result({"id": step_id, "removed": False}, message)


@step_app.command("title")
def step_title(
    file: Path = typer.Argument(..., help="Document file"),
    step_id: str = typer.Argument(..., help="Step id"),
    title: str = typer.Argument(..., help="New title"),
) -> None:
    """Rename a step."""
    ctx = get_output_context()
    session = open_session(file, ctx)
    try:
        session.store.update_step(step_id, title=title)
    except RecetteError as exc:
        raise fail(ctx, exc) from None
    save_session(session, file)
    ctx.success(f"Renamed step {step_id}", {"id": step_id, "title": title})


@step_app.command("edit")
def step_edit(
    file: Path = typer.Argument(..., help="Document file"),
    step_id: str = typer.Argument(..., help="Step id"),
    content_file: Path | None = typer.Option(
        None, "--content-file", "-c", help="Load markup from a file instead of the editor"
    ),
    editor: str | None = typer.Option(None, "--editor", help="Editor command"),
) -> None:
    """Edit a step's rich-text content."""
    ctx = get_output_context()
    session = open_session(file, ctx)

    if content_file is not None:
        try:
            session.store.update_step(step_id, content=content_file.read_text(encoding="utf-8"))
        except RecetteError as exc:
            raise fail(ctx, exc) from None
        save_session(session, file)
        ctx.success(f"Updated step {step_id}", {"id": step_id})
        return

    surface = ExternalEditorSurface(editor=editor)
    try:
        session.attach_surface(step_id, surface)
        failures = session.flush()
    except RecetteError as exc:
        raise fail(ctx, exc) from None
    if failures:
        raise fail(ctx, failures[0])

    changed = surface.open()
    session.close()
    if not changed:
        ctx.print("[yellow]No changes[/yellow]")
        return
    save_session(session, file)
    ctx.success(f"Updated step {step_id}", {"id": step_id})


@step_app.command("list")
def step_list(
    file: Path = typer.Argument(..., help="Document file"),
) -> None:
    """List steps in display order."""
    ctx = get_output_context()
    session = open_session(file, ctx)
    steps = session.document.steps
    if ctx.json_mode:
        ctx.print_json({"steps": [step.model_dump() for step in steps]})
        return
    if not steps:
        ctx.console.print("[dim]No steps[/dim]")
        return
    for index, step in enumerate(steps, start=1):
        title, step_id = escape(step.title), escape(step.id)
        ctx.console.print(f"{index}. [bold]{title}[/bold] [dim]{step_id}[/dim]")
