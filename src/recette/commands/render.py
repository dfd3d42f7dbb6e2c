"""Render command implementations: preview, print and PDF export."""

import asyncio
from pathlib import Path

import typer

from ..core import PrintBackend, RenderResult, Session
from ..errors import RecetteError
from ..models import Frame
from ..output import get_output_context
from ..services import BrowserPrintBackend, HtmlFileBackend, WeasyPrintBackend
from .common import fail, open_session


def _render(session: Session, frame: Frame, backend: PrintBackend) -> RenderResult:
    ctx = get_output_context()
    try:
        return asyncio.run(session.render(frame, backend))
    except RecetteError as exc:
        raise fail(ctx, exc) from None


def preview(
    file: Path = typer.Argument(..., help="Document file"),
    out: Path | None = typer.Option(None, "--out", "-o", help="Preview HTML file"),
) -> None:
    """Render an on-screen preview to an HTML file."""
    ctx = get_output_context()
    session = open_session(file, ctx)
    path = out or file.with_suffix(".preview.html")
    result = _render(session, Frame.PREVIEW, HtmlFileBackend(path))
    ctx.success(f"Preview written to {result.output}", {"path": str(result.output)})


def print_document(
    file: Path = typer.Argument(..., help="Document file"),
) -> None:
    """Open the browser print dialog for a test record."""
    ctx = get_output_context()
    session = open_session(file, ctx)
    result = _render(session, Frame.PRINT, BrowserPrintBackend())
    ctx.success(f"Print dialog opened for {result.output}", {"path": str(result.output)})


def export(
    file: Path = typer.Argument(..., help="Document file"),
    out: Path | None = typer.Option(None, "--out", "-o", help="PDF output file"),
) -> None:
    """Export a test record to PDF."""
    ctx = get_output_context()
    session = open_session(file, ctx)
    path = out or file.with_suffix(".pdf")
    result = _render(session, Frame.EXPORT, WeasyPrintBackend(path))
    ctx.success(f"PDF written to {result.output}", {"path": str(result.output)})
