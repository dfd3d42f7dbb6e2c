"""Helpers shared by command implementations."""

import tomllib
from pathlib import Path

import typer
from pydantic import ValidationError

from ..config import RecetteConfig, load_config
from ..constants import CONFIG_FILENAME
from ..core import DocumentStore, Session, read_document, write_document
from ..errors import RecetteError
from ..output import OutputContext


def load_cli_config(ctx: OutputContext) -> RecetteConfig:
    """Load recette.toml from the current directory, or exit with code 1."""
    try:
        return load_config(Path.cwd())
    except (tomllib.TOMLDecodeError, ValidationError) as e:
        ctx.error(f"Invalid {CONFIG_FILENAME}: {e}", {"file": CONFIG_FILENAME})
        raise typer.Exit(1) from None


def open_session(path: Path, ctx: OutputContext) -> Session:
    """Load a document file into a new session, or exit with code 1."""
    if not path.exists():
        ctx.error(f"Document not found: {path}")
        raise typer.Exit(1)
    config = load_cli_config(ctx)
    try:
        document = read_document(path)
    except RecetteError as exc:
        ctx.error(str(exc), {"file": str(path)})
        raise typer.Exit(1) from None
    return Session(store=DocumentStore(document), config=config)


def save_session(session: Session, path: Path) -> None:
    write_document(path, session.document)


def fail(ctx: OutputContext, exc: RecetteError) -> typer.Exit:
    """Report a domain error and return the Exit to raise."""
    ctx.error(str(exc), {"type": type(exc).__name__})
    return typer.Exit(1)
