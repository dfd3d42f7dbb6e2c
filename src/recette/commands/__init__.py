"""CLI command implementations for recette.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .document import image, new, save, set_field, show, sql
from .init import init
from .render import export, preview, print_document
from .step import step_add, step_app, step_edit, step_list, step_remove, step_title

__all__ = [
    "export",
    "image",
    "init",
    "new",
    "preview",
    "print_document",
    "save",
    "set_field",
    "show",
    "sql",
    "step_add",
    "step_app",
    "step_edit",
    "step_list",
    "step_remove",
    "step_title",
]
