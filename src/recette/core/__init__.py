"""Core business logic for recette.

This package holds the document model's behaviour:
- store: pure document mutations and the DocumentStore owning the value
- editor: EditorAdapter keeping an editing surface in step with a step
- codec: JSON interchange encode/decode with schema validation
- render: RenderingPipeline and the busy-guarded RenderCoordinator
- session: Session wiring the above together
"""

from .codec import decode, encode, export_filename
from .editor import (
    AdapterState,
    EditingSurface,
    EditorAdapter,
    SurfaceMountError,
    markup_equivalent,
    normalize_markup,
)
from .render import (
    PrintBackend,
    RenderCoordinator,
    RenderingPipeline,
    RenderResult,
    format_date,
    jira_digits,
    sql_query,
)
from .session import Session, read_document, write_document
from .store import (
    FIELD_KEYS,
    DocumentStore,
    add_step,
    new_document,
    remove_step,
    set_field,
    update_step,
    validate_document,
)

__all__ = [
    "FIELD_KEYS",
    "AdapterState",
    "DocumentStore",
    "EditingSurface",
    "EditorAdapter",
    "PrintBackend",
    "RenderCoordinator",
    "RenderResult",
    "RenderingPipeline",
    "Session",
    "SurfaceMountError",
    "add_step",
    "decode",
    "encode",
    "export_filename",
    "format_date",
    "jira_digits",
    "markup_equivalent",
    "new_document",
    "normalize_markup",
    "read_document",
    "remove_step",
    "set_field",
    "sql_query",
    "update_step",
    "validate_document",
    "write_document",
]
