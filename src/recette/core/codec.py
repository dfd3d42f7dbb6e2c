"""Persistence codec: documents to and from the JSON interchange format.

Decoding is a schema check, not a best-effort load. Any structural
violation raises MalformedDocument and nothing is applied, so the caller's
in-memory document stays untouched.
"""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from ..constants import EXPORT_FALLBACK_NAME, EXPORT_FILENAME_PREFIX, SCHEMA_VERSION
from ..errors import MalformedDocument
from ..models import Document

logger = logging.getLogger(__name__)

VERSION_KEY = "version"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def to_data(document: Document) -> dict[str, Any]:
    """Return the interchange structure for a document, version tag first."""
    return {VERSION_KEY: SCHEMA_VERSION, **document.model_dump(mode="json", by_alias=True)}


def encode(document: Document) -> bytes:
    """Serialize a document. All fields are present, including empty steps."""
    return json.dumps(to_data(document), indent=2, ensure_ascii=False).encode("utf-8")


def from_data(data: Any) -> Document:
    """Validate an already parsed interchange structure.

    Raises:
        MalformedDocument: If data is not a valid document
    """
    if not isinstance(data, dict):
        raise MalformedDocument(f"Expected a JSON object, got {type(data).__name__}")

    payload = dict(data)
    version = payload.pop(VERSION_KEY, SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise MalformedDocument(f"Unsupported document version: {version!r}")
    if "steps" not in payload:
        raise MalformedDocument("Missing required field: steps")

    try:
        return Document.model_validate(payload)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise MalformedDocument(f"Invalid document: {errors}") from exc


def decode(raw: bytes | str) -> Document:
    """Parse and validate serialized bytes.

    Raises:
        MalformedDocument: If raw is not valid JSON or not a valid document
    """
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedDocument(f"Not a valid JSON document: {exc}") from exc
    document = from_data(data)
    logger.debug("Decoded document with %d steps", len(document.steps))
    return document


def export_filename(
    document: Document,
    prefix: str = EXPORT_FILENAME_PREFIX,
    fallback: str = EXPORT_FALLBACK_NAME,
) -> str:
    """Deterministic download name derived from the JIRA number."""
    stem = _UNSAFE_FILENAME_CHARS.sub("-", document.jira_number.strip()).strip("-")
    return f"{prefix}-{stem or fallback}.json"
