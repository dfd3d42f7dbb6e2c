"""Document store: the canonical document value and its mutations.

The module-level functions are pure: each takes a Document and returns a
new one, never touching the input. DocumentStore holds the current value,
applies those functions and notifies listeners after a successful change.
A failing operation raises before the current value is replaced.
"""

import datetime
import logging
import uuid
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from ..constants import STEP_TITLE_TEMPLATE
from ..errors import InvalidDocument, InvalidField, StepNotFound
from ..models import Conclusion, Document, Environment, RecordType, Step

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]
Listener = Callable[[Document, Document], None]

# Settable top-level fields, keyed by both persisted and attribute names
FIELD_KEYS: dict[str, str] = {
    "jiraNumber": "jira_number",
    "jiraName": "jira_name",
    "type": "record_type",
    "recordType": "record_type",
    "date": "date",
    "environment": "environment",
    "conclusion": "conclusion",
    "localImage": "attached_image",
    "attachedImage": "attached_image",
}
FIELD_KEYS.update({name: name for name in set(FIELD_KEYS.values())})

STEP_FIELDS = frozenset({"title", "content"})


def new_step_id() -> str:
    return str(uuid.uuid4())


def new_document(
    today: datetime.date | None = None,
    id_factory: IdFactory = new_step_id,
) -> Document:
    """Create the initial document for a session: one untouched step."""
    return Document(
        jira_number="",
        jira_name="",
        record_type=RecordType.TMD,
        date=today or datetime.date.today(),
        environment=Environment.FRECMCOR,
        conclusion=Conclusion.OK,
        attached_image=None,
        steps=(Step(id=id_factory(), title=STEP_TITLE_TEMPLATE.format(n=1), content=""),),
    )


def set_field(document: Document, key: str, value: Any) -> Document:
    """Replace one top-level scalar field.

    Raises:
        InvalidField: If key is not a settable field or value fails validation
    """
    field_name = FIELD_KEYS.get(key)
    if field_name is None:
        raise InvalidField(f"Unknown field: {key}")

    data = document.model_dump()
    data[field_name] = value
    try:
        return Document.model_validate(data)
    except ValidationError as exc:
        raise InvalidField(f"Invalid value for {key}: {value!r}") from exc


def add_step(document: Document, id_factory: IdFactory = new_step_id) -> Document:
    """Append a new untouched step titled after its 1-based position."""
    existing = set(document.step_ids())
    step_id = id_factory()
    if step_id in existing:
        raise InvalidDocument(f"Step id already in use: {step_id}")
    title = STEP_TITLE_TEMPLATE.format(n=len(document.steps) + 1)
    step = Step(id=step_id, title=title, content="")
    return document.model_copy(update={"steps": (*document.steps, step)})


def remove_step(document: Document, step_id: str) -> Document:
    """Remove the step with step_id. Unknown ids leave the document as is.

    Remaining titles are user data and are not renumbered.
    """
    if document.find_step(step_id) is None:
        return document
    steps = tuple(step for step in document.steps if step.id != step_id)
    return document.model_copy(update={"steps": steps})


def update_step(document: Document, step_id: str, **fields: str) -> Document:
    """Merge title and/or content into the matching step.

    Raises:
        InvalidField: If fields names anything other than title or content
        StepNotFound: If no step has step_id
    """
    unknown = set(fields) - STEP_FIELDS
    if unknown:
        raise InvalidField(f"Unknown step field(s): {', '.join(sorted(unknown))}")

    step = document.find_step(step_id)
    if step is None:
        raise StepNotFound(f"Step not found: {step_id}")

    try:
        updated = Step.model_validate({**step.model_dump(), **fields})
    except ValidationError as exc:
        raise InvalidField(f"Invalid step fields: {sorted(fields)}") from exc

    steps = tuple(updated if s.id == step_id else s for s in document.steps)
    return document.model_copy(update={"steps": steps})


def validate_document(document: Any) -> Document:
    """Re-check a candidate replacement against the document invariants.

    Raises:
        InvalidDocument: If the candidate is not a valid document
    """
    try:
        if isinstance(document, Document):
            return Document.model_validate(document.model_dump())
        return Document.model_validate(document)
    except ValidationError as exc:
        raise InvalidDocument(str(exc)) from exc


class DocumentStore:
    """Owner of the canonical document value.

    Listeners are called with (previous, current) after every change that
    produced a different value. No-op operations do not notify.
    """

    def __init__(
        self,
        document: Document | None = None,
        id_factory: IdFactory = new_step_id,
    ) -> None:
        self._id_factory = id_factory
        self._document = document if document is not None else new_document(
            id_factory=id_factory
        )
        self._listeners: list[Listener] = []

    @property
    def document(self) -> Document:
        return self._document

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, document: Document, action: str) -> Document:
        previous = self._document
        if document == previous:
            logger.debug("%s: no change", action)
            return previous
        self._document = document
        logger.debug("%s: committed (%d steps)", action, len(document.steps))
        for listener in list(self._listeners):
            listener(previous, document)
        return document

    def set_field(self, key: str, value: Any) -> Document:
        return self._commit(set_field(self._document, key, value), f"set {key}")

    def add_step(self) -> Step:
        """Append a new step and return it."""
        document = self._commit(add_step(self._document, self._id_factory), "add step")
        return document.steps[-1]

    def remove_step(self, step_id: str) -> Document:
        return self._commit(remove_step(self._document, step_id), f"remove step {step_id}")

    def update_step(self, step_id: str, **fields: str) -> Document:
        return self._commit(
            update_step(self._document, step_id, **fields), f"update step {step_id}"
        )

    def replace(self, document: Any) -> Document:
        """Substitute the whole document (restore). All-or-nothing.

        Raises:
            InvalidDocument: If the replacement breaks the invariants; the
                current document is retained
        """
        return self._commit(validate_document(document), "replace")
