"""Authoring session: one document, its editing surfaces and its renders.

The session subscribes to the store and reconciles editor adapters after
every change: adapters of surviving steps receive the new content
(inbound sync), adapters of removed steps are unbound. Surfaces are
attached at any time but only mounted on flush(), which the host calls
once its current render pass has completed.
"""

import logging
from functools import partial
from pathlib import Path

from ..config import RecetteConfig
from ..errors import StepNotFound, SurfaceUnavailable
from ..models import Document, Frame
from .codec import decode, encode, export_filename
from .editor import AdapterState, EditingSurface, EditorAdapter
from .render import PrintBackend, RenderCoordinator, RenderingPipeline, RenderResult
from .store import DocumentStore

logger = logging.getLogger(__name__)


class Session:
    """Wires a DocumentStore to editor adapters and the render coordinator."""

    def __init__(
        self,
        store: DocumentStore | None = None,
        config: RecetteConfig | None = None,
    ) -> None:
        self.config = config or RecetteConfig()
        self.store = store or DocumentStore()
        self.pipeline = RenderingPipeline(self.config.render)
        self.renderer = RenderCoordinator(
            self.pipeline, settle_delay=self.config.render.settle_delay
        )
        self._adapters: dict[str, EditorAdapter] = {}
        self._unsubscribe = self.store.subscribe(self._reconcile)

    @property
    def document(self) -> Document:
        return self.store.document

    def adapter(self, step_id: str) -> EditorAdapter | None:
        return self._adapters.get(step_id)

    def attach_surface(self, step_id: str, surface: EditingSurface) -> EditorAdapter:
        """Attach a surface to a step. Mounting is deferred to flush().

        Raises:
            StepNotFound: If no step has step_id
        """
        if self.document.find_step(step_id) is None:
            raise StepNotFound(f"Step not found: {step_id}")
        adapter = self._adapters.get(step_id)
        if adapter is None:
            adapter = EditorAdapter(
                step_id,
                on_change=partial(self._apply_edit, step_id),
                toolbar=self.config.editor.toolbar,
            )
            self._adapters[step_id] = adapter
        adapter.attach(surface)
        return adapter

    def flush(self) -> list[SurfaceUnavailable]:
        """Mount every pending surface with its step's current content.

        Failed mounts leave their step in degraded mode: its content is
        kept and it is not editable until retry().

        Returns:
            Errors for the surfaces that failed to mount
        """
        failures: list[SurfaceUnavailable] = []
        for step_id, adapter in list(self._adapters.items()):
            if adapter.state is not AdapterState.PENDING:
                continue
            try:
                self._bind(step_id, adapter)
            except SurfaceUnavailable as exc:
                logger.warning("Step %s is read-only: %s", step_id, exc)
                failures.append(exc)
        return failures

    def retry(self, step_id: str, surface: EditingSurface | None = None) -> EditorAdapter:
        """Retry binding a step whose surface failed to mount.

        Raises:
            StepNotFound: If no adapter exists for step_id
            SurfaceUnavailable: If the surface still refuses to mount
        """
        adapter = self._adapters.get(step_id)
        if adapter is None:
            raise StepNotFound(f"No editing surface attached for step: {step_id}")
        if surface is not None:
            adapter.attach(surface)
        self._bind(step_id, adapter)
        return adapter

    def _bind(self, step_id: str, adapter: EditorAdapter) -> None:
        step = self.document.find_step(step_id)
        if step is None:
            raise StepNotFound(f"Step not found: {step_id}")
        adapter.bind(step.content)

    def _apply_edit(self, step_id: str, markup: str) -> None:
        self.store.update_step(step_id, content=markup)

    def _reconcile(self, previous: Document, current: Document) -> None:
        live = set(current.step_ids())
        for step_id in [sid for sid in self._adapters if sid not in live]:
            self._adapters.pop(step_id).unbind()
        for step in current.steps:
            adapter = self._adapters.get(step.id)
            if adapter is None:
                continue
            try:
                adapter.sync(step.content)
            except SurfaceUnavailable as exc:
                logger.warning("Step %s is read-only: %s", step.id, exc)

    def restore(self, raw: bytes | str) -> Document:
        """Replace the document with a serialized one. All-or-nothing.

        Raises:
            MalformedDocument: If raw does not decode; the document is unchanged
        """
        document = decode(raw)
        return self.store.replace(document)

    def save(self) -> bytes:
        return encode(self.document)

    def export_name(self) -> str:
        export = self.config.export
        return export_filename(
            self.document, prefix=export.filename_prefix, fallback=export.fallback_name
        )

    async def render(self, frame: Frame, backend: PrintBackend) -> RenderResult:
        """Trigger a render from the current document."""
        return await self.renderer.run(lambda: self.store.document, frame, backend)

    def close(self) -> None:
        """Unbind every surface and stop observing the store."""
        for adapter in self._adapters.values():
            adapter.unbind()
        self._adapters.clear()
        self._unsubscribe()


def write_document(path: Path, document: Document) -> Path:
    """Write a document to path in the interchange format."""
    path.write_bytes(encode(document))
    return path


def read_document(path: Path) -> Document:
    """Read and validate a document file.

    Raises:
        MalformedDocument: If the file does not hold a valid document
    """
    return decode(path.read_bytes())
