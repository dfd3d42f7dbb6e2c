"""Editor adapter: keeps one editing surface in step with one step's content.

The surface is externally owned mutable state. Synchronization has two
declared directions:

- outbound (surface -> store): the surface's change notifications are the
  only path by which user edits reach the step content.
- inbound (store -> surface): a content change that did not come from the
  surface's own last notification overwrites the surface buffer, unless
  the buffer already holds equivalent markup.

The adapter remembers the last value it emitted so an outbound change
echoed back by the store is treated as already synchronized.
"""

import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Protocol

from ..constants import EMPTY_SURFACE_MARKUP
from ..errors import SurfaceUnavailable

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str], None]


class SurfaceMountError(RuntimeError):
    """Raised by a surface when the host refuses to mount it."""


class EditingSurface(Protocol):
    """Rich-text editing surface consumed as an opaque service."""

    buffer: str

    def mount(self, toolbar: Sequence[str]) -> None:
        """Mount the surface empty with the given toolbar capabilities."""
        ...

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        """Deliver the buffer markup on every change. Returns an unsubscribe function."""
        ...


def normalize_markup(markup: str) -> str:
    """Map the surface's empty-document placeholder to the empty string."""
    if markup == EMPTY_SURFACE_MARKUP:
        return ""
    return markup


def markup_equivalent(left: str, right: str) -> bool:
    return normalize_markup(left) == normalize_markup(right)


class AdapterState(str, Enum):
    """Binding lifecycle of an adapter."""

    UNBOUND = "unbound"
    PENDING = "pending"
    BOUND = "bound"
    FAILED = "failed"


class EditorAdapter:
    """Bridge between one step's content and one editing surface.

    Args:
        step_id: Id of the step this adapter serves.
        on_change: Called with the new markup for each user edit.
        toolbar: Capabilities the surface is mounted with.
    """

    def __init__(
        self,
        step_id: str,
        on_change: ChangeCallback,
        toolbar: Sequence[str] = (),
    ) -> None:
        self.step_id = step_id
        self._on_change = on_change
        self._toolbar = tuple(toolbar)
        self._surface: EditingSurface | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._last_emitted: str | None = None
        self._known = ""
        self._writing = False
        self.state = AdapterState.UNBOUND

    @property
    def surface(self) -> EditingSurface | None:
        return self._surface

    @property
    def is_bound(self) -> bool:
        return self.state is AdapterState.BOUND

    def attach(self, surface: EditingSurface) -> None:
        """Record a surface whose mount is deferred until bind()."""
        if self.is_bound:
            return
        self._surface = surface
        self.state = AdapterState.PENDING

    def bind(self, content: str, surface: EditingSurface | None = None) -> None:
        """Mount the surface, load content into it and subscribe to changes.

        Binding an already bound adapter is a no-op. A failed bind may be
        retried by calling bind() again.

        Raises:
            SurfaceUnavailable: If there is no surface or it refuses to mount
        """
        if self.is_bound:
            return
        if surface is not None:
            self._surface = surface
        if self._surface is None:
            self.state = AdapterState.FAILED
            raise SurfaceUnavailable(f"No editing surface attached for step {self.step_id}")

        try:
            self._surface.mount(self._toolbar)
        except SurfaceMountError as exc:
            self.state = AdapterState.FAILED
            logger.warning("Editing surface for step %s failed to mount: %s", self.step_id, exc)
            raise SurfaceUnavailable(
                f"Editing surface for step {self.step_id} is unavailable: {exc}"
            ) from exc

        self._unsubscribe = self._surface.subscribe(self._handle_surface_change)
        self.state = AdapterState.BOUND
        self._last_emitted = None
        self._known = ""
        self.sync(content)
        logger.debug("Bound editing surface for step %s", self.step_id)

    def unbind(self) -> None:
        """Release the subscription. No further notifications are delivered."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._surface = None
        self._last_emitted = None
        self._known = ""
        self.state = AdapterState.UNBOUND
        logger.debug("Unbound editing surface for step %s", self.step_id)

    def sync(self, content: str) -> bool:
        """Apply the step's content to the surface (inbound direction).

        Returns:
            True if the surface buffer was written, False otherwise

        Raises:
            SurfaceUnavailable: If the surface rejects the write; the adapter
                is left FAILED and can be rebound
        """
        if not self.is_bound or self._surface is None:
            # Content stays in the document and is loaded on bind.
            return False
        echoed = self._last_emitted is not None and content == self._last_emitted
        self._known = content
        if echoed:
            return False
        if markup_equivalent(self._surface.buffer, content):
            return False

        self._writing = True
        try:
            self._surface.buffer = content
        except Exception as e:
            self._degrade()
            raise SurfaceUnavailable(
                f"Editing surface for step {self.step_id} rejected new content: {e}"
            ) from e
        finally:
            self._writing = False
        self._last_emitted = None
        logger.debug("Overwrote surface buffer for step %s", self.step_id)
        return True

    def _degrade(self) -> None:
        # The surface is kept so that bind() can remount it.
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._last_emitted = None
        self.state = AdapterState.FAILED

    def _handle_surface_change(self, markup: str) -> None:
        if not self.is_bound or self._writing:
            return
        if markup_equivalent(markup, self._known):
            return
        self._known = markup
        self._last_emitted = markup
        self._on_change(markup)
