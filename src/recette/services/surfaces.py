"""Concrete editing surfaces.

BufferSurface keeps its markup in memory and is driven programmatically.
ExternalEditorSurface hands the buffer to the user's text editor and
reports the saved result as a single change.
"""

import os
import shlex
import shutil
from collections.abc import Callable, Sequence

import click

from ..constants import EMPTY_SURFACE_MARKUP
from ..core.editor import ChangeCallback, SurfaceMountError


class BufferSurface:
    """In-memory editing surface.

    Programmatic writes to ``buffer`` notify subscribers the same way user
    edits do, as browser editing widgets do.

    Attributes:
        writes: Number of programmatic buffer writes since creation.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._subscribers: list[ChangeCallback] = []
        self.mounted = False
        self.toolbar: tuple[str, ...] = ()
        self.writes = 0

    def mount(self, toolbar: Sequence[str]) -> None:
        self.toolbar = tuple(toolbar)
        self._buffer = EMPTY_SURFACE_MARKUP
        self.mounted = True

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def buffer(self) -> str:
        return self._buffer

    @buffer.setter
    def buffer(self, markup: str) -> None:
        self.writes += 1
        self._buffer = markup
        self._notify()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def type(self, markup: str) -> None:
        """Simulate a user edit leaving the buffer holding markup."""
        if not self.mounted:
            raise SurfaceMountError("Surface is not mounted")
        self._buffer = markup
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self._buffer)


def _resolve_editor(editor: str | None) -> str | None:
    return editor or os.environ.get("VISUAL") or os.environ.get("EDITOR")


class ExternalEditorSurface(BufferSurface):
    """Editing surface backed by the user's $VISUAL / $EDITOR."""

    def __init__(self, editor: str | None = None, extension: str = ".html") -> None:
        super().__init__()
        self.editor = _resolve_editor(editor)
        self.extension = extension

    def mount(self, toolbar: Sequence[str]) -> None:
        if not self.editor:
            raise SurfaceMountError("No editor configured (set $VISUAL or $EDITOR)")
        program = shlex.split(self.editor)[0]
        if shutil.which(program) is None:
            raise SurfaceMountError(f"Editor not found: {program}")
        super().mount(toolbar)

    def open(self) -> bool:
        """Open the buffer in the editor.

        Returns:
            True if the user saved a change, False if the editor was closed
            without saving
        """
        if not self.mounted:
            raise SurfaceMountError("Surface is not mounted")
        current = "" if self.buffer == EMPTY_SURFACE_MARKUP else self.buffer
        edited = click.edit(current, editor=self.editor, extension=self.extension)
        if edited is None:
            return False
        self.type(edited.rstrip("\n") or EMPTY_SURFACE_MARKUP)
        return True
