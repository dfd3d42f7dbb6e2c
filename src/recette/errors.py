"""Domain errors for recette.

Every failing operation is all-or-nothing: when one of these is raised,
the caller's last good document is left exactly as it was.
"""


class RecetteError(Exception):
    """Base exception for recette errors."""


class InvalidField(RecetteError):
    """Raised when a top-level field key is unknown or its value is rejected."""


class StepNotFound(RecetteError):
    """Raised when a step id is not present in the document."""


class InvalidDocument(RecetteError):
    """Raised when a wholesale replacement breaks the document invariants."""


class MalformedDocument(RecetteError):
    """Raised when serialized bytes do not decode to a valid document."""


class SurfaceUnavailable(RecetteError):
    """Raised when an editing surface refuses to mount."""


class RenderBackendFailure(RecetteError):
    """Raised when the print or PDF backend fails."""


class RenderBusy(RecetteError):
    """Raised when a render is triggered while another is outstanding."""


class IncompleteDocument(RecetteError):
    """Raised when a document lacks the identifiers required for printing."""
