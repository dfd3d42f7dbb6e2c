"""Pydantic data models for recette.

This package defines the data structures used throughout recette:
- The test record document and its steps (Document, Step)
- The closed literal sets for its header (RecordType, Environment, Conclusion)
- Render output handed to print backends (RenderedArtifact, PrintJob, Frame)

All models are frozen Pydantic BaseModel subclasses, enabling:
- Automatic JSON serialization/deserialization
- Field validation without silent coercion of enum literals
- Structural equality, so a restored document compares equal to the original

Example:
    >>> from recette.models import Document, Step
    >>> step = Step(id="a1", title="Étape 1", content="")
    >>> step.model_dump_json()
"""

from .artifact import ATOMIC_CLASS, Frame, PrintJob, RenderedArtifact
from .document import Conclusion, Document, Environment, RecordType, Step

__all__ = [
    "ATOMIC_CLASS",
    "Conclusion",
    "Document",
    "Environment",
    "Frame",
    "PrintJob",
    "RecordType",
    "RenderedArtifact",
    "Step",
]
