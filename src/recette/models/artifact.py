"""Render artifact models.

A RenderedArtifact is the pipeline's projection of one document snapshot.
A PrintJob is what the pipeline hands to a print or PDF backend.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

ATOMIC_CLASS = "atomic"


class Frame(str, Enum):
    """Output path a render was triggered from."""

    PREVIEW = "preview"
    PRINT = "print"
    EXPORT = "export"


class RenderedArtifact(BaseModel):
    """Cover and content markup for one document snapshot.

    Attributes:
        frame: Output path the artifact was framed for.
        cover: Cover page markup.
        content: Content section markup. Identical across frames for the
            same document.
        html: Complete page including framing, styles and footer.
        atomic_blocks: Element ids that must not be split across pages.
    """

    model_config = ConfigDict(frozen=True)

    frame: Frame
    cover: str
    content: str
    html: str
    atomic_blocks: tuple[str, ...] = ()


class PrintJob(BaseModel):
    """Backend input: root markup plus page configuration."""

    model_config = ConfigDict(frozen=True)

    html: str = Field(description="Complete HTML page")
    page_size: str = Field(default="A4", description="Page size, portrait")
    margin: str = Field(default="0", description="Page margin")
    atomic_selectors: tuple[str, ...] = Field(
        default=(f".{ATOMIC_CLASS}",), description="Blocks the backend must keep together"
    )
