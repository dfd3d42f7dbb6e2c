"""Image loading for the attached screenshot."""

import base64
import mimetypes
from pathlib import Path

from ..errors import InvalidField


def image_to_data_uri(path: Path) -> str:
    """Read an image file into a base64 data URI.

    Raises:
        InvalidField: If the file is missing or not an image
    """
    mime, _ = mimetypes.guess_type(path.name)
    if mime is None or not mime.startswith("image/"):
        raise InvalidField(f"Not an image file: {path}")
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise InvalidField(f"Cannot read image {path}: {exc}") from exc
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{encoded}"
