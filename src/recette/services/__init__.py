"""External collaborators for recette.

This package provides the concrete services the core consumes:
- surfaces: in-memory and $EDITOR-backed editing surfaces
- printing: HTML preview, browser print dialog and WeasyPrint PDF backends
- images: screenshot loading as data URIs
"""

from .images import image_to_data_uri
from .printing import BrowserPrintBackend, HtmlFileBackend, WeasyPrintBackend, page_stylesheet
from .surfaces import BufferSurface, ExternalEditorSurface

__all__ = [
    "BrowserPrintBackend",
    "BufferSurface",
    "ExternalEditorSurface",
    "HtmlFileBackend",
    "WeasyPrintBackend",
    "image_to_data_uri",
    "page_stylesheet",
]
