"""Print and PDF backends.

Each backend takes a PrintJob (complete HTML page plus page settings)
and produces output. Failures surface as exceptions; the render
coordinator turns them into RenderBackendFailure.
"""

import logging
import tempfile
import webbrowser
from collections.abc import Callable
from pathlib import Path

from ..errors import RenderBackendFailure
from ..models import PrintJob

logger = logging.getLogger(__name__)


def page_stylesheet(job: PrintJob) -> str:
    """Page and keep-together rules for a job, as a standalone stylesheet."""
    rules = [f"@page {{ size: {job.page_size} portrait; margin: {job.margin}; }}"]
    if job.atomic_selectors:
        selectors = ", ".join(job.atomic_selectors)
        rules.append(f"{selectors} {{ break-inside: avoid; page-break-inside: avoid; }}")
    return "\n".join(rules)


class HtmlFileBackend:
    """Writes the page to an HTML file (on-screen preview)."""

    name = "html"

    def __init__(self, output: Path) -> None:
        self.output = output

    def submit(self, job: PrintJob) -> Path:
        self.output.parent.mkdir(parents=True, exist_ok=True)
        self.output.write_text(job.html, encoding="utf-8")
        logger.info("Wrote preview to %s", self.output)
        return self.output


class BrowserPrintBackend:
    """Opens the page in a browser, which shows its print dialog on load."""

    name = "browser"

    def __init__(
        self,
        directory: Path | None = None,
        opener: Callable[[str], bool] = webbrowser.open,
    ) -> None:
        self.directory = directory
        self.opener = opener

    def submit(self, job: PrintJob) -> Path:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            suffix=".html",
            prefix="recette-print-",
            dir=self.directory,
            delete=False,
        ) as f:
            f.write(job.html)
            path = Path(f.name)
        if not self.opener(path.resolve().as_uri()):
            raise RenderBackendFailure(f"No browser available to print {path}")
        logger.info("Opened print dialog for %s", path)
        return path


class WeasyPrintBackend:
    """Renders the page to PDF with WeasyPrint.

    The job's page size, margin and atomic selectors are applied as an
    extra stylesheet on top of the page's own styles.
    """

    name = "pdf"

    def __init__(self, output: Path) -> None:
        self.output = output

    def submit(self, job: PrintJob) -> Path:
        try:
            from weasyprint import CSS, HTML
        except ImportError as e:
            raise RenderBackendFailure(
                "weasyprint is required for PDF export. Install it with "
                "`pip install 'recette[pdf]'`."
            ) from e

        self.output.parent.mkdir(parents=True, exist_ok=True)
        stylesheet = CSS(string=page_stylesheet(job))
        HTML(string=job.html).write_pdf(str(self.output), stylesheets=[stylesheet])
        logger.info("Wrote PDF to %s", self.output)
        return self.output
