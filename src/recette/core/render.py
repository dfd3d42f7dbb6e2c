"""Rendering pipeline: projects a document into paginated print markup.

The output has two sections: a full-page cover and the content pages.
Page breaks are left to the print backend; the pipeline only marks the
blocks that must stay on one page. Step content is trusted markup from
the editing surface and is inserted verbatim. Every other user value is
escaped.

The content section depends on nothing but the document, so every frame
(preview, print, export) embeds byte-identical content markup.
"""

import asyncio
import datetime
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from html import escape
from pathlib import Path
from typing import Protocol

from ..config import RenderConfig
from ..constants import (
    CONCLUSION_PREFIX,
    COVER_NAME_PLACEHOLDER,
    COVER_NUMBER_PLACEHOLDER,
    COVER_TITLE,
    DATE_FORMAT,
    DEFAULT_SETTLE_DELAY,
    SQL_DIGITS_PLACEHOLDER,
    SQL_TEMPLATE,
)
from ..errors import IncompleteDocument, RenderBackendFailure, RenderBusy
from ..models import ATOMIC_CLASS, Document, Frame, PrintJob, RenderedArtifact

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")

KEEP_TOGETHER = "page-break-inside: avoid; break-inside: avoid;"

COVER_LOGO = (
    "data:image/svg+xml;utf8,<svg xmlns='http://www.w3.org/2000/svg' width='100' height='100' "
    "viewBox='0 0 24 24' fill='none' stroke='%234f46e5' stroke-width='2' "
    "stroke-linecap='round' stroke-linejoin='round'>"
    "<path d='M14.5 2H6a2 2 0 0 0-2 2v16a2 2 0 0 0 2 2h12a2 2 0 0 0 2-2V7.5L14.5 2z'/>"
    "<polyline points='14 2 14 8 20 8'/><line x1='16' y1='13' x2='8' y2='13'/>"
    "<line x1='16' y1='17' x2='8' y2='17'/><line x1='10' y1='9' x2='8' y2='9'/></svg>"
)

STYLESHEET = """
* { box-sizing: border-box; }
body { margin: 0; font-family: Helvetica, Arial, sans-serif; color: #0f172a; }
.print-container { width: 210mm; margin: 0 auto; background: #ffffff; position: relative; }
.pdf-page { height: 297mm; padding: 20mm; page-break-after: always; break-after: page; }
.pdf-header-band { display: flex; justify-content: space-between; background: #7f1d1d;
  color: #ffffff; padding: 6mm 8mm; font-weight: bold; font-size: 18pt; }
.pdf-sub-header { text-align: center; margin-top: 6mm; font-size: 14pt; color: #334155; }
.cover-body { display: flex; flex-direction: column; align-items: center;
  justify-content: center; height: 200mm; }
.cover-logo { width: 120mm; height: 120mm; object-fit: contain; }
.cover-title { margin-top: 8mm; font-size: 20pt; font-weight: bold; color: #94a3b8;
  text-transform: uppercase; letter-spacing: 0.2em; }
.content-table { width: 100%; border-collapse: collapse; }
.page-spacer { height: 15mm; }
.pdf-content { padding: 0 20mm; }
.section-title { font-size: 16pt; font-weight: bold; color: #7f1d1d;
  border-bottom: 2px solid #7f1d1d; padding-bottom: 2mm; margin: 8mm 0 4mm; }
.block { margin-bottom: 8mm; }
.label { font-weight: 600; margin-bottom: 2mm; }
.sql-block { font-family: monospace; background: #0f172a; color: #a5b4fc;
  padding: 3mm; border-radius: 2mm; word-break: break-all; }
.pdf-image-main { max-width: 100%; border: 1px solid #cbd5e1; }
.environment { display: inline-block; font-family: monospace; background: #f1f5f9;
  border: 1px solid #cbd5e1; padding: 3mm; border-radius: 1mm; }
.step { margin-bottom: 8mm; }
.step-title { font-weight: bold; background: #f1f5f9; padding: 2mm 3mm; margin-bottom: 2mm; }
.ql-editor { padding: 0; min-height: auto; }
.ql-editor img { max-width: 100%; }
.conclusion { margin-top: 12mm; }
.conclusion-ok, .conclusion-ko { text-align: center; font-size: 18pt; font-weight: bold;
  padding: 6mm; border-radius: 2mm; }
.conclusion-ok { background: #ecfdf5; color: #047857; border: 2px solid #10b981; }
.conclusion-ko { background: #fef2f2; color: #b91c1c; border: 2px solid #ef4444; }
.pdf-footer-fixed { position: fixed; bottom: 0; left: 0; right: 0; display: flex;
  justify-content: space-between; padding: 4mm 20mm; font-size: 8pt; color: #64748b; }
"""

PREVIEW_STYLESHEET = """
body { background: #e2e8f0; padding: 8mm 0; }
.print-container { box-shadow: 0 10px 30px rgba(15, 23, 42, 0.3); }
.pdf-footer-fixed { position: absolute; }
"""

PRINT_SCRIPT = "<script>window.addEventListener('load', function () { window.print(); });</script>"


def jira_digits(jira_number: str) -> str:
    """Keep only the ASCII digits of a JIRA identifier."""
    return _NON_DIGITS.sub("", jira_number)


def sql_query(jira_number: str) -> str:
    """Build the script lookup query for a JIRA identifier.

    Example:
        >>> sql_query("ERP-1234")
        "select * from ps_s1_scripts_tbl where s1_script_name like '%1234J%';"
    """
    return SQL_TEMPLATE.format(digits=jira_digits(jira_number) or SQL_DIGITS_PLACEHOLDER)


def format_date(value: datetime.date) -> str:
    return value.strftime(DATE_FORMAT)


def conclusion_label(document: Document) -> str:
    return f"{CONCLUSION_PREFIX} {document.conclusion.value}"


class RenderingPipeline:
    """Turns a document snapshot into cover and content markup."""

    def __init__(self, config: RenderConfig | None = None) -> None:
        self.config = config or RenderConfig()

    def render_cover(self, document: Document) -> str:
        number = escape(document.jira_number or COVER_NUMBER_PLACEHOLDER)
        name = escape(document.jira_name or COVER_NAME_PLACEHOLDER)
        sub_header = f"[{document.record_type.value}] - [{format_date(document.date)}]"
        return (
            '<section class="pdf-page cover">'
            '<div class="pdf-header-band">'
            f'<div class="pdf-header-left">{number}</div>'
            f'<div class="pdf-header-right">{name}</div>'
            "</div>"
            f'<div class="pdf-sub-header">{escape(sub_header)}</div>'
            '<div class="cover-body">'
            f'<img class="cover-logo" src="{escape(COVER_LOGO)}" alt="Logo Cahier de Tests">'
            f'<p class="cover-title">{COVER_TITLE}</p>'
            "</div>"
            "</section>"
        )

    def render_content(self, document: Document) -> tuple[str, tuple[str, ...]]:
        """Render the content section.

        Returns:
            Tuple of (markup, ids of blocks marked atomic)
        """
        query = escape(sql_query(document.jira_number), quote=False)
        parts = [
            '<section class="pdf-content">',
            '<h2 class="section-title">Détails Techniques</h2>',
            '<div class="block">',
            '<p class="label">Requête SQL de vérification :</p>',
            f'<div class="sql-block">{query}</div>',
            "</div>",
        ]
        if document.attached_image:
            parts.extend(
                [
                    '<div class="block">',
                    '<p class="label">Exécution SQL :</p>',
                    f'<img class="pdf-image-main" src="{escape(document.attached_image)}" '
                    'alt="Exécution SQL">',
                    "</div>",
                ]
            )
        parts.extend(
            [
                '<div class="block">',
                '<h3 class="label">Environnement de test</h3>',
                f'<p class="environment">{document.environment.value}</p>',
                "</div>",
                '<h2 class="section-title">Déroulement des Tests</h2>',
            ]
        )

        atomic: list[str] = []
        for index, step in enumerate(document.steps, start=1):
            block_id = f"step-{index}"
            atomic.append(block_id)
            parts.extend(
                [
                    f'<div class="step {ATOMIC_CLASS}" id="{block_id}" '
                    f'data-step-id="{escape(step.id)}" style="{KEEP_TOGETHER}">',
                    f'<div class="step-title">Étape {index} : {escape(step.title)}</div>',
                    f'<div class="ql-editor">{step.content}</div>',
                    "</div>",
                ]
            )

        atomic.append("conclusion")
        css_class = "conclusion-ok" if document.conclusion.passed else "conclusion-ko"
        parts.extend(
            [
                f'<div class="conclusion {ATOMIC_CLASS}" id="conclusion" style="{KEEP_TOGETHER}">',
                '<h2 class="section-title">Conclusion du Test</h2>',
                f'<div class="{css_class}">{conclusion_label(document)}</div>',
                "</div>",
                "</section>",
            ]
        )
        return "".join(parts), tuple(atomic)

    def _page_rules(self) -> str:
        return f"@page {{ size: {self.config.page_size} portrait; margin: 0; }}"

    def render(self, document: Document, frame: Frame = Frame.EXPORT) -> RenderedArtifact:
        """Render a document snapshot framed for one output path."""
        cover = self.render_cover(document)
        content, atomic = self.render_content(document)

        styles = self._page_rules() + STYLESHEET
        if frame is Frame.PREVIEW:
            styles += PREVIEW_STYLESHEET
        footer_ids = f"{document.jira_number} / {document.jira_name}"
        title = escape(footer_ids)
        script = PRINT_SCRIPT if frame is Frame.PRINT else ""

        html = (
            "<!DOCTYPE html>"
            '<html lang="fr"><head><meta charset="utf-8">'
            f"<title>{title}</title>"
            f"<style>{styles}</style>"
            "</head>"
            f'<body class="frame-{frame.value}">'
            '<div class="print-container">'
            f"{cover}"
            '<table class="content-table">'
            '<thead><tr><td><div class="page-spacer"></div></td></tr></thead>'
            f"<tbody><tr><td>{content}</td></tr></tbody>"
            '<tfoot><tr><td><div class="page-spacer"></div></td></tr></tfoot>'
            "</table>"
            '<div class="pdf-footer-fixed">'
            f"<div>{title}</div><div>{escape(self.config.footer_label)}</div>"
            "</div>"
            "</div>"
            f"{script}"
            "</body></html>"
        )
        return RenderedArtifact(
            frame=frame, cover=cover, content=content, html=html, atomic_blocks=atomic
        )

    def job(self, artifact: RenderedArtifact) -> PrintJob:
        """Wrap an artifact with the page configuration a backend needs."""
        return PrintJob(
            html=artifact.html,
            page_size=self.config.page_size,
            margin="0",
            atomic_selectors=tuple(f"#{block_id}" for block_id in artifact.atomic_blocks),
        )


class PrintBackend(Protocol):
    """Print or PDF backend consumed as an opaque service."""

    name: str

    def submit(self, job: PrintJob) -> Path | None:
        """Produce output for job. Returns the written file, if any."""
        ...


@dataclass(frozen=True)
class RenderResult:
    """Outcome of a render trigger."""

    artifact: RenderedArtifact
    output: Path | None


class RenderCoordinator:
    """Serializes render triggers against one pipeline.

    A trigger that arrives while another is outstanding fails with
    RenderBusy instead of queuing. The document snapshot is taken after
    the settle delay, not when the trigger is issued.
    """

    def __init__(
        self,
        pipeline: RenderingPipeline,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
    ) -> None:
        self.pipeline = pipeline
        self.settle_delay = settle_delay
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def run(
        self,
        snapshot: Callable[[], Document],
        frame: Frame,
        backend: PrintBackend,
    ) -> RenderResult:
        """Render the current document and hand it to backend.

        Raises:
            RenderBusy: If another render is outstanding
            IncompleteDocument: If printing or exporting without JIRA identifiers
            RenderBackendFailure: If the backend fails
        """
        if self._busy:
            raise RenderBusy("A render is already in progress")
        self._busy = True
        try:
            if self.settle_delay:
                await asyncio.sleep(self.settle_delay)
            document = snapshot()
            if frame is not Frame.PREVIEW and not document.is_print_ready():
                raise IncompleteDocument("Fill in at least the JIRA number and name")

            artifact = self.pipeline.render(document, frame)
            job = self.pipeline.job(artifact)
            logger.debug("Submitting %s render to %s backend", frame.value, backend.name)
            try:
                output = await asyncio.to_thread(backend.submit, job)
            except RenderBackendFailure:
                raise
            except Exception as exc:
                logger.warning("%s backend failed: %s", backend.name, exc)
                raise RenderBackendFailure(f"{backend.name} backend failed: {exc}") from exc
            return RenderResult(artifact=artifact, output=output)
        finally:
            self._busy = False
