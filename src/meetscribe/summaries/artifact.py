"""Artifact generator -- the summary PDF attached to the delivery email.

The document is a scoped resource: it is written under a name unique to
the request, read back into memory, and removed when the scope exits on
every path, success or error.
"""

from __future__ import annotations

import asyncio
import os
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from xml.sax.saxutils import escape

import structlog
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

from src.meetscribe.summaries.schemas import DeadlineItem

logger = structlog.get_logger(__name__)

ATTACHMENT_FILENAME = "Meeting_Summary.pdf"


@dataclass(frozen=True)
class GeneratedArtifact:
    """A rendered document, already read into memory."""

    path: str
    content: bytes
    filename: str = ATTACHMENT_FILENAME
    content_type: str = "application/pdf"


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "SummaryTitle",
            parent=base["Title"],
            fontName="Helvetica-Bold",
            fontSize=20,
            alignment=TA_CENTER,
            spaceAfter=18,
        ),
        "body": ParagraphStyle(
            "SummaryBody",
            parent=base["BodyText"],
            alignment=TA_JUSTIFY,
            leading=15,
        ),
        "item_title": ParagraphStyle(
            "ItemTitle",
            parent=base["BodyText"],
            fontName="Helvetica-Bold",
            fontSize=14,
            leading=18,
            spaceBefore=10,
        ),
        "item_due": base["BodyText"],
        "item_description": ParagraphStyle(
            "ItemDescription",
            parent=base["BodyText"],
            fontName="Helvetica-Oblique",
        ),
    }


def render_summary_pdf(path: str, summary: str, deadlines: list[DeadlineItem]) -> None:
    """Write the summary document to ``path``.

    Page 1 holds the summary. A second page listing the action items is
    added only when there is at least one deadline.
    """
    styles = _styles()
    doc = SimpleDocTemplate(
        path,
        pagesize=letter,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        title="Meeting Summary",
    )

    story: list = [Paragraph("Meeting Summary", styles["title"])]
    for block in summary.split("\n\n"):
        if block.strip():
            story.append(Paragraph(escape(block.strip()).replace("\n", "<br/>"), styles["body"]))
            story.append(Spacer(1, 8))

    if deadlines:
        story.append(PageBreak())
        story.append(Paragraph("Action Items &amp; Deadlines", styles["title"]))
        for item in deadlines:
            story.append(Paragraph(escape(item.summary or "Untitled Task"), styles["item_title"]))
            story.append(Paragraph(f"Due: {escape(item.due_date or 'N/A')}", styles["item_due"]))
            story.append(
                Paragraph(
                    escape(item.description or "No description provided."),
                    styles["item_description"],
                )
            )
            story.append(Spacer(1, 10))

    doc.build(story)


class ArtifactGenerator:
    """Renders per-request summary documents into a scratch directory."""

    def __init__(self, output_dir: str) -> None:
        self._output_dir = output_dir

    def unique_path(self) -> str:
        stamp = int(time.time() * 1000)
        return os.path.join(self._output_dir, f"summary-{stamp}-{uuid.uuid4().hex}.pdf")

    @asynccontextmanager
    async def generate(
        self,
        request_id: str,
        summary: str,
        deadlines: list[DeadlineItem],
    ) -> AsyncIterator[GeneratedArtifact]:
        """Render, read back and yield the document; delete it on exit.

        Usage:
            async with generator.generate(rid, summary, items) as artifact:
                await send(artifact.content)
        """
        path = self.unique_path()
        try:
            await asyncio.to_thread(render_summary_pdf, path, summary, deadlines)
            content = await asyncio.to_thread(_read_bytes, path)
            logger.info("artifact_generated", request_id=request_id, path=path, size=len(content))
            yield GeneratedArtifact(path=path, content=content)
        finally:
            if os.path.exists(path):
                os.remove(path)
                logger.info("artifact_removed", path=path)


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()
