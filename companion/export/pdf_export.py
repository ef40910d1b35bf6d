"""Paginated PDF transcript export rendered with reportlab."""

from __future__ import annotations

import logging
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from companion.conversation.session import SessionState
from companion.domain import Sender, TranscriptEntry
from companion.export.errors import ExportError
from companion.utils.logger import get_logger

DOCUMENT_TITLE = "Companion chat transcript"

logger: logging.Logger = get_logger(__name__)


def _entry_line(entry: TranscriptEntry) -> str:
    speaker = "You" if entry.sender is Sender.USER else "Companion"
    stamp = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")
    line = f"<b>{speaker}</b> [{stamp}]: {escape(entry.text)}"
    if entry.sender is Sender.USER and entry.match_count:
        line += (
            f" <i>(score {entry.score:+.2f}, {entry.emotion.value}, "
            f"{entry.match_count} match{'es' if entry.match_count != 1 else ''})</i>"
        )
    return line


def _draw_footer(canvas, doc) -> None:
    canvas.saveState()
    canvas.setFont("Helvetica", 8)
    canvas.drawRightString(doc.pagesize[0] - 12 * mm, 10 * mm, f"Page {doc.page}")
    canvas.restoreState()


def save_transcript_pdf(session: SessionState, file_path: Path) -> Path:
    """Renders the session transcript to a paginated PDF document."""
    styles = getSampleStyleSheet()
    body = ParagraphStyle(name="Entry", parent=styles["BodyText"], spaceAfter=4)
    story = [
        Paragraph(DOCUMENT_TITLE, styles["Title"]),
        Paragraph(
            f"Messages: {len(session.transcript)} &nbsp; "
            f"Crisis flagged: {'yes' if session.crisis_flagged else 'no'}",
            styles["Normal"],
        ),
        Spacer(1, 6 * mm),
    ]
    story.extend(Paragraph(_entry_line(entry), body) for entry in session.transcript)

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        document = SimpleDocTemplate(
            str(file_path),
            pagesize=A4,
            title=DOCUMENT_TITLE,
            topMargin=18 * mm,
            bottomMargin=18 * mm,
            leftMargin=18 * mm,
            rightMargin=18 * mm,
        )
        document.build(story, onFirstPage=_draw_footer, onLaterPages=_draw_footer)
    except OSError as err:
        raise ExportError(f"Failed to write PDF transcript to {file_path}: {err}") from err
    logger.info("PDF transcript saved to %s", file_path)
    return file_path
