"""Transcript and timeline exports."""

from datetime import datetime
from pathlib import Path

from companion.conversation.timeline import save_timeline_to_csv

from .errors import ExportError
from .json_export import save_transcript_json, transcript_to_json
from .pdf_export import save_transcript_pdf

EXPORT_FORMATS: tuple[str, ...] = ("json", "pdf", "csv")


def default_export_path(folder: Path, export_format: str, *, now: datetime | None = None) -> Path:
    """Builds a timestamped export file path inside ``folder``."""
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    prefix = "timeline" if export_format == "csv" else "transcript"
    return folder / f"{prefix}-{stamp}.{export_format}"


__all__ = [
    "EXPORT_FORMATS",
    "ExportError",
    "default_export_path",
    "save_timeline_to_csv",
    "save_transcript_json",
    "save_transcript_pdf",
    "transcript_to_json",
]
