"""JSON transcript export."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from companion.conversation.transcript import Transcript
from companion.export.errors import ExportError
from companion.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def transcript_to_json(transcript: Transcript) -> str:
    """Serializes the transcript as a JSON array of entry records."""
    return json.dumps(transcript.to_records(), indent=2, ensure_ascii=False)


def save_transcript_json(transcript: Transcript, file_path: Path) -> Path:
    """Writes the transcript JSON array to ``file_path``."""
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(transcript_to_json(transcript) + "\n", encoding="utf-8")
    except OSError as err:
        raise ExportError(f"Failed to write JSON transcript to {file_path}: {err}") from err
    logger.info("Transcript with %s entries saved to %s", len(transcript), file_path)
    return file_path
