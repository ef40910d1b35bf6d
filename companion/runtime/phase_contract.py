"""Phase names used in turn and export timing logs."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

PHASE_CRISIS_CHECK: Final[str] = "crisis_check"
PHASE_SCORING: Final[str] = "scoring"
PHASE_REMOTE_REPLY: Final[str] = "remote_reply"
PHASE_LOCAL_REPLY: Final[str] = "local_reply"
PHASE_EXPORT: Final[str] = "export"

PHASE_LABELS: Final[Mapping[str, str]] = {
    PHASE_CRISIS_CHECK: "Crisis check",
    PHASE_SCORING: "Sentiment scoring",
    PHASE_REMOTE_REPLY: "Remote reply",
    PHASE_LOCAL_REPLY: "Local reply",
    PHASE_EXPORT: "Transcript export",
}


def phase_label(phase_name: str) -> str:
    """Returns the display label of a phase, or the raw name if it is unknown."""
    return PHASE_LABELS.get(phase_name, phase_name)
