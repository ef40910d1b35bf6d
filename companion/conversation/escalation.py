"""Crisis escalation: flags the session and produces the safety message."""

from __future__ import annotations

import logging

from companion.conversation.session import SessionState
from companion.domain import CrisisSource, EscalationEvent, utc_now
from companion.utils.logger import get_logger

ESCALATION_MESSAGE = (
    "I hear you. I'm concerned for your safety. Please consider contacting "
    "emergency services or a crisis line now."
)

CRISIS_RESOURCES: tuple[str, ...] = (
    "If you are in immediate danger, call your local emergency number now.",
    "US: call or text 988 (Suicide & Crisis Lifeline).",
    "UK & ROI: call Samaritans on 116 123.",
    "Elsewhere: find a local helpline at https://findahelpline.com.",
)

logger: logging.Logger = get_logger(__name__)


class CrisisEscalation:
    """Escalates a turn to the crisis path, at most once per turn."""

    def __init__(self, message: str = ESCALATION_MESSAGE) -> None:
        self._message = message

    def escalate(
        self,
        session: SessionState,
        *,
        turn_index: int,
        source: CrisisSource,
    ) -> EscalationEvent:
        """Marks the session crisis-flagged and returns the turn's event.

        Repeated calls for the same turn return the first event unchanged.
        Later turns always escalate again.
        """
        existing = session.escalations.get(turn_index)
        if existing is not None:
            return existing
        event = EscalationEvent(
            turn_index=turn_index,
            message=self._message,
            source=source,
            timestamp=utc_now(),
        )
        session.escalations[turn_index] = event
        session.crisis_flagged = True
        session.crisis_overlay_visible = True
        logger.warning("Crisis escalation on turn %s (source=%s).", turn_index, source)
        return event
