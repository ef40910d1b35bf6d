"""Local, rule-based reply selection."""

from __future__ import annotations

import random

from companion.analysis.crisis import CrisisDetector
from companion.domain import ScoreResult

HIGH_CONCERN_THRESHOLD = -0.6
MODERATE_CONCERN_THRESHOLD = -0.2
POSITIVE_THRESHOLD = 0.4

GREETING_MESSAGE = "Hi, I'm here to listen. What's on your mind today?"
HIGH_CONCERN_MESSAGE = (
    "That sounds really painful, and I'm glad you told me. Would it help to "
    "slow down together with a short breathing or grounding exercise?"
)
MODERATE_CONCERN_MESSAGE = (
    "It sounds like things have been hard lately. Would you like to tell me "
    "more about what's been going on?"
)
POSITIVE_MESSAGE = (
    "I'm really glad to hear that. What's been helping you feel this way?"
)
NEUTRAL_PROMPTS: tuple[str, ...] = (
    "I'm listening. Tell me more about that.",
    "That sounds important. What happened?",
    "How long have you been feeling like this?",
)
APOLOGY_MESSAGE = "Sorry, I'm having trouble forming a response right now."


class ResponseSelector:
    """Chooses a canned reply from crisis state and score thresholds."""

    def __init__(
        self,
        detector: CrisisDetector | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._detector = detector if detector is not None else CrisisDetector()
        self._rng = rng if rng is not None else random.Random()

    def select_reply(self, text: str, score_result: ScoreResult) -> str | None:
        """Returns a reply, or ``None`` when the caller must escalate instead."""
        if self._detector.is_crisis(text):
            return None
        score = score_result.score
        if score <= HIGH_CONCERN_THRESHOLD:
            return HIGH_CONCERN_MESSAGE
        if score < MODERATE_CONCERN_THRESHOLD:
            return MODERATE_CONCERN_MESSAGE
        if score > POSITIVE_THRESHOLD:
            return POSITIVE_MESSAGE
        return self._rng.choice(NEUTRAL_PROMPTS)
