"""Domain data structures for scoring, timeline, transcript and turn entities."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import NamedTuple


class Sender(StrEnum):
    """Author of one chat message."""

    USER = "user"
    BOT = "bot"


class Emotion(StrEnum):
    """Closed set of emotion labels produced by lexicon scoring."""

    NEUTRAL = "neutral"
    JOY = "joy"
    CALM = "calm"
    GRATITUDE = "gratitude"
    HOPE = "hope"
    SADNESS = "sadness"
    LONELINESS = "loneliness"
    ANGER = "anger"
    FEAR = "fear"
    ANXIETY = "anxiety"
    SHAME = "shame"


class CrisisSource(StrEnum):
    """Which side of the conversation flagged a crisis."""

    LOCAL = "local"
    REMOTE = "remote"


class ReplySource(StrEnum):
    """How the bot reply of one turn was produced."""

    CRISIS = "crisis"
    LOCAL = "local"
    REMOTE = "remote"
    FALLBACK = "fallback"
    ERROR = "error"


def utc_now() -> datetime:
    """Returns the current timezone-aware UTC time."""
    return datetime.now(UTC)


class LexiconEntry(NamedTuple):
    """A lexicon token with its valence and emotion label."""

    token: str
    valence: float
    emotion: Emotion


@dataclass(frozen=True)
class ScoreResult:
    """Outcome of scoring one text against the lexicon."""

    score: float
    emotion: Emotion
    match_count: int

    @classmethod
    def neutral(cls) -> ScoreResult:
        """Returns the no-signal result."""
        return cls(score=0.0, emotion=Emotion.NEUTRAL, match_count=0)


@dataclass(frozen=True)
class CrisisPattern:
    """One compiled risk phrase pattern."""

    name: str
    regex: re.Pattern[str]

    def matches(self, lowered_text: str) -> bool:
        """Returns whether the pattern occurs anywhere in already-lowercased text."""
        return self.regex.search(lowered_text) is not None


class TimelineEvent(NamedTuple):
    """One scored point on the emotion timeline."""

    timestamp: datetime
    score: float
    emotion: Emotion


@dataclass(frozen=True)
class TranscriptEntry:
    """One logged chat message with its scoring metadata."""

    sender: Sender
    text: str
    timestamp: datetime
    score: float = 0.0
    emotion: Emotion = Emotion.NEUTRAL
    match_count: int = 0

    def to_record(self) -> dict[str, object]:
        """Returns a JSON-serializable record."""
        return {
            "sender": self.sender.value,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
            "score": self.score,
            "emotion": self.emotion.value,
            "match_count": self.match_count,
        }


@dataclass(frozen=True)
class SafetyFlags:
    """Safety annotations returned by the reply proxy."""

    crisis: bool = False
    moderated: bool = False


@dataclass(frozen=True)
class RemoteReply:
    """Validated reply payload from the proxy endpoint."""

    reply: str
    safety: SafetyFlags


@dataclass(frozen=True)
class EscalationEvent:
    """Result of one crisis escalation."""

    turn_index: int
    message: str
    source: CrisisSource
    timestamp: datetime


@dataclass(frozen=True)
class TurnOutcome:
    """Everything one processed turn produced."""

    turn_index: int
    user_entry: TranscriptEntry
    bot_entry: TranscriptEntry
    score: ScoreResult
    source: ReplySource
    escalation: EscalationEvent | None = None

    @property
    def reply(self) -> str:
        return self.bot_entry.text

    @property
    def is_crisis(self) -> bool:
        return self.escalation is not None
