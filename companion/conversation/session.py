"""Per-session state owned by the turn processor."""

from __future__ import annotations

from dataclasses import dataclass, field

from companion.conversation.timeline import DEFAULT_MAX_EVENTS, EmotionTimeline
from companion.conversation.transcript import Transcript
from companion.domain import EscalationEvent


@dataclass
class SessionState:
    """Mutable state of one chat session.

    Only the turn processor mutates the transcript and timeline, one turn at
    a time. `crisis_flagged` stays set for the rest of the session once any
    turn escalated; `crisis_overlay_visible` is the UI-facing flag that the
    user can dismiss.
    """

    transcript: Transcript = field(default_factory=Transcript)
    timeline: EmotionTimeline = field(default_factory=EmotionTimeline)
    crisis_flagged: bool = False
    crisis_overlay_visible: bool = False
    turn_count: int = 0
    greeted: bool = False
    escalations: dict[int, EscalationEvent] = field(default_factory=dict)

    @classmethod
    def create(cls, *, max_timeline_events: int = DEFAULT_MAX_EVENTS) -> SessionState:
        return cls(timeline=EmotionTimeline(max_events=max_timeline_events))

    def next_turn(self) -> int:
        """Advances and returns the 1-based turn index."""
        self.turn_count += 1
        return self.turn_count

    def dismiss_crisis_overlay(self) -> None:
        """Hides the crisis overlay; the session stays crisis-flagged."""
        self.crisis_overlay_visible = False
