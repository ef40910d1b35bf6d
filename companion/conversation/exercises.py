"""Short guided coping exercises: paced breathing and 5-4-3-2-1 grounding."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from typing import TypeAlias
from dataclasses import dataclass
from enum import StrEnum

from companion.conversation.session import SessionState
from companion.domain import Sender, TranscriptEntry

SleepCallable: TypeAlias = Callable[[float], None]


class ExerciseKind(StrEnum):
    BREATHING = "breathing"
    GROUNDING = "grounding"


@dataclass(frozen=True)
class ExerciseStep:
    """One bot line and the pause before it."""

    delay_seconds: float
    text: str


# 4-4-4 breathing, paced to roughly match the counts.
BREATHING_STEPS: tuple[ExerciseStep, ...] = (
    ExerciseStep(0.0, "Let's try a short breathing exercise."),
    ExerciseStep(
        4.2,
        "Find a comfortable seated position. We'll do 4 seconds in, hold 4, out 4.",
    ),
    ExerciseStep(4.2, "Inhale... (4)"),
    ExerciseStep(4.2, "Hold... (4)"),
    ExerciseStep(4.2, "Exhale... (4)"),
    ExerciseStep(4.2, "Nice. How do you feel now?"),
)

GROUNDING_STEPS: tuple[ExerciseStep, ...] = (
    ExerciseStep(
        0.0,
        "Let's try a 5-4-3-2-1 grounding exercise. Name: 5 things you can see.",
    ),
    ExerciseStep(2.2, "4 things you can feel."),
    ExerciseStep(2.0, "3 things you can hear."),
    ExerciseStep(2.0, "2 things you can smell (or imagine)."),
    ExerciseStep(2.0, "1 thing you can taste (or imagine). How was that?"),
)

EXERCISES: dict[ExerciseKind, tuple[ExerciseStep, ...]] = {
    ExerciseKind.BREATHING: BREATHING_STEPS,
    ExerciseKind.GROUNDING: GROUNDING_STEPS,
}


def run_exercise(
    session: SessionState,
    kind: ExerciseKind,
    *,
    sleep: SleepCallable = time.sleep,
) -> Iterator[TranscriptEntry]:
    """Yields each exercise line as it is logged to the transcript."""
    for step in EXERCISES[kind]:
        if step.delay_seconds > 0.0:
            sleep(step.delay_seconds)
        yield session.transcript.record(Sender.BOT, step.text)
