"""Conversation state, reply selection and turn processing."""

from .escalation import CrisisEscalation
from .exercises import ExerciseKind, run_exercise
from .pipeline import TurnProcessor, create_turn_processor
from .remote import RemoteReplyClient, RemoteReplyError, RemoteReplyTimeoutError
from .responses import ResponseSelector
from .session import SessionState
from .timeline import EmotionTimeline
from .transcript import Transcript

__all__ = [
    "CrisisEscalation",
    "EmotionTimeline",
    "ExerciseKind",
    "RemoteReplyClient",
    "RemoteReplyError",
    "RemoteReplyTimeoutError",
    "ResponseSelector",
    "SessionState",
    "Transcript",
    "TurnProcessor",
    "create_turn_processor",
    "run_exercise",
]
