"""Timing helpers for conversation phases."""

from .phase_contract import phase_label
from .phase_timing import PhaseTimer, format_duration

__all__ = [
    "PhaseTimer",
    "format_duration",
    "phase_label",
]
