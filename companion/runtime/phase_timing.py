"""Scoped timing of conversation phases (one chat turn, one export)."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from time import perf_counter

from companion.runtime.phase_contract import phase_label


def format_duration(duration_seconds: float) -> str:
    """Formats a duration compactly: ``<1ms``, ``250ms``, ``1.50s``, ``2m05.0s``."""
    milliseconds = duration_seconds * 1000.0
    if milliseconds < 1.0:
        return "<1ms"
    if milliseconds < 1000.0:
        return f"{milliseconds:.0f}ms"
    if duration_seconds < 60.0:
        return f"{duration_seconds:.2f}s"
    minutes, seconds = divmod(duration_seconds, 60.0)
    return f"{int(minutes)}m{seconds:04.1f}s"


class PhaseTimer:
    """Times the phases of one scope and tags every log line with it.

    A scope is e.g. ``turn 3`` or ``export pdf``. Phase durations are kept in
    the order the phases ran so the whole scope can be summarized once it
    finishes.
    """

    def __init__(self, logger: logging.Logger, *, scope: str) -> None:
        self._logger = logger
        self.scope = scope
        self.durations: dict[str, float] = {}
        self._started_at = perf_counter()

    @property
    def elapsed(self) -> float:
        """Seconds since the scope started."""
        return perf_counter() - self._started_at

    @contextmanager
    def phase(self, phase_name: str) -> Iterator[None]:
        """Times one phase; failures are logged at WARNING and re-raised."""
        label = phase_label(phase_name)
        started_at = perf_counter()
        self._logger.debug("[%s] %s started.", self.scope, label)
        try:
            yield
        except Exception:
            elapsed = self._record(phase_name, started_at)
            self._logger.warning(
                "[%s] %s failed after %s.", self.scope, label, format_duration(elapsed)
            )
            raise
        elapsed = self._record(phase_name, started_at)
        self._logger.debug(
            "[%s] %s completed in %s.", self.scope, label, format_duration(elapsed)
        )

    def breakdown(self) -> str:
        """Returns ``label duration`` pairs for every finished phase."""
        return ", ".join(
            f"{phase_label(name).lower()} {format_duration(seconds)}"
            for name, seconds in self.durations.items()
        )

    def _record(self, phase_name: str, started_at: float) -> float:
        elapsed = perf_counter() - started_at
        self.durations[phase_name] = elapsed
        return elapsed
