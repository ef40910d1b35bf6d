"""Keyword-based crisis detection for self-harm risk language."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from companion.domain import CrisisPattern

# Ordered; any match is a crisis, there is no priority between patterns.
RISK_PHRASES: tuple[tuple[str, str], ...] = (
    ("suicide", r"suicid"),
    ("kill_myself", r"kill myself"),
    ("end_my_life", r"end my life"),
    ("want_to_die", r"want to die"),
    ("hurting_myself", r"hurting myself"),
    ("cant_go_on", r"can[’']?t go on"),
    ("cant_cope", r"can[’']?t cope anymore"),
    ("no_reason_to_live", r"no reason to live"),
)


def compile_patterns(phrases: Iterable[tuple[str, str]]) -> tuple[CrisisPattern, ...]:
    """Compiles named phrase expressions into immutable crisis patterns."""
    return tuple(
        CrisisPattern(name=name, regex=re.compile(expression, re.IGNORECASE))
        for name, expression in phrases
    )


DEFAULT_PATTERNS: tuple[CrisisPattern, ...] = compile_patterns(RISK_PHRASES)


class CrisisDetector:
    """Tests text against an ordered list of risk patterns."""

    def __init__(self, patterns: Sequence[CrisisPattern] = DEFAULT_PATTERNS) -> None:
        self._patterns = tuple(patterns)

    @property
    def patterns(self) -> tuple[CrisisPattern, ...]:
        return self._patterns

    def first_match(self, text: str | None) -> CrisisPattern | None:
        """Returns the first pattern matching the text, if any."""
        if not text:
            return None
        lowered = text.lower()
        for pattern in self._patterns:
            if pattern.matches(lowered):
                return pattern
        return None

    def is_crisis(self, text: str | None) -> bool:
        """Returns whether the text contains a known risk phrase."""
        return self.first_match(text) is not None


_DEFAULT_DETECTOR = CrisisDetector()


def is_crisis(text: str | None) -> bool:
    """Module-level shortcut using the default pattern list."""
    return _DEFAULT_DETECTOR.is_crisis(text)
