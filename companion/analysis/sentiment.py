"""Lexicon-based sentiment scoring."""

from __future__ import annotations

import re
from collections.abc import Mapping

import numpy as np

from companion.analysis.lexicon import LEXICON
from companion.domain import Emotion, LexiconEntry, ScoreResult

_TOKEN_PATTERN = re.compile(r"[a-z0-9']+")


def tokenize(text: str | None) -> list[str]:
    """Splits lowercased text into word tokens."""
    if not text:
        return []
    return _TOKEN_PATTERN.findall(text.lower())


class SentimentScorer:
    """Averages lexicon valences and tracks the dominant emotion."""

    def __init__(self, lexicon: Mapping[str, LexiconEntry] = LEXICON) -> None:
        self._lexicon = lexicon

    def score(self, text: str | None) -> ScoreResult:
        """Scores one text.

        Args:
            text: Raw message text, possibly empty.

        Returns:
            The clamped average valence of matched tokens, the emotion of the
            strongest matched token, and the match count. Unmatched text
            yields the neutral result.
        """
        valences: list[float] = []
        dominant: Emotion = Emotion.NEUTRAL
        strongest = 0.0
        for token in tokenize(text):
            entry = self._lexicon.get(token)
            if entry is None:
                continue
            valences.append(entry.valence)
            # strictly greater keeps the first-seen emotion on ties
            if abs(entry.valence) > strongest:
                strongest = abs(entry.valence)
                dominant = entry.emotion

        if not valences:
            return ScoreResult.neutral()
        average = float(np.clip(np.mean(valences), -1.0, 1.0))
        return ScoreResult(score=average, emotion=dominant, match_count=len(valences))


_DEFAULT_SCORER = SentimentScorer()


def score(text: str | None) -> ScoreResult:
    """Module-level shortcut using the built-in lexicon."""
    return _DEFAULT_SCORER.score(text)
