"""Static token lexicon used for deterministic sentiment scoring."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from companion.domain import Emotion, LexiconEntry

_RAW_LEXICON: tuple[tuple[str, float, Emotion], ...] = (
    # positive
    ("happy", 0.8, Emotion.JOY),
    ("joy", 0.9, Emotion.JOY),
    ("glad", 0.6, Emotion.JOY),
    ("excited", 0.7, Emotion.JOY),
    ("great", 0.6, Emotion.JOY),
    ("good", 0.5, Emotion.JOY),
    ("love", 0.8, Emotion.JOY),
    ("wonderful", 0.8, Emotion.JOY),
    ("proud", 0.6, Emotion.JOY),
    ("calm", 0.5, Emotion.CALM),
    ("relaxed", 0.6, Emotion.CALM),
    ("peaceful", 0.7, Emotion.CALM),
    ("okay", 0.2, Emotion.CALM),
    ("fine", 0.2, Emotion.CALM),
    ("grateful", 0.7, Emotion.GRATITUDE),
    ("thankful", 0.7, Emotion.GRATITUDE),
    ("thanks", 0.4, Emotion.GRATITUDE),
    ("hopeful", 0.6, Emotion.HOPE),
    ("better", 0.4, Emotion.HOPE),
    ("optimistic", 0.6, Emotion.HOPE),
    # negative
    ("sad", -0.8, Emotion.SADNESS),
    ("unhappy", -0.7, Emotion.SADNESS),
    ("depressed", -0.9, Emotion.SADNESS),
    ("miserable", -0.9, Emotion.SADNESS),
    ("hopeless", -0.9, Emotion.SADNESS),
    ("crying", -0.7, Emotion.SADNESS),
    ("down", -0.4, Emotion.SADNESS),
    ("tired", -0.3, Emotion.SADNESS),
    ("lonely", -0.6, Emotion.LONELINESS),
    ("alone", -0.5, Emotion.LONELINESS),
    ("isolated", -0.6, Emotion.LONELINESS),
    ("angry", -0.7, Emotion.ANGER),
    ("mad", -0.6, Emotion.ANGER),
    ("furious", -0.9, Emotion.ANGER),
    ("frustrated", -0.6, Emotion.ANGER),
    ("annoyed", -0.4, Emotion.ANGER),
    ("hate", -0.8, Emotion.ANGER),
    ("scared", -0.7, Emotion.FEAR),
    ("afraid", -0.7, Emotion.FEAR),
    ("terrified", -0.9, Emotion.FEAR),
    ("anxious", -0.7, Emotion.ANXIETY),
    ("worried", -0.6, Emotion.ANXIETY),
    ("nervous", -0.5, Emotion.ANXIETY),
    ("stressed", -0.6, Emotion.ANXIETY),
    ("overwhelmed", -0.7, Emotion.ANXIETY),
    ("panic", -0.8, Emotion.ANXIETY),
    ("ashamed", -0.7, Emotion.SHAME),
    ("guilty", -0.6, Emotion.SHAME),
    ("worthless", -0.9, Emotion.SHAME),
    ("embarrassed", -0.5, Emotion.SHAME),
)


def build_lexicon(
    entries: Iterable[tuple[str, float, Emotion]],
) -> Mapping[str, LexiconEntry]:
    """Builds a read-only token index, validating tokens and valences."""
    index: dict[str, LexiconEntry] = {}
    for token, valence, emotion in entries:
        normalized = token.strip().lower()
        if not normalized:
            raise ValueError("Lexicon tokens must be non-empty.")
        if not -1.0 <= valence <= 1.0:
            raise ValueError(
                f"Valence for {normalized!r} must be within [-1, 1], got {valence}."
            )
        if normalized in index:
            raise ValueError(f"Duplicate lexicon token {normalized!r}.")
        index[normalized] = LexiconEntry(normalized, float(valence), emotion)
    return MappingProxyType(index)


LEXICON: Mapping[str, LexiconEntry] = build_lexicon(_RAW_LEXICON)


def lookup(token: str) -> LexiconEntry | None:
    """Returns the entry for an exact (lowercased) token match."""
    return LEXICON.get(token.lower())
