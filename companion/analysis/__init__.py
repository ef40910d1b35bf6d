"""Local text analysis: lexicon, crisis detection and sentiment scoring."""

from .crisis import CrisisDetector, is_crisis
from .lexicon import LEXICON, lookup
from .sentiment import SentimentScorer, score, tokenize

__all__ = [
    "CrisisDetector",
    "LEXICON",
    "SentimentScorer",
    "is_crisis",
    "lookup",
    "score",
    "tokenize",
]
