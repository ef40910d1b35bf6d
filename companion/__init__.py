from .analysis import CrisisDetector, SentimentScorer, is_crisis, score
from .config import AppConfig, get_settings, reload_settings
from .conversation import SessionState, TurnProcessor, create_turn_processor
from .domain import Emotion, ScoreResult, Sender, TranscriptEntry
