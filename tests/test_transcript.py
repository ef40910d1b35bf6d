"""Behavior tests for the append-only transcript and session state."""

from datetime import UTC

from companion.conversation.session import SessionState
from companion.conversation.transcript import Transcript
from companion.domain import Emotion, ScoreResult, Sender


def test_record_appends_in_order_with_aware_timestamps() -> None:
    """Entries keep insertion order and carry UTC timestamps."""
    transcript = Transcript()

    first = transcript.record(Sender.BOT, "Hello")
    second = transcript.record(Sender.USER, "Hi")

    assert transcript.entries() == [first, second]
    assert first.timestamp.tzinfo is UTC
    assert first.timestamp <= second.timestamp


def test_record_defaults_to_neutral_score() -> None:
    """Entries without a score carry the neutral result."""
    entry = Transcript().record(Sender.BOT, "Hello")

    assert entry.score == 0.0
    assert entry.emotion is Emotion.NEUTRAL
    assert entry.match_count == 0


def test_record_copies_score_result() -> None:
    result = ScoreResult(score=-0.7, emotion=Emotion.SADNESS, match_count=2)

    entry = Transcript().record(Sender.USER, "sad and lonely", result)

    assert (entry.score, entry.emotion, entry.match_count) == (-0.7, Emotion.SADNESS, 2)


def test_entries_returns_snapshot() -> None:
    """Mutating the returned list does not change the transcript."""
    transcript = Transcript()
    transcript.record(Sender.USER, "one")

    transcript.entries().clear()

    assert len(transcript) == 1


def test_by_sender_filters_entries() -> None:
    transcript = Transcript()
    transcript.record(Sender.USER, "one")
    transcript.record(Sender.BOT, "two")
    transcript.record(Sender.USER, "three")

    assert [entry.text for entry in transcript.by_sender(Sender.USER)] == ["one", "three"]


def test_to_records_serializes_enums_and_timestamps() -> None:
    """Records hold plain JSON-friendly values."""
    transcript = Transcript()
    entry = transcript.record(Sender.USER, "hello")

    record = transcript.to_records()[0]

    assert record == {
        "sender": "user",
        "text": "hello",
        "timestamp": entry.timestamp.isoformat(),
        "score": 0.0,
        "emotion": "neutral",
        "match_count": 0,
    }


def test_session_next_turn_is_one_based() -> None:
    session = SessionState.create(max_timeline_events=5)

    assert session.next_turn() == 1
    assert session.next_turn() == 2
    assert session.timeline.max_events == 5
