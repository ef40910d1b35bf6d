"""Append-only transcript of every chat message in a session."""

from __future__ import annotations

from collections.abc import Iterator

from companion.domain import ScoreResult, Sender, TranscriptEntry, utc_now


class Transcript:
    """Insertion-ordered, unbounded message log."""

    def __init__(self) -> None:
        self._entries: list[TranscriptEntry] = []

    def append(self, entry: TranscriptEntry) -> TranscriptEntry:
        self._entries.append(entry)
        return entry

    def record(
        self,
        sender: Sender,
        text: str,
        score: ScoreResult | None = None,
    ) -> TranscriptEntry:
        """Builds and appends one entry stamped with the current time."""
        result = score if score is not None else ScoreResult.neutral()
        return self.append(
            TranscriptEntry(
                sender=sender,
                text=text,
                timestamp=utc_now(),
                score=result.score,
                emotion=result.emotion,
                match_count=result.match_count,
            )
        )

    def entries(self) -> list[TranscriptEntry]:
        """Returns a snapshot of all entries."""
        return list(self._entries)

    def by_sender(self, sender: Sender) -> list[TranscriptEntry]:
        return [entry for entry in self._entries if entry.sender is sender]

    def to_records(self) -> list[dict[str, object]]:
        return [entry.to_record() for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TranscriptEntry]:
        return iter(list(self._entries))
