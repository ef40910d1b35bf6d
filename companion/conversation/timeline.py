"""
Emotion timeline storage and rendering.

The timeline keeps the most recent scored user messages (FIFO eviction once
the bound is reached) and can be printed to the terminal or saved as CSV for
an external chart widget.
"""

import csv
import logging
from collections import deque
from collections.abc import Iterator
from pathlib import Path

from colored import attr, bg, fg

from companion.domain import TimelineEvent
from companion.utils.logger import get_logger

DEFAULT_MAX_EVENTS = 80

logger: logging.Logger = get_logger(__name__)


class EmotionTimeline:
    """Bounded, insertion-ordered sequence of timeline events."""

    def __init__(self, max_events: int = DEFAULT_MAX_EVENTS) -> None:
        if max_events < 1:
            raise ValueError("Timeline bound must be at least one event.")
        self._events: deque[TimelineEvent] = deque(maxlen=max_events)

    @property
    def max_events(self) -> int:
        return self._events.maxlen or DEFAULT_MAX_EVENTS

    def push(self, event: TimelineEvent) -> None:
        """Appends an event, evicting the oldest when full."""
        if len(self._events) == self._events.maxlen:
            logger.debug("Timeline full; evicting event from %s.", self._events[0].timestamp)
        self._events.append(event)

    def events(self) -> list[TimelineEvent]:
        """Returns a snapshot of the events, oldest first."""
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[TimelineEvent]:
        return iter(list(self._events))


def save_timeline_to_csv(timeline: EmotionTimeline, file_path: Path) -> Path:
    """
    Saves the timeline to a CSV file.

    Arguments:
        timeline (EmotionTimeline): The timeline to save.
        file_path (Path): Destination file; parent folders are created.

    Returns:
        Path: The path to the saved CSV file.
    """
    logger.info("Starting to save timeline to CSV.")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open(mode="w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(["Time", "Score", "Emotion"])
        for event in timeline:
            row = [event.timestamp.isoformat(), round(event.score, 3), event.emotion.value]
            writer.writerow(row)
            logger.debug("Written row: %s", row)

    logger.info("Timeline successfully saved to %s", file_path)
    return file_path


def color_txt(string: str, fg_color: str, bg_color: str, padding: int = 0) -> str:
    """
    Colorizes a string.

    Arguments:
        string (str): String to be colorized.
        fg_color (str): Foreground color.
        bg_color (str): Background color.
        padding (int): Minimum width, padded on the right.

    Returns:
        str: Colorized string.
    """
    if padding:
        string = string.ljust(padding)

    return f"{fg(fg_color)}{bg(bg_color)}{string}{attr('reset')}"


def score_bar(score: float, width: int = 10) -> str:
    """Renders a signed score as a bar left (negative) or right (positive) of a pivot."""
    filled = min(width, int(round(abs(score) * width)))
    if score < 0:
        return (" " * (width - filled)) + ("#" * filled) + "|" + (" " * width)
    return (" " * width) + "|" + ("#" * filled) + (" " * (width - filled))


def format_timeline(timeline: EmotionTimeline) -> list[str]:
    """Formats timeline rows as plain text lines."""
    events = timeline.events()
    if not events:
        return []
    max_emotion_width: int = max(len(event.emotion.value) for event in events)
    rows: list[str] = []
    for event in events:
        time_str = event.timestamp.strftime("%H:%M:%S")
        emotion_str = event.emotion.value.capitalize().ljust(max_emotion_width)
        rows.append(f"{time_str} {emotion_str} {event.score:+.2f} {score_bar(event.score)}")
    return rows


def print_timeline(timeline: EmotionTimeline) -> None:
    """
    Prints the timeline vertically with a score bar per event.

    Arguments:
        timeline (EmotionTimeline): Timeline to print.
    """
    logger.info("Printing timeline with %s entries.", len(timeline))
    rows = format_timeline(timeline)
    if not rows:
        print("No scored messages yet.")
        return
    print(color_txt("Time", "black", "green", 9), end="")
    print(color_txt("Emotion", "black", "yellow", 11), end="")
    print(color_txt("Score", "black", "blue", 6))
    for row in rows:
        print(row)
