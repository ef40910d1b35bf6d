"""Turn processing: crisis check, scoring, reply selection and logging."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import NamedTuple, TypeAlias

from companion.analysis.crisis import CrisisDetector
from companion.analysis.sentiment import SentimentScorer
from companion.config import AppConfig, get_settings
from companion.conversation.escalation import CrisisEscalation
from companion.conversation.remote import RemoteReplyClient, RemoteReplyError
from companion.conversation.responses import (
    APOLOGY_MESSAGE,
    GREETING_MESSAGE,
    ResponseSelector,
)
from companion.conversation.session import SessionState
from companion.domain import (
    CrisisSource,
    EscalationEvent,
    RemoteReply,
    ReplySource,
    ScoreResult,
    Sender,
    TimelineEvent,
    TranscriptEntry,
    TurnOutcome,
)
from companion.runtime.phase_contract import (
    PHASE_CRISIS_CHECK,
    PHASE_LOCAL_REPLY,
    PHASE_REMOTE_REPLY,
    PHASE_SCORING,
)
from companion.runtime.phase_timing import PhaseTimer, format_duration
from companion.utils.logger import get_logger

RemoteFetcher: TypeAlias = Callable[[str], RemoteReply]

logger: logging.Logger = get_logger(__name__)


class _Decision(NamedTuple):
    score: ScoreResult
    source: ReplySource
    reply: str
    escalation: EscalationEvent | None = None


class TurnProcessor:
    """Runs one user message through the reply state machine.

    Idle -> Scoring -> CrisisEscalate | LocalReply | RemoteReply, where a
    failed remote reply falls back to the local reply. Session side effects
    happen only after the reply is determined.
    """

    def __init__(
        self,
        session: SessionState,
        *,
        detector: CrisisDetector | None = None,
        scorer: SentimentScorer | None = None,
        selector: ResponseSelector | None = None,
        escalation: CrisisEscalation | None = None,
        remote: RemoteFetcher | None = None,
    ) -> None:
        self.session = session
        self._detector = detector if detector is not None else CrisisDetector()
        self._scorer = scorer if scorer is not None else SentimentScorer()
        self._selector = (
            selector if selector is not None else ResponseSelector(self._detector)
        )
        self._escalation = escalation if escalation is not None else CrisisEscalation()
        self._remote = remote

    @property
    def remote_enabled(self) -> bool:
        return self._remote is not None

    def open_session(self) -> TranscriptEntry | None:
        """Appends the greeting once per session."""
        if self.session.greeted:
            return None
        self.session.greeted = True
        return self.session.transcript.record(Sender.BOT, GREETING_MESSAGE)

    def process(self, text: str) -> TurnOutcome:
        """Processes one user message and returns what the turn produced.

        Raises:
            ValueError: If the message is empty or whitespace only.
        """
        message = text.strip() if text else ""
        if not message:
            raise ValueError("Cannot process an empty message.")

        turn_index = self.session.next_turn()
        timer = PhaseTimer(logger, scope=f"turn {turn_index}")
        try:
            decision = self._decide(message, turn_index, timer)
        except Exception:
            logger.error(
                "Turn %s failed after %s; replying with apology.",
                turn_index,
                format_duration(timer.elapsed),
                exc_info=True,
            )
            user_entry = self.session.transcript.record(Sender.USER, message)
            bot_entry = self.session.transcript.record(Sender.BOT, APOLOGY_MESSAGE)
            return TurnOutcome(
                turn_index=turn_index,
                user_entry=user_entry,
                bot_entry=bot_entry,
                score=ScoreResult.neutral(),
                source=ReplySource.ERROR,
            )

        user_entry = self.session.transcript.record(Sender.USER, message, decision.score)
        self.session.timeline.push(
            TimelineEvent(
                timestamp=user_entry.timestamp,
                score=decision.score.score,
                emotion=decision.score.emotion,
            )
        )
        bot_entry = self.session.transcript.record(Sender.BOT, decision.reply)
        logger.info(
            "Turn %s answered (source=%s, score=%.2f, emotion=%s) in %s [%s].",
            turn_index,
            decision.source,
            decision.score.score,
            decision.score.emotion,
            format_duration(timer.elapsed),
            timer.breakdown(),
        )
        return TurnOutcome(
            turn_index=turn_index,
            user_entry=user_entry,
            bot_entry=bot_entry,
            score=decision.score,
            source=decision.source,
            escalation=decision.escalation,
        )

    def _decide(self, message: str, turn_index: int, timer: PhaseTimer) -> _Decision:
        with timer.phase(PHASE_CRISIS_CHECK):
            pattern = self._detector.first_match(message)
        with timer.phase(PHASE_SCORING):
            score = self._scorer.score(message)

        if pattern is not None:
            logger.info("Crisis pattern %r matched on turn %s.", pattern.name, turn_index)
            return self._escalate(score, turn_index, CrisisSource.LOCAL)

        if self._remote is not None:
            try:
                with timer.phase(PHASE_REMOTE_REPLY):
                    remote_reply = self._remote(message)
            except Exception as err:
                logger.warning(
                    "Remote reply unavailable on turn %s, using local reply: %s",
                    turn_index,
                    err,
                    exc_info=not isinstance(err, RemoteReplyError),
                )
                return self._local(message, score, turn_index, timer, ReplySource.FALLBACK)
            if remote_reply.safety.crisis:
                return self._escalate(score, turn_index, CrisisSource.REMOTE)
            return _Decision(score, ReplySource.REMOTE, remote_reply.reply)

        return self._local(message, score, turn_index, timer, ReplySource.LOCAL)

    def _local(
        self,
        message: str,
        score: ScoreResult,
        turn_index: int,
        timer: PhaseTimer,
        source: ReplySource,
    ) -> _Decision:
        with timer.phase(PHASE_LOCAL_REPLY):
            reply = self._selector.select_reply(message, score)
        if reply is None:
            return self._escalate(score, turn_index, CrisisSource.LOCAL)
        return _Decision(score, source, reply)

    def _escalate(
        self, score: ScoreResult, turn_index: int, source: CrisisSource
    ) -> _Decision:
        event = self._escalation.escalate(
            self.session, turn_index=turn_index, source=source
        )
        return _Decision(score, ReplySource.CRISIS, event.message, event)


def create_turn_processor(
    settings: AppConfig | None = None,
    *,
    session: SessionState | None = None,
    rng: random.Random | None = None,
    remote: RemoteFetcher | None = None,
) -> TurnProcessor:
    """Builds a processor wired from settings.

    The remote path is used when ``remote`` is given, or when settings enable
    the proxy client.
    """
    active_settings = settings if settings is not None else get_settings()
    active_session = (
        session
        if session is not None
        else SessionState.create(max_timeline_events=active_settings.timeline.max_events)
    )
    detector = CrisisDetector()
    fetcher = remote
    if fetcher is None and active_settings.remote.enabled:
        fetcher = RemoteReplyClient(active_settings.remote).fetch
        logger.info("Remote replies enabled via %s.", active_settings.remote.endpoint_url)
    return TurnProcessor(
        active_session,
        detector=detector,
        selector=ResponseSelector(detector, rng),
        remote=fetcher,
    )
