"""Behavior tests for the proxy reply client."""

import threading

import pytest
import requests

from companion.config import RemoteConfig
from companion.conversation.remote import (
    RemoteReplyClient,
    RemoteReplyError,
    RemoteReplyTimeoutError,
    _run_with_deadline,
    parse_remote_reply,
)
from companion.domain import RemoteReply, SafetyFlags


class _FakeResponse:
    def __init__(self, status_code: int = 200, payload: object = None, bad_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> object:
        if self._bad_json:
            raise ValueError("not json")
        return self._payload


class _FakeSession:
    """Records posted requests and replays one canned outcome."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.calls: list[dict[str, object]] = []
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def post(self, url, *, json, timeout):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def _client(outcome, timeout_seconds: float = 5.0) -> tuple[RemoteReplyClient, _FakeSession]:
    fake = _FakeSession(outcome)
    config = RemoteConfig(
        enabled=True,
        endpoint_url="http://proxy.test/api/chat",
        timeout_seconds=timeout_seconds,
    )
    return RemoteReplyClient(config, session_factory=lambda: fake), fake  # type: ignore[arg-type,return-value]


def test_fetch_posts_message_and_parses_reply() -> None:
    client, fake = _client(
        _FakeResponse(payload={"reply": " Hello ", "safety": {"crisis": False, "moderated": True}})
    )

    reply = client.fetch("hi")

    assert reply == RemoteReply("Hello", SafetyFlags(crisis=False, moderated=True))
    assert fake.calls == [
        {"url": "http://proxy.test/api/chat", "json": {"message": "hi"}, "timeout": 5.0}
    ]


def test_fetch_rejects_http_errors() -> None:
    client, _ = _client(_FakeResponse(status_code=502, payload={"error": "Server error"}))

    with pytest.raises(RemoteReplyError, match="502"):
        client.fetch("hi")


def test_fetch_rejects_invalid_json() -> None:
    client, _ = _client(_FakeResponse(bad_json=True))

    with pytest.raises(RemoteReplyError, match="JSON"):
        client.fetch("hi")


def test_fetch_maps_request_timeout() -> None:
    client, _ = _client(requests.Timeout("read timed out"))

    with pytest.raises(RemoteReplyTimeoutError):
        client.fetch("hi")


def test_fetch_maps_transport_errors() -> None:
    client, _ = _client(requests.ConnectionError("refused"))

    with pytest.raises(RemoteReplyError, match="transport"):
        client.fetch("hi")


@pytest.mark.parametrize(
    "payload",
    [
        None,
        ["reply"],
        {},
        {"reply": ""},
        {"reply": "   "},
        {"reply": 42},
    ],
)
def test_parse_remote_reply_rejects_unusable_bodies(payload) -> None:
    with pytest.raises(RemoteReplyError):
        parse_remote_reply(payload)


def test_parse_remote_reply_only_accepts_true_flags() -> None:
    """Truthy non-boolean flag values do not count as set."""
    reply = parse_remote_reply({"reply": "ok", "safety": {"crisis": "yes", "moderated": 1}})

    assert reply.safety == SafetyFlags(crisis=False, moderated=False)


def test_parse_remote_reply_defaults_missing_safety() -> None:
    assert parse_remote_reply({"reply": "ok"}).safety == SafetyFlags()


def test_run_with_deadline_raises_when_operation_is_slow() -> None:
    """A slow proxy call is abandoned once the deadline passes."""
    release = threading.Event()

    def _slow() -> RemoteReply:
        release.wait(2.0)
        return RemoteReply("late", SafetyFlags())

    try:
        with pytest.raises(RemoteReplyTimeoutError, match="deadline"):
            _run_with_deadline(_slow, timeout_seconds=0.05)
    finally:
        release.set()


def test_run_with_deadline_without_timeout_runs_inline() -> None:
    expected = RemoteReply("now", SafetyFlags())

    assert _run_with_deadline(lambda: expected, timeout_seconds=0.0) is expected


def test_zero_timeout_disables_socket_timeout() -> None:
    client, fake = _client(_FakeResponse(payload={"reply": "ok"}), timeout_seconds=0.0)

    client.fetch("hi")

    assert fake.calls[0]["timeout"] is None


def test_each_fetch_uses_its_own_closed_session() -> None:
    """Calls never share an HTTP session, and every session is closed."""
    sessions: list[_FakeSession] = []

    def _factory() -> _FakeSession:
        session = _FakeSession(_FakeResponse(payload={"reply": "ok"}))
        sessions.append(session)
        return session

    client = RemoteReplyClient(
        RemoteConfig(enabled=True, timeout_seconds=5.0),
        session_factory=_factory,  # type: ignore[arg-type]
    )

    client.fetch("one")
    client.fetch("two")

    assert len(sessions) == 2
    assert sessions[0] is not sessions[1]
    assert [session.closed for session in sessions] == [True, True]


def test_session_is_closed_after_transport_failure() -> None:
    client, fake = _client(requests.ConnectionError("refused"))

    with pytest.raises(RemoteReplyError):
        client.fetch("hi")

    assert fake.closed is True


def test_abandoned_call_does_not_share_session_with_next_turn() -> None:
    """A call cut off by the deadline keeps its own session; the next call gets a new one."""
    release = threading.Event()
    sessions: list[object] = []

    class _SlowSession(_FakeSession):
        def post(self, url, *, json, timeout):
            release.wait(2.0)
            return super().post(url, json=json, timeout=timeout)

    def _factory():
        session = (
            _SlowSession(_FakeResponse(payload={"reply": "late"}))
            if not sessions
            else _FakeSession(_FakeResponse(payload={"reply": "fresh"}))
        )
        sessions.append(session)
        return session

    client = RemoteReplyClient(
        RemoteConfig(enabled=True, timeout_seconds=0.05),
        session_factory=_factory,  # type: ignore[arg-type]
    )

    try:
        with pytest.raises(RemoteReplyTimeoutError):
            client.fetch("slow")
        assert client.fetch("next").reply == "fresh"
    finally:
        release.set()

    assert len(sessions) == 2
    assert sessions[0] is not sessions[1]
