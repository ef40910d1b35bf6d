"""HTTP client for the optional `/api/chat` reply proxy."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeAlias
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError

import requests

from companion.config import RemoteConfig
from companion.domain import RemoteReply, SafetyFlags
from companion.utils.logger import get_logger

ReplyOperation: TypeAlias = Callable[[], RemoteReply]
SessionFactory: TypeAlias = Callable[[], requests.Session]

logger: logging.Logger = get_logger(__name__)


class RemoteReplyError(RuntimeError):
    """Raised when the proxy cannot produce a usable reply."""


class RemoteReplyTimeoutError(RemoteReplyError):
    """Raised when the proxy call exceeds its deadline."""


def parse_remote_reply(payload: object) -> RemoteReply:
    """Validates one decoded proxy response body.

    Raises:
        RemoteReplyError: When the body is not an object or has no usable
            ``reply`` string.
    """
    if not isinstance(payload, dict):
        raise RemoteReplyError("Proxy response must be a JSON object.")
    reply = payload.get("reply")
    if not isinstance(reply, str) or not reply.strip():
        raise RemoteReplyError("Proxy response has no reply text.")
    raw_safety = payload.get("safety")
    safety = raw_safety if isinstance(raw_safety, dict) else {}
    return RemoteReply(
        reply=reply.strip(),
        safety=SafetyFlags(
            crisis=safety.get("crisis") is True,
            moderated=safety.get("moderated") is True,
        ),
    )


def _run_with_deadline(operation: ReplyOperation, *, timeout_seconds: float) -> RemoteReply:
    """Runs one proxy call with a total deadline."""
    if timeout_seconds <= 0.0:
        return operation()

    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(operation)
    try:
        return future.result(timeout=timeout_seconds)
    except FuturesTimeoutError as err:
        future.cancel()
        raise RemoteReplyTimeoutError(
            f"Remote reply exceeded deadline ({timeout_seconds:.2f}s)."
        ) from err
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


class RemoteReplyClient:
    """Posts one message to the proxy and validates the reply.

    Every call opens and closes its own HTTP session, so a call abandoned at
    the deadline never shares a connection pool with the next turn.
    """

    def __init__(
        self,
        config: RemoteConfig,
        *,
        session_factory: SessionFactory = requests.Session,
    ) -> None:
        self._config = config
        self._session_factory = session_factory

    @property
    def endpoint_url(self) -> str:
        return self._config.endpoint_url

    def fetch(self, text: str) -> RemoteReply:
        """Fetches a reply for ``text`` within the configured deadline."""
        return _run_with_deadline(
            lambda: self._post(text),
            timeout_seconds=self._config.timeout_seconds,
        )

    def _post(self, text: str) -> RemoteReply:
        socket_timeout = self._config.timeout_seconds or None
        http = self._session_factory()
        try:
            response = http.post(
                self._config.endpoint_url,
                json={"message": text},
                timeout=socket_timeout,
            )
        except requests.Timeout as err:
            raise RemoteReplyTimeoutError(f"Remote reply timed out: {err}") from err
        except requests.RequestException as err:
            raise RemoteReplyError(f"Remote reply transport failure: {err}") from err
        finally:
            http.close()

        if not response.ok:
            raise RemoteReplyError(
                f"Remote reply returned HTTP {response.status_code}."
            )
        try:
            payload = response.json()
        except ValueError as err:
            raise RemoteReplyError("Remote reply body is not valid JSON.") from err
        logger.debug("Remote reply received from %s.", self._config.endpoint_url)
        return parse_remote_reply(payload)
