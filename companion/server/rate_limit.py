"""Per-client request limits for the `/api/` routes, backed by ``limits``."""

from __future__ import annotations

import math
import time

from limits import RateLimitItem, RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import MovingWindowRateLimiter

from companion.config import RateLimitConfig


class ClientRateLimiter:
    """Moving-window limit of ``max_requests`` per client within ``window_seconds``.

    Counters live in a ``limits`` storage; the in-memory default expires idle
    client keys once their window has passed.
    """

    def __init__(
        self,
        config: RateLimitConfig,
        *,
        storage: Storage | None = None,
    ) -> None:
        self._item: RateLimitItem = RateLimitItemPerSecond(
            config.max_requests, config.window_seconds
        )
        self._storage = storage if storage is not None else MemoryStorage()
        self._limiter = MovingWindowRateLimiter(self._storage)

    @property
    def limit(self) -> RateLimitItem:
        return self._item

    def allow(self, client_key: str) -> bool:
        """Counts one request for ``client_key``; False once the limit is reached."""
        return self._limiter.hit(self._item, client_key)

    def retry_after(self, client_key: str) -> int:
        """Whole seconds until ``client_key`` may send another request."""
        stats = self._limiter.get_window_stats(self._item, client_key)
        if stats.remaining > 0:
            return 0
        return max(1, math.ceil(stats.reset_time - time.time()))

    def reset(self) -> None:
        """Drops every tracked client."""
        self._storage.reset()
