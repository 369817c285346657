"""Approximate fixed-window rate limiting over a shared counter.

The limiter keeps one integer under a fixed key with a TTL equal to the
window. Every successful increment rewrites the value and resets the TTL, so
the window restarts on each write; the counter only clears when the store
expires the key. There is no explicit reset.

Access is read-then-write without locking. Concurrent senders can overwrite
each other's increments, so the count may under-count real traffic. The
limiter damps spam; it is not an exact quota.
"""

from __future__ import annotations

import logging
import time
from enum import StrEnum
from typing import Any, Callable, Protocol

from errorbeacon.common.config import RateLimitConfig
from errorbeacon.common.constants import RATE_LIMIT_KEY

logger = logging.getLogger(__name__)


class CounterStore(Protocol):
    """Key-value store with per-key expiry."""

    def get(self, key: str) -> int | None:
        ...

    def put(self, key: str, value: int, ttl_seconds: int) -> None:
        ...


class InMemoryCounterStore:
    """Process-local counter store with TTL-based expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[int, float]] = {}

    def get(self, key: str) -> int | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def put(self, key: str, value: int, ttl_seconds: int) -> None:
        self._entries[key] = (value, self._clock() + ttl_seconds)

    def __len__(self) -> int:
        return len(self._entries)


class RedisCounterStore:
    """Counter store backed by a Redis-compatible client.

    Any client exposing ``get(key)`` and ``set(key, value, ex=seconds)``
    works, e.g. ``redis.Redis``. This is the store to use when several
    processes must share one limit.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    def get(self, key: str) -> int | None:
        raw = self._client.get(key)
        if raw is None:
            return None
        return int(raw)

    def put(self, key: str, value: int, ttl_seconds: int) -> None:
        self._client.set(key, value, ex=ttl_seconds)


class RateLimitState(StrEnum):
    """Limiter state derived from the shared counter."""

    OPEN = "open"
    CLOSED = "closed"


class RateLimiter:
    """Counts delivered notifications against a ceiling per window."""

    def __init__(
        self,
        config: RateLimitConfig,
        store: CounterStore,
        key: str = RATE_LIMIT_KEY,
    ) -> None:
        self._config = config
        self._store = store
        self._key = key

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    @property
    def key(self) -> str:
        return self._key

    def current_count(self) -> int:
        return self._store.get(self._key) or 0

    def state(self) -> RateLimitState:
        if not self._config.enabled:
            return RateLimitState.OPEN
        if self.current_count() >= self._config.max_notifications:
            return RateLimitState.CLOSED
        return RateLimitState.OPEN

    def is_rate_limited(self) -> bool:
        """True when the ceiling has been reached within the current window."""
        return self.state() is RateLimitState.CLOSED

    def increment(self) -> None:
        """Record one delivered notification and restart the window."""
        if not self._config.enabled:
            return
        count = self.current_count() + 1
        self._store.put(self._key, count, self._config.ttl_seconds)
        if count == self._config.max_notifications:
            logger.debug(
                "Notification limit of %d reached; pausing for up to %d minute(s)",
                count, self._config.per_minutes,
            )


__all__ = [
    "CounterStore",
    "InMemoryCounterStore",
    "RateLimitState",
    "RateLimiter",
    "RedisCounterStore",
]
