"""Tests for the approximate fixed-window rate limiter."""

from __future__ import annotations

import pytest

from errorbeacon.common.config import RateLimitConfig
from errorbeacon.common.constants import RATE_LIMIT_KEY
from errorbeacon.notifications.ratelimit import (
    InMemoryCounterStore,
    RateLimiter,
    RateLimitState,
    RedisCounterStore,
)


# --- Helpers ---


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """Minimal stand-in for a Redis client: bytes values, ``ex`` expiry."""

    def __init__(self) -> None:
        self.values: dict[str, bytes] = {}
        self.expiries: dict[str, int] = {}

    def get(self, key: str) -> bytes | None:
        return self.values.get(key)

    def set(self, key: str, value: int, ex: int | None = None) -> bool:
        self.values[key] = str(value).encode()
        self.expiries[key] = ex
        return True


class InterleavingStore(InMemoryCounterStore):
    """Runs ``on_get`` between a reader's get and its following put."""

    def __init__(self, clock: FakeClock) -> None:
        super().__init__(clock=clock)
        self.on_get = None

    def get(self, key: str) -> int | None:
        value = super().get(key)
        hook, self.on_get = self.on_get, None
        if hook is not None:
            hook()
        return value


def _limiter(
    max_notifications: int = 3,
    per_minutes: int = 1,
    enabled: bool = True,
    clock: FakeClock | None = None,
) -> tuple[RateLimiter, InMemoryCounterStore, FakeClock]:
    clock = clock or FakeClock()
    store = InMemoryCounterStore(clock=clock)
    config = RateLimitConfig(
        enabled=enabled, max_notifications=max_notifications, per_minutes=per_minutes,
    )
    return RateLimiter(config, store), store, clock


# --- Store Tests ---


class TestInMemoryCounterStore:
    def test_missing_key(self) -> None:
        assert InMemoryCounterStore().get("nope") is None

    def test_put_then_get(self) -> None:
        store = InMemoryCounterStore(clock=FakeClock())
        store.put("k", 4, ttl_seconds=60)
        assert store.get("k") == 4
        assert len(store) == 1

    def test_expiry(self) -> None:
        clock = FakeClock()
        store = InMemoryCounterStore(clock=clock)
        store.put("k", 1, ttl_seconds=60)
        clock.advance(59.9)
        assert store.get("k") == 1
        clock.advance(0.1)
        assert store.get("k") is None
        assert len(store) == 0

    def test_put_resets_ttl(self) -> None:
        clock = FakeClock()
        store = InMemoryCounterStore(clock=clock)
        store.put("k", 1, ttl_seconds=60)
        clock.advance(50)
        store.put("k", 2, ttl_seconds=60)
        clock.advance(50)
        assert store.get("k") == 2


class TestRedisCounterStore:
    def test_round_trip_with_expiry(self) -> None:
        client = FakeRedis()
        store = RedisCounterStore(client)
        assert store.get("k") is None
        store.put("k", 7, ttl_seconds=300)
        assert store.get("k") == 7
        assert client.expiries["k"] == 300

    def test_limiter_over_redis(self) -> None:
        client = FakeRedis()
        limiter = RateLimiter(RateLimitConfig(max_notifications=2, per_minutes=5), RedisCounterStore(client))
        limiter.increment()
        limiter.increment()
        assert client.values[RATE_LIMIT_KEY] == b"2"
        assert client.expiries[RATE_LIMIT_KEY] == 300
        assert limiter.is_rate_limited() is True


# --- RateLimiter Tests ---


def test_state_enum():
    assert RateLimitState.OPEN == "open"
    assert RateLimitState.CLOSED == "closed"


class TestRateLimiter:
    def test_starts_open(self) -> None:
        limiter, _, _ = _limiter()
        assert limiter.current_count() == 0
        assert limiter.state() is RateLimitState.OPEN
        assert limiter.is_rate_limited() is False

    def test_closes_at_ceiling(self) -> None:
        limiter, _, _ = _limiter(max_notifications=3)
        limiter.increment()
        limiter.increment()
        assert limiter.is_rate_limited() is False
        limiter.increment()
        assert limiter.current_count() == 3
        assert limiter.state() is RateLimitState.CLOSED

    def test_reopens_after_window(self) -> None:
        limiter, _, clock = _limiter(max_notifications=2, per_minutes=1)
        limiter.increment()
        limiter.increment()
        assert limiter.is_rate_limited() is True
        clock.advance(60)
        assert limiter.current_count() == 0
        assert limiter.is_rate_limited() is False

    def test_increment_rearms_window(self) -> None:
        # Fixed window, not rolling: each write pushes expiry forward.
        limiter, _, clock = _limiter(max_notifications=2, per_minutes=1)
        limiter.increment()
        clock.advance(50)
        limiter.increment()
        clock.advance(50)
        assert limiter.current_count() == 2
        assert limiter.is_rate_limited() is True
        clock.advance(10)
        assert limiter.is_rate_limited() is False

    def test_zero_ceiling_is_always_closed(self) -> None:
        limiter, _, _ = _limiter(max_notifications=0)
        assert limiter.current_count() == 0
        assert limiter.state() is RateLimitState.CLOSED

    def test_uses_fixed_key(self) -> None:
        limiter, store, _ = _limiter()
        limiter.increment()
        assert limiter.key == RATE_LIMIT_KEY
        assert store.get(RATE_LIMIT_KEY) == 1

    def test_disabled_never_limited(self) -> None:
        limiter, store, _ = _limiter(max_notifications=1, enabled=False)
        store.put(RATE_LIMIT_KEY, 50, ttl_seconds=60)
        assert limiter.is_rate_limited() is False
        assert limiter.state() is RateLimitState.OPEN

    def test_disabled_increment_is_noop(self) -> None:
        limiter, store, _ = _limiter(enabled=False)
        limiter.increment()
        assert store.get(RATE_LIMIT_KEY) is None

    def test_concurrent_increments_can_undercount(self) -> None:
        # Read-then-write without locking: a writer slipping in between a
        # read and its write is overwritten. The limiter is best-effort.
        clock = FakeClock()
        store = InterleavingStore(clock)
        config = RateLimitConfig(max_notifications=10)
        first = RateLimiter(config, store)
        second = RateLimiter(config, store)

        store.on_get = second.increment
        first.increment()

        assert first.current_count() == 1


@pytest.mark.parametrize("per_minutes", [1, 5, 60])
def test_ttl_matches_window(per_minutes):
    client = FakeRedis()
    limiter = RateLimiter(RateLimitConfig(per_minutes=per_minutes), RedisCounterStore(client))
    limiter.increment()
    assert client.expiries[RATE_LIMIT_KEY] == per_minutes * 60
