"""Exception notification dispatch."""

from __future__ import annotations

from errorbeacon.notifications.dispatch import (
    DispatchOutcome,
    DispatchResult,
    NotificationDispatcher,
)
from errorbeacon.notifications.payload import PayloadBuilder
from errorbeacon.notifications.ratelimit import (
    CounterStore,
    InMemoryCounterStore,
    RateLimiter,
    RateLimitState,
    RedisCounterStore,
)
from errorbeacon.notifications.schemas import NotificationPayload
from errorbeacon.notifications.transport import WebhookTransport

__all__ = [
    "CounterStore",
    "DispatchOutcome",
    "DispatchResult",
    "InMemoryCounterStore",
    "NotificationDispatcher",
    "NotificationPayload",
    "PayloadBuilder",
    "RateLimitState",
    "RateLimiter",
    "RedisCounterStore",
    "WebhookTransport",
]
