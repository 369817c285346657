"""Notification dispatch service.

Decides whether an error is worth a message, checks the rate limit, builds
the payload and posts it to the webhook. Each stage reports an explicit
outcome; nothing raised inside the dispatcher escapes ``dispatch``.
The counter is incremented only after the webhook accepted the message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

import httpx

from errorbeacon.common.config import NotificationConfig
from errorbeacon.events.models import ErrorEvent, RequestContext
from errorbeacon.notifications.payload import PayloadBuilder
from errorbeacon.notifications.ratelimit import (
    CounterStore,
    InMemoryCounterStore,
    RateLimiter,
)
from errorbeacon.notifications.schemas import NotificationPayload
from errorbeacon.notifications.transport import WebhookTransport

logger = logging.getLogger(__name__)


# --- Enums ---


class DispatchOutcome(StrEnum):
    """Result of a single dispatch attempt."""

    SENT = "sent"
    DISABLED = "disabled"
    FILTERED = "filtered"
    RATE_LIMITED = "rate_limited"
    DELIVERY_FAILED = "delivery_failed"
    INTERNAL_ERROR = "internal_error"


# --- Data Models ---


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of dispatching one error event."""

    outcome: DispatchOutcome
    error: str | None = None
    payload: NotificationPayload | None = None

    @property
    def sent(self) -> bool:
        return self.outcome is DispatchOutcome.SENT


# --- Notification Dispatcher ---


class NotificationDispatcher:
    """Sends error notifications to the configured webhook.

    Eligibility rules:
    - disabled or no webhook URL -> skipped
    - any class in the event's lineage on the ignore list -> skipped
    - ``notify_all_exceptions`` off -> only types on the allow list are sent
    - the ignore list always wins over the allow list
    """

    def __init__(
        self,
        config: NotificationConfig,
        store: CounterStore | None = None,
        transport: WebhookTransport | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._config = config
        if store is None:
            store = InMemoryCounterStore()
        self._limiter = RateLimiter(config.rate_limit, store)
        self._builder = PayloadBuilder(config)
        self._transport = transport or WebhookTransport(timeout=config.timeout_seconds)
        self._log = log or logger

    @property
    def config(self) -> NotificationConfig:
        return self._config

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._limiter

    @property
    def builder(self) -> PayloadBuilder:
        return self._builder

    @property
    def transport(self) -> WebhookTransport:
        return self._transport

    def eligibility(self, event: ErrorEvent) -> DispatchOutcome | None:
        """Return the skip outcome for ``event``, or None if it may be sent."""
        if not self._config.enabled or not self._config.has_webhook:
            return DispatchOutcome.DISABLED

        lineage = set(event.lineage)
        if lineage & self._config.ignored_exceptions:
            return DispatchOutcome.FILTERED

        if self._config.notify_all_exceptions:
            return None
        if lineage & self._config.notifiable_exceptions:
            return None
        return DispatchOutcome.FILTERED

    def should_send(self, event: ErrorEvent) -> bool:
        return self.eligibility(event) is None

    def is_rate_limited(self) -> bool:
        return self._limiter.is_rate_limited()

    def increment(self) -> None:
        self._limiter.increment()

    def dispatch(
        self,
        event: ErrorEvent,
        request: RequestContext | None = None,
    ) -> DispatchResult:
        """Try to deliver one notification for ``event``."""
        try:
            skipped = self.eligibility(event)
            if skipped is not None:
                return DispatchResult(outcome=skipped)

            if self.is_rate_limited():
                return DispatchResult(outcome=DispatchOutcome.RATE_LIMITED)

            payload = self._builder.build(event, request)
        except Exception as exc:
            self._log.error("Failed to prepare exception notification: %s", exc)
            return DispatchResult(outcome=DispatchOutcome.INTERNAL_ERROR, error=str(exc))

        try:
            self._transport.post(self._config.webhook_url, payload)
        except httpx.HTTPError as exc:
            self._log.error("Failed to send exception notification: %s", exc)
            return DispatchResult(
                outcome=DispatchOutcome.DELIVERY_FAILED, error=str(exc), payload=payload,
            )
        except Exception as exc:
            self._log.error("Failed to send exception notification: %s", exc)
            return DispatchResult(
                outcome=DispatchOutcome.INTERNAL_ERROR, error=str(exc), payload=payload,
            )

        try:
            self.increment()
        except Exception as exc:
            self._log.error("Notification sent but rate limit counter update failed: %s", exc)
            return DispatchResult(
                outcome=DispatchOutcome.INTERNAL_ERROR, error=str(exc), payload=payload,
            )

        return DispatchResult(outcome=DispatchOutcome.SENT, payload=payload)

    def send(self, event: ErrorEvent, request: RequestContext | None = None) -> bool:
        """Dispatch ``event`` and report whether the message was delivered."""
        return self.dispatch(event, request).sent


__all__ = [
    "DispatchOutcome",
    "DispatchResult",
    "NotificationDispatcher",
]
