"""Webhook delivery over HTTP."""

from __future__ import annotations

import httpx

from errorbeacon.common.constants import DEFAULT_TIMEOUT_SECONDS
from errorbeacon.notifications.schemas import NotificationPayload


class WebhookTransport:
    """Posts notification payloads to an incoming webhook.

    Every request is bounded by ``timeout`` seconds. Transport errors,
    timeouts and non-2xx responses surface as ``httpx.HTTPError``.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        self._timeout = timeout
        self._client = client

    @property
    def timeout(self) -> float:
        return self._timeout

    def post(self, url: str, payload: NotificationPayload) -> httpx.Response:
        body = payload.to_body()
        if self._client is not None:
            response = self._client.post(url, json=body, timeout=self._timeout)
        else:
            with httpx.Client(timeout=self._timeout) as client:
                response = client.post(url, json=body)
        response.raise_for_status()
        return response

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


__all__ = ["WebhookTransport"]
