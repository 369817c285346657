"""Payload builder: turns an ErrorEvent into a chat block message.

Block order is fixed: header, request, user, stack trace. Only the header is
always present; the others depend on the include flags and on what the
request context can provide.
"""

from __future__ import annotations

import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from errorbeacon.common.config import NotificationConfig
from errorbeacon.common.constants import STACK_TRACE_LIMIT, TRUNCATION_SUFFIX, Severity
from errorbeacon.events.models import ErrorEvent, Principal, RequestContext
from errorbeacon.notifications.schemas import (
    Attachment,
    Block,
    NotificationPayload,
    TextObject,
)

_SECRET_PARAM = re.compile(r"(token|password|passwd|secret|key|auth|session|signature|sig)", re.I)
_REDACTED = "***"
_BACKTICK_RUN = re.compile(r"`(?=`)|`$")
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


def truncate_trace(text: str, limit: int = STACK_TRACE_LIMIT) -> str:
    """Cut ``text`` to ``limit`` characters and mark the cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_SUFFIX


def severity_for_status(status_code: int | None) -> Severity:
    """Map an HTTP-style status code to a color severity."""
    if status_code is None:
        return Severity.DEFAULT
    if status_code >= 500:
        return Severity.CRITICAL
    if 400 <= status_code < 500:
        return Severity.WARNING
    return Severity.DEFAULT


def redact_url(url: str) -> str:
    """Mask credentials and secret-looking query parameters in a URL."""
    parts = urlsplit(url)
    netloc = parts.netloc
    if "@" in netloc:
        netloc = netloc.rsplit("@", 1)[1]

    query = parts.query
    if query:
        pairs = parse_qsl(query, keep_blank_values=True)
        if any(_SECRET_PARAM.search(k) for k, _ in pairs):
            query = urlencode(
                [(k, _REDACTED if _SECRET_PARAM.search(k) else v) for k, v in pairs],
                safe="*",
            )

    if netloc == parts.netloc and query == parts.query:
        return url
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


def _escape(text: str) -> str:
    # Control characters for the chat service's markup.
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _field(label: str, value: str) -> TextObject:
    return TextObject(text=f"*{label}:*\n{_escape(value)}")


def _truncate_escaped(text: str, limit: int = STACK_TRACE_LIMIT) -> str:
    """Truncate already-escaped text without splitting an entity."""
    amp = text.rfind("&", 0, limit)
    if len(text) > limit and amp != -1 and ";" not in text[amp:limit]:
        limit = amp
    return truncate_trace(text, limit)


class PayloadBuilder:
    """Builds notification payloads from errors and request context."""

    def __init__(self, config: NotificationConfig) -> None:
        self._config = config

    @property
    def config(self) -> NotificationConfig:
        return self._config

    def build(
        self,
        event: ErrorEvent,
        request: RequestContext | None = None,
    ) -> NotificationPayload:
        """Build the full message for ``event``."""
        blocks = [self._header_block(event)]

        if self._config.include_request_data and request is not None:
            blocks.append(self._request_block(request))

        if (
            self._config.include_user_data
            and request is not None
            and request.principal is not None
        ):
            blocks.append(self._user_block(request.principal))

        if self._config.include_stack_trace:
            blocks.append(self._stack_trace_block(event))

        return NotificationPayload(
            channel=self._config.channel,
            username=self._config.username,
            icon_emoji=self._config.icon_emoji,
            attachments=[
                Attachment(
                    color=self.get_exception_color(event),
                    fallback=self.fallback_text(event),
                    blocks=blocks,
                ),
            ],
        )

    def get_exception_color(self, event: ErrorEvent) -> str:
        """Explicit mapping first (most specific class wins), then status code."""
        for type_id in event.lineage:
            color = self._config.color_mapping.get(type_id)
            if color is not None:
                return color
        return self._config.default_colors[severity_for_status(event.status_code)]

    @staticmethod
    def fallback_text(event: ErrorEvent) -> str:
        return f"{event.short_name}: {event.message}"

    def _header_block(self, event: ErrorEvent) -> Block:
        message = _escape(event.message) if event.message else "_(no message)_"
        return Block(
            block_id="header",
            text=TextObject(text=f"*{_escape(event.short_name)}*\n{message}"),
            fields=[
                _field("Type", event.type_id),
                _field("File", event.file or "unknown"),
                _field("Line", str(event.line) if event.line is not None else "unknown"),
                _field("Environment", self._config.environment),
                _field("Time", event.occurred_at.strftime(_TIMESTAMP_FORMAT).strip()),
            ],
        )

    @staticmethod
    def _request_block(request: RequestContext) -> Block:
        return Block(
            block_id="request",
            fields=[
                _field("Method", request.method),
                _field("URL", redact_url(request.url)),
            ],
        )

    @staticmethod
    def _user_block(principal: Principal) -> Block:
        fields = [_field("User ID", principal.identifier)]
        if principal.display_name:
            fields.append(_field("Name", principal.display_name))
        return Block(block_id="user", fields=fields)

    @staticmethod
    def _stack_trace_block(event: ErrorEvent) -> Block:
        # Keep the trace from closing the preformatted block early.
        trace = _BACKTICK_RUN.sub("`\u200b", _escape(event.trace_text()))
        trace = _truncate_escaped(trace)
        return Block(
            block_id="stack_trace",
            text=TextObject(text=f"*Stack Trace:*\n```{trace}```"),
        )


__all__ = ["PayloadBuilder", "redact_url", "severity_for_status", "truncate_trace"]
