"""ErrorBeacon – exception reporting to a chat channel via incoming webhook."""

from __future__ import annotations

from errorbeacon.common.config import NotificationConfig, NotifierSettings, RateLimitConfig
from errorbeacon.events.models import ErrorEvent, Principal, RequestContext, StackFrame
from errorbeacon.hooks import ExceptionHook
from errorbeacon.notifications.dispatch import (
    DispatchOutcome,
    DispatchResult,
    NotificationDispatcher,
)

__version__ = "0.3.0"

__all__ = [
    "DispatchOutcome",
    "DispatchResult",
    "ErrorEvent",
    "ExceptionHook",
    "NotificationConfig",
    "NotificationDispatcher",
    "NotifierSettings",
    "Principal",
    "RateLimitConfig",
    "RequestContext",
    "StackFrame",
]
