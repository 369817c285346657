"""Common configuration and constants for ErrorBeacon."""

from errorbeacon.common.config import NotificationConfig, NotifierSettings, RateLimitConfig
from errorbeacon.common.constants import (
    DEFAULT_COLORS,
    RATE_LIMIT_KEY,
    STACK_TRACE_LIMIT,
    TRUNCATION_SUFFIX,
    Severity,
)

__all__ = [
    "Severity",
    "DEFAULT_COLORS",
    "RATE_LIMIT_KEY",
    "STACK_TRACE_LIMIT",
    "TRUNCATION_SUFFIX",
    "NotificationConfig",
    "NotifierSettings",
    "RateLimitConfig",
]
