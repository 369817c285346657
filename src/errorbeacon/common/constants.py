"""Constants and enums for ErrorBeacon."""

from enum import StrEnum
from typing import Final


class Severity(StrEnum):
    """Color buckets used when an exception type has no explicit color."""

    CRITICAL = "critical"  # HTTP 5xx
    WARNING = "warning"  # HTTP 4xx
    DEFAULT = "default"


DEFAULT_COLORS: Final[dict[Severity, str]] = {
    Severity.CRITICAL: "#E01E5A",
    Severity.WARNING: "#ECB22E",
    Severity.DEFAULT: "#439FE0",
}

STACK_TRACE_LIMIT: Final[int] = 2500
TRUNCATION_SUFFIX: Final[str] = "... (truncated)"

RATE_LIMIT_KEY: Final[str] = "errorbeacon:notifications:count"

DEFAULT_CHANNEL: Final[str] = "#exceptions"
DEFAULT_USERNAME: Final[str] = "Exception Notifier"
DEFAULT_ICON_EMOJI: Final[str] = ":rotating_light:"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 5.0

__all__ = [
    "Severity",
    "DEFAULT_COLORS",
    "STACK_TRACE_LIMIT",
    "TRUNCATION_SUFFIX",
    "RATE_LIMIT_KEY",
    "DEFAULT_CHANNEL",
    "DEFAULT_USERNAME",
    "DEFAULT_ICON_EMOJI",
    "DEFAULT_TIMEOUT_SECONDS",
]
