"""Notifier configuration using Pydantic and Pydantic Settings.

``NotifierSettings`` reads the environment once; ``NotificationConfig`` is the
immutable, validated snapshot the dispatcher works from.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

from errorbeacon.common.constants import (
    DEFAULT_CHANNEL,
    DEFAULT_COLORS,
    DEFAULT_ICON_EMOJI,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USERNAME,
    Severity,
)


class RateLimitConfig(BaseModel):
    """Approximate fixed-window limit on notifications sent."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    max_notifications: int = Field(default=10, ge=0)  # 0 mutes every notification
    per_minutes: int = Field(default=1, ge=1)

    @property
    def ttl_seconds(self) -> int:
        return self.per_minutes * 60


class NotificationConfig(BaseModel):
    """Immutable notifier configuration snapshot."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    webhook_url: str = ""
    channel: str = DEFAULT_CHANNEL
    username: str = DEFAULT_USERNAME
    icon_emoji: str = DEFAULT_ICON_EMOJI
    environment: str = "production"

    notify_all_exceptions: bool = True
    notifiable_exceptions: frozenset[str] = frozenset()
    ignored_exceptions: frozenset[str] = frozenset()

    include_stack_trace: bool = True
    include_request_data: bool = True
    include_user_data: bool = True

    color_mapping: dict[str, str] = Field(default_factory=dict)
    default_colors: dict[Severity, str] = Field(default_factory=lambda: dict(DEFAULT_COLORS))
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    @field_validator("default_colors", mode="after")
    @classmethod
    def fill_missing_severities(cls, value: dict[Severity, str]) -> dict[Severity, str]:
        """Partial overrides keep the built-in color for the other severities."""
        return {**DEFAULT_COLORS, **value}

    @field_validator("color_mapping", "default_colors", mode="after")
    @classmethod
    def reject_blank_colors(cls, value: dict) -> dict:
        blank = sorted(str(k) for k, v in value.items() if not v.strip())
        if blank:
            raise ValueError(f"Blank color configured for: {', '.join(blank)}")
        return value

    @property
    def has_webhook(self) -> bool:
        return bool(self.webhook_url.strip())


def _split_list(raw: str) -> frozenset[str]:
    """Parse a comma-separated list of exception type identifiers."""
    return frozenset(item.strip() for item in raw.split(",") if item.strip())


def _parse_color_mapping(raw: str) -> dict[str, str]:
    """Parse ``Type=color`` pairs separated by commas."""
    mapping: dict[str, str] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        type_id, sep, color = pair.partition("=")
        if not sep or not type_id.strip() or not color.strip():
            raise ValueError(f"Invalid color mapping entry: {pair!r} (expected Type=color)")
        mapping[type_id.strip()] = color.strip()
    return mapping


class NotifierSettings(BaseSettings):
    """Notifier configuration loaded from environment variables."""

    enabled: bool = False
    webhook_url: str = ""
    channel: str = DEFAULT_CHANNEL
    username: str = DEFAULT_USERNAME
    icon_emoji: str = DEFAULT_ICON_EMOJI
    environment: str = "production"

    notify_all_exceptions: bool = True
    notifiable_exceptions: str = ""
    ignored_exceptions: str = ""

    include_stack_trace: bool = True
    include_request_data: bool = True
    include_user_data: bool = True

    rate_limit_enabled: bool = True
    rate_limit_max: int = 10
    rate_limit_per_minutes: int = 1

    color_mapping: str = ""
    color_critical: str = DEFAULT_COLORS[Severity.CRITICAL]
    color_warning: str = DEFAULT_COLORS[Severity.WARNING]
    color_default: str = DEFAULT_COLORS[Severity.DEFAULT]

    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    model_config = {"env_prefix": "ERRORBEACON_", "case_sensitive": False}

    def to_config(self) -> NotificationConfig:
        """Build the validated, immutable configuration snapshot."""
        return NotificationConfig(
            enabled=self.enabled,
            webhook_url=self.webhook_url,
            channel=self.channel,
            username=self.username,
            icon_emoji=self.icon_emoji,
            environment=self.environment,
            notify_all_exceptions=self.notify_all_exceptions,
            notifiable_exceptions=_split_list(self.notifiable_exceptions),
            ignored_exceptions=_split_list(self.ignored_exceptions),
            include_stack_trace=self.include_stack_trace,
            include_request_data=self.include_request_data,
            include_user_data=self.include_user_data,
            color_mapping=_parse_color_mapping(self.color_mapping),
            default_colors={
                Severity.CRITICAL: self.color_critical,
                Severity.WARNING: self.color_warning,
                Severity.DEFAULT: self.color_default,
            },
            rate_limit=RateLimitConfig(
                enabled=self.rate_limit_enabled,
                max_notifications=self.rate_limit_max,
                per_minutes=self.rate_limit_per_minutes,
            ),
            timeout_seconds=self.timeout_seconds,
        )


__all__ = ["NotificationConfig", "NotifierSettings", "RateLimitConfig"]
