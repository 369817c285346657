"""Tests for notifier configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from errorbeacon.common.config import NotificationConfig, NotifierSettings, RateLimitConfig
from errorbeacon.common.constants import DEFAULT_COLORS, Severity


# --- Enum Tests ---


def test_severity_enum():
    assert Severity.CRITICAL == "critical"
    assert Severity.WARNING == "warning"
    assert Severity.DEFAULT == "default"


# --- RateLimitConfig Tests ---


def test_rate_limit_defaults():
    cfg = RateLimitConfig()
    assert cfg.enabled is True
    assert cfg.max_notifications == 10
    assert cfg.per_minutes == 1
    assert cfg.ttl_seconds == 60


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_notifications": -5},
        {"per_minutes": 0},
        {"per_minutes": -1},
    ],
)
def test_rate_limit_rejects_out_of_range(overrides):
    with pytest.raises(ValidationError):
        RateLimitConfig(**overrides)


def test_rate_limit_zero_ceiling_allowed():
    cfg = RateLimitConfig(max_notifications=0)
    assert cfg.max_notifications == 0


# --- NotificationConfig Tests ---


class TestNotificationConfig:
    def test_defaults(self) -> None:
        cfg = NotificationConfig()
        assert cfg.enabled is False
        assert cfg.webhook_url == ""
        assert cfg.has_webhook is False
        assert cfg.notify_all_exceptions is True
        assert cfg.ignored_exceptions == frozenset()
        assert cfg.include_stack_trace is True
        assert cfg.default_colors == DEFAULT_COLORS
        assert cfg.rate_limit == RateLimitConfig()

    def test_frozen(self) -> None:
        cfg = NotificationConfig()
        with pytest.raises(ValidationError):
            cfg.enabled = True

    def test_lists_become_frozensets(self) -> None:
        cfg = NotificationConfig(ignored_exceptions=["KeyError", "KeyError", "ValueError"])
        assert cfg.ignored_exceptions == frozenset({"KeyError", "ValueError"})

    def test_partial_default_colors_keep_builtins(self) -> None:
        cfg = NotificationConfig(default_colors={"critical": "#000000"})
        assert cfg.default_colors[Severity.CRITICAL] == "#000000"
        assert cfg.default_colors[Severity.WARNING] == DEFAULT_COLORS[Severity.WARNING]
        assert cfg.default_colors[Severity.DEFAULT] == DEFAULT_COLORS[Severity.DEFAULT]

    def test_blank_color_rejected(self) -> None:
        with pytest.raises(ValidationError):
            NotificationConfig(color_mapping={"KeyError": "  "})

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            NotificationConfig(timeout_seconds=0)

    def test_blank_webhook_is_missing(self) -> None:
        assert NotificationConfig(webhook_url="   ").has_webhook is False


# --- NotifierSettings Tests ---


class TestNotifierSettings:
    def test_defaults_without_env(self) -> None:
        cfg = NotifierSettings().to_config()
        assert cfg == NotificationConfig()

    def test_reads_prefixed_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ERRORBEACON_ENABLED", "true")
        monkeypatch.setenv("ERRORBEACON_WEBHOOK_URL", "https://hooks.example.com/services/T/B/X")
        monkeypatch.setenv("ERRORBEACON_CHANNEL", "#ops")
        monkeypatch.setenv("ERRORBEACON_ENVIRONMENT", "staging")
        monkeypatch.setenv("ERRORBEACON_NOTIFY_ALL_EXCEPTIONS", "false")
        monkeypatch.setenv("ERRORBEACON_NOTIFIABLE_EXCEPTIONS", "app.errors.PaymentError, RuntimeError")
        monkeypatch.setenv("ERRORBEACON_IGNORED_EXCEPTIONS", "KeyboardInterrupt,,")
        monkeypatch.setenv("ERRORBEACON_INCLUDE_USER_DATA", "0")
        monkeypatch.setenv("ERRORBEACON_RATE_LIMIT_MAX", "3")
        monkeypatch.setenv("ERRORBEACON_RATE_LIMIT_PER_MINUTES", "15")
        monkeypatch.setenv("ERRORBEACON_COLOR_MAPPING", "app.errors.PaymentError=#ff0000, KeyError=good")
        monkeypatch.setenv("ERRORBEACON_COLOR_WARNING", "#123456")

        cfg = NotifierSettings().to_config()

        assert cfg.enabled is True
        assert cfg.has_webhook is True
        assert cfg.channel == "#ops"
        assert cfg.environment == "staging"
        assert cfg.notify_all_exceptions is False
        assert cfg.notifiable_exceptions == frozenset({"app.errors.PaymentError", "RuntimeError"})
        assert cfg.ignored_exceptions == frozenset({"KeyboardInterrupt"})
        assert cfg.include_user_data is False
        assert cfg.rate_limit.max_notifications == 3
        assert cfg.rate_limit.ttl_seconds == 900
        assert cfg.color_mapping == {"app.errors.PaymentError": "#ff0000", "KeyError": "good"}
        assert cfg.default_colors[Severity.WARNING] == "#123456"

    def test_malformed_color_mapping(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ERRORBEACON_COLOR_MAPPING", "KeyError")
        with pytest.raises(ValueError, match="Invalid color mapping"):
            NotifierSettings().to_config()

    def test_negative_window_rejected_at_load(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ERRORBEACON_RATE_LIMIT_PER_MINUTES", "-1")
        with pytest.raises(ValidationError):
            NotifierSettings().to_config()
