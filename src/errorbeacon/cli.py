"""Command-line entry point for checking a notifier deployment."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from errorbeacon.common.config import NotificationConfig, NotifierSettings
from errorbeacon.events.models import ErrorEvent
from errorbeacon.notifications.dispatch import DispatchOutcome, NotificationDispatcher

logger = logging.getLogger(__name__)


class NotifierTestException(RuntimeError):
    """Raised on purpose by ``errorbeacon test``."""

    notification_type = "NotifierTestException"


def _masked_config(config: NotificationConfig) -> dict:
    data = config.model_dump(mode="json")
    if data["webhook_url"]:
        data["webhook_url"] = data["webhook_url"][:24] + "***"
    data["notifiable_exceptions"] = sorted(data["notifiable_exceptions"])
    data["ignored_exceptions"] = sorted(data["ignored_exceptions"])
    return data


def _sample_event(message: str) -> ErrorEvent:
    try:
        raise NotifierTestException(message)
    except NotifierTestException as exc:
        return ErrorEvent.from_exception(exc)


def cmd_test(config: NotificationConfig, message: str) -> int:
    dispatcher = NotificationDispatcher(config)
    result = dispatcher.dispatch(_sample_event(message))
    print(f"outcome: {result.outcome}")
    if result.error:
        print(f"error: {result.error}")
    return 0 if result.outcome is DispatchOutcome.SENT else 1


def cmd_config(config: NotificationConfig) -> int:
    print(json.dumps(_masked_config(config), indent=2, sort_keys=True))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="errorbeacon",
        description="ErrorBeacon – exception notifications for chat channels",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration is read from ERRORBEACON_* environment variables.

Examples:
  # Send a test notification through the normal dispatch path
  ERRORBEACON_ENABLED=true ERRORBEACON_WEBHOOK_URL=https://hooks.example/T/B/X errorbeacon test

  # Show the resolved configuration (webhook URL masked)
  errorbeacon config
        """,
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    test_parser = sub.add_parser("test", help="Send a test notification")
    test_parser.add_argument(
        "--message", type=str, default="This is a test notification from errorbeacon",
        help="Message carried by the test exception",
    )
    sub.add_parser("config", help="Print the resolved configuration as JSON")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = NotifierSettings().to_config()
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    if args.command == "test":
        return cmd_test(config, args.message)
    return cmd_config(config)


if __name__ == "__main__":
    sys.exit(main())
