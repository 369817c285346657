"""Exception hook: the entry point host code calls when an error is reported.

The hook never lets a notifier failure interfere with the original error.
``report`` swallows and logs anything that goes wrong on its own side;
``capture`` always re-raises the caller's exception unchanged.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from types import TracebackType
from typing import Callable, Iterator

from errorbeacon.common.config import NotifierSettings
from errorbeacon.events.models import ErrorEvent, RequestContext
from errorbeacon.notifications.dispatch import NotificationDispatcher
from errorbeacon.notifications.ratelimit import CounterStore
from errorbeacon.notifications.transport import WebhookTransport

logger = logging.getLogger(__name__)


class ExceptionHook:
    """Reports exceptions through a NotificationDispatcher."""

    def __init__(self, dispatcher: NotificationDispatcher) -> None:
        self._dispatcher = dispatcher

    @classmethod
    def from_env(
        cls,
        store: CounterStore | None = None,
        transport: WebhookTransport | None = None,
    ) -> ExceptionHook:
        """Build a hook from ``ERRORBEACON_*`` environment variables."""
        config = NotifierSettings().to_config()
        return cls(NotificationDispatcher(config, store=store, transport=transport))

    @property
    def dispatcher(self) -> NotificationDispatcher:
        return self._dispatcher

    def report(
        self,
        exc: BaseException,
        request: RequestContext | None = None,
        status_code: int | None = None,
    ) -> bool:
        """Send a notification for ``exc``. Never raises."""
        try:
            event = ErrorEvent.from_exception(exc, status_code=status_code)
            return self._dispatcher.send(event, request)
        except Exception:
            logger.exception("Exception notifier failed while reporting %s", type(exc).__name__)
            return False

    @contextmanager
    def capture(self, request: RequestContext | None = None) -> Iterator[None]:
        """Report any exception raised in the block, then re-raise it."""
        try:
            yield
        except Exception as exc:
            self.report(exc, request)
            raise

    def install_excepthook(self) -> Callable[[], None]:
        """Report uncaught exceptions before the previous ``sys.excepthook`` runs.

        Returns a function that puts the previous hook back.
        """
        previous = sys.excepthook

        def _hook(
            exc_type: type[BaseException],
            exc: BaseException,
            tb: TracebackType | None,
        ) -> None:
            if not issubclass(exc_type, KeyboardInterrupt):
                if exc.__traceback__ is None and tb is not None:
                    exc = exc.with_traceback(tb)
                self.report(exc)
            previous(exc_type, exc, tb)

        sys.excepthook = _hook

        def _restore() -> None:
            sys.excepthook = previous

        return _restore


__all__ = ["ExceptionHook"]
