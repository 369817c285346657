"""Captured error and request models.

An ``ErrorEvent`` is a read-only snapshot of an exception: a stable type
identifier (plus the identifiers of its base classes), message, source
location, optional HTTP status and a stack trace that is only rendered when
someone asks for it. ``RequestContext`` carries the method, URL and
authenticated principal only; headers and bodies are never captured.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import cached_property
from typing import Any, Callable, Sequence
from wsgiref.util import request_uri

ExceptionTypeId = str


def exception_type_id(exc_type: type[BaseException]) -> ExceptionTypeId:
    """Return the stable identifier for an exception class.

    A class can pin its identifier with a ``notification_type`` attribute.
    The attribute is looked up on the class itself, so subclasses do not
    inherit the tag of their parent.
    """
    tag = exc_type.__dict__.get("notification_type")
    if isinstance(tag, str) and tag:
        return tag
    if exc_type.__module__ == "builtins":
        return exc_type.__qualname__
    return f"{exc_type.__module__}.{exc_type.__qualname__}"


def exception_lineage(exc_type: type[BaseException]) -> tuple[ExceptionTypeId, ...]:
    """Identifiers of ``exc_type`` and every exception class it derives from."""
    return tuple(
        exception_type_id(cls)
        for cls in exc_type.__mro__
        if isinstance(cls, type) and issubclass(cls, BaseException)
    )


def short_type_name(type_id: ExceptionTypeId) -> str:
    return type_id.rsplit(".", 1)[-1]


def _status_from_exception(exc: BaseException) -> int | None:
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool) and 100 <= value <= 599:
            return value
    return None


@dataclass(frozen=True)
class StackFrame:
    """A single stack frame."""

    file: str
    line: int | None
    function: str

    def render(self, index: int) -> str:
        location = self.file if self.line is None else f"{self.file}:{self.line}"
        return f"#{index} {location} in {self.function}"


@dataclass(frozen=True)
class ErrorEvent:
    """A reportable error."""

    type_id: ExceptionTypeId
    message: str
    file: str | None = None
    line: int | None = None
    status_code: int | None = None
    lineage: tuple[ExceptionTypeId, ...] = ()
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    frames_factory: Callable[[], Sequence[StackFrame]] | None = field(
        default=None, repr=False, compare=False,
    )

    def __post_init__(self) -> None:
        if self.type_id not in self.lineage:
            object.__setattr__(self, "lineage", (self.type_id, *self.lineage))

    @property
    def short_name(self) -> str:
        return short_type_name(self.type_id)

    @cached_property
    def stack_frames(self) -> tuple[StackFrame, ...]:
        """Frames ordered outermost first; produced at most once."""
        if self.frames_factory is None:
            return ()
        return tuple(self.frames_factory())

    def trace_text(self) -> str:
        lines = [frame.render(i) for i, frame in enumerate(self.stack_frames)]
        lines.append(f"{self.short_name}: {self.message}")
        return "\n".join(lines)

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        status_code: int | None = None,
    ) -> ErrorEvent:
        """Capture an exception without rendering its traceback."""
        tb = exc.__traceback__
        file: str | None = None
        line: int | None = None
        for frame, lineno in traceback.walk_tb(tb):
            file, line = frame.f_code.co_filename, lineno

        def _frames() -> tuple[StackFrame, ...]:
            return tuple(
                StackFrame(file=f.filename, line=f.lineno, function=f.name)
                for f in traceback.extract_tb(tb)
            )

        exc_type = type(exc)
        return cls(
            type_id=exception_type_id(exc_type),
            message=str(exc),
            file=file,
            line=line,
            status_code=status_code if status_code is not None else _status_from_exception(exc),
            lineage=exception_lineage(exc_type),
            frames_factory=_frames if tb is not None else None,
        )


@dataclass(frozen=True)
class Principal:
    """The authenticated user behind a request."""

    identifier: str
    display_name: str | None = None


@dataclass(frozen=True)
class RequestContext:
    """Request metadata attached to a notification."""

    method: str
    url: str
    principal: Principal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())

    @classmethod
    def from_wsgi_environ(
        cls,
        environ: dict[str, Any],
        principal: Principal | None = None,
    ) -> RequestContext:
        """Build a context from a WSGI environ, ignoring headers and body."""
        return cls(
            method=str(environ.get("REQUEST_METHOD", "GET")),
            url=request_uri(environ, include_query=True),
            principal=principal,
        )


__all__ = [
    "ExceptionTypeId",
    "ErrorEvent",
    "Principal",
    "RequestContext",
    "StackFrame",
    "exception_lineage",
    "exception_type_id",
    "short_type_name",
]
