"""Error and request capture."""

from __future__ import annotations

from errorbeacon.events.models import (
    ErrorEvent,
    ExceptionTypeId,
    Principal,
    RequestContext,
    StackFrame,
    exception_lineage,
    exception_type_id,
)

__all__ = [
    "ErrorEvent",
    "ExceptionTypeId",
    "Principal",
    "RequestContext",
    "StackFrame",
    "exception_lineage",
    "exception_type_id",
]
