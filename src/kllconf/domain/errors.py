"""Error taxonomy for the configuration editor core.

Only ``PreconditionViolation`` is ever raised out of a public operation.
Unknown key codes are recovered in the normalizer; missing targets are
silent no-ops. Both are still tagged with an :class:`ErrorCode` in logs
and warnings so the host can surface them.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Stable identifiers for editor error kinds."""

    UNKNOWN_KEY_CODE = "UNKNOWN_KEY_CODE"
    TARGET_NOT_FOUND = "TARGET_NOT_FOUND"
    PRECONDITION_VIOLATION = "PRECONDITION_VIOLATION"


class ConfigureError(Exception):
    """Base class for errors raised by kllconf."""

    code: ErrorCode = ErrorCode.PRECONDITION_VIOLATION

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class PreconditionViolation(ConfigureError):
    """A mutator was called on state that does not support it.

    Typically the store is still empty (no config loaded) or the
    macro list for the requested layer does not exist yet.
    """

    code = ErrorCode.PRECONDITION_VIOLATION
