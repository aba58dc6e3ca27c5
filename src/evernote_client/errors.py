"""Exception hierarchy surfaced by the client.

Every failure that leaves a remote call is one of these, tagged with an
:class:`ErrorKind`. Callers that need to recover from a particular outcome
branch on ``exc.kind`` rather than on the concrete subclass.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    NOT_FOUND_NOTEBOOK = "not_found_notebook"
    NOT_FOUND_NOTE = "not_found_note"
    PERMISSION_DENIED = "permission_denied"
    RATE_LIMITED = "rate_limited"
    INVALID_INPUT = "invalid_input"
    REMOTE_SYSTEM_ERROR = "remote_system_error"
    UNKNOWN = "unknown"


NOT_FOUND_KINDS = frozenset({ErrorKind.NOT_FOUND_NOTEBOOK, ErrorKind.NOT_FOUND_NOTE})


class EvernoteError(Exception):
    """Base exception for all client errors.

    Attributes:
        kind: Stable classification of the failure.
        message: Human-readable description, preserved from the remote fault.
        resource: Name of the object or parameter involved, when known.
        context: Extra diagnostic data (operation name, raw codes).
    """

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        resource: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.resource = resource
        self.context = context or {}

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    @property
    def is_not_found(self) -> bool:
        return self.kind in NOT_FOUND_KINDS

    @property
    def is_recoverable_in_scope(self) -> bool:
        """True when a linked-notebook walk should move on to the next notebook."""
        return self.is_not_found or self.kind is ErrorKind.PERMISSION_DENIED


class NotFoundNotebookError(EvernoteError):
    kind = ErrorKind.NOT_FOUND_NOTEBOOK


class NotFoundNoteError(EvernoteError):
    kind = ErrorKind.NOT_FOUND_NOTE


class PermissionDeniedError(EvernoteError):
    kind = ErrorKind.PERMISSION_DENIED

    def __init__(
        self,
        resource: str,
        message: str | None = None,
        *,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message or f"Permission denied: {resource}", resource=resource, context=context
        )


class RateLimitedError(EvernoteError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(
        self,
        message: str,
        *,
        retry_after: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.retry_after = retry_after


class InvalidInputError(EvernoteError):
    kind = ErrorKind.INVALID_INPUT


class RemoteSystemError(EvernoteError):
    kind = ErrorKind.REMOTE_SYSTEM_ERROR


class UnknownError(EvernoteError):
    kind = ErrorKind.UNKNOWN
