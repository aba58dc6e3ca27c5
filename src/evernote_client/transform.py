"""Translate remote records into client models and remote faults into client errors."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger

from .errors import (
    EvernoteError,
    InvalidInputError,
    NotFoundNotebookError,
    NotFoundNoteError,
    PermissionDeniedError,
    RateLimitedError,
    RemoteSystemError,
    UnknownError,
)
from .models import Note, Notebook
from .remote import (
    EDAMErrorCode,
    EDAMNotFoundException,
    EDAMSystemException,
    EDAMUserException,
    LinkedNotebookRecord,
    NotebookRecord,
    NoteRecord,
    SharedNotebookRecord,
)

_NOTEBOOK_IDENTIFIERS = ("Notebook.", "SharedNotebook.", "LinkedNotebook.")

_PERMISSION_CODES = {
    EDAMErrorCode.PERMISSION_DENIED,
    EDAMErrorCode.INVALID_AUTH,
    EDAMErrorCode.AUTH_EXPIRED,
}


def _translate_not_found(fault: EDAMNotFoundException) -> EvernoteError:
    identifier = fault.identifier or ""
    context = {"identifier": fault.identifier, "key": fault.key}
    if identifier.startswith(_NOTEBOOK_IDENTIFIERS) or identifier.endswith("notebookGuid"):
        return NotFoundNotebookError(str(fault), resource=identifier, context=context)
    if identifier.startswith("Note."):
        return NotFoundNoteError(str(fault), resource=identifier, context=context)
    return UnknownError(str(fault), resource=identifier or None, context=context)


def _translate_user_fault(fault: EDAMUserException) -> EvernoteError:
    context = {"fault": "user", "error_code": fault.error_code, "parameter": fault.parameter}
    if fault.error_code in _PERMISSION_CODES:
        return PermissionDeniedError(fault.parameter or "unknown", str(fault), context=context)
    if fault.error_code == EDAMErrorCode.RATE_LIMIT_REACHED:
        return RateLimitedError(str(fault), context=context)
    # Every other user fault is the caller's request being refused.
    return InvalidInputError(str(fault), resource=fault.parameter, context=context)


def _translate_system_fault(fault: EDAMSystemException) -> EvernoteError:
    context = {"error_code": fault.error_code}
    if fault.error_code == EDAMErrorCode.RATE_LIMIT_REACHED:
        return RateLimitedError(
            str(fault), retry_after=fault.rate_limit_duration, context=context
        )
    return RemoteSystemError(str(fault), context=context)


def translate_remote_fault(exc: BaseException) -> EvernoteError:
    """Map a raw failure onto the client's error taxonomy.

    Already-translated errors are returned unchanged so a failure is never
    wrapped twice.
    """
    if isinstance(exc, EvernoteError):
        return exc
    if isinstance(exc, EDAMNotFoundException):
        return _translate_not_found(exc)
    if isinstance(exc, EDAMUserException):
        return _translate_user_fault(exc)
    if isinstance(exc, EDAMSystemException):
        return _translate_system_fault(exc)
    return UnknownError(str(exc) or type(exc).__name__, context={"type": type(exc).__name__})


@contextmanager
def remote_call(operation: str) -> Iterator[None]:
    """Translate any failure raised inside the block, once."""
    try:
        yield
    except EvernoteError:
        raise
    except Exception as exc:
        error = translate_remote_fault(exc)
        error.context.setdefault("operation", operation)
        logger.debug(f"{operation} failed: {error.kind.value} ({error.message})")
        raise error from exc


def notebook_from_records(
    notebook: NotebookRecord | None = None,
    linked: LinkedNotebookRecord | None = None,
    shared: SharedNotebookRecord | None = None,
    business: NotebookRecord | None = None,
    *,
    is_shared: bool = False,
    auth_token: str | None = None,
    note_store_url: str | None = None,
) -> Notebook:
    """Build a notebook from every record known to describe it.

    The guid comes from the notebook record itself when one exists, otherwise
    from the sharing record's target; the link record's own guid is never used.
    """
    guid: str | None = None
    name: str | None = None
    for record in (notebook, business):
        if record is not None:
            guid = guid or record.guid
            name = name or record.name
    if guid is None and shared is not None:
        guid = shared.notebook_guid
    if name is None and linked is not None:
        name = linked.share_name
    if note_store_url is None and linked is not None:
        note_store_url = linked.note_store_url

    return Notebook(
        guid=guid,
        name=name,
        is_shared=is_shared,
        auth_token=auth_token,
        note_store_url=note_store_url,
        notebook=notebook,
        linked_notebook=linked,
        shared_notebook=shared,
        business_notebook=business,
    )


def note_from_record(
    record: NoteRecord,
    note_store: Any = None,
    auth_token: str | None = None,
    *,
    saved: bool = False,
) -> Note:
    return Note(
        guid=record.guid,
        title=record.title,
        content=record.content,
        notebook_guid=record.notebook_guid,
        attributes=record.attributes,
        resources=list(record.resources),
        saved=saved,
        auth_token=auth_token,
        note_store=note_store,
    )


def note_record_from_note(
    note: Note, *, guid: str | None = None, notebook_guid: str | None = None
) -> NoteRecord:
    """Copy the editable fields of ``note`` onto a wire record."""
    return NoteRecord(
        guid=guid,
        title=note.title,
        content=note.content,
        notebook_guid=notebook_guid,
        attributes=note.attributes,
        resources=list(note.resources),
    )
