"""Locate notes and notebooks across the personal and linked domains.

Lookups try the personal store first. Only a not-found outcome there moves the
search on to the user's linked notebooks, which are walked one at a time with
a freshly resolved token each, stopping at the first hit.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TypeVar

from loguru import logger

from .aggregator import NotebookAggregator
from .auth import CredentialResolver
from .errors import EvernoteError, InvalidInputError
from .models import Note, Notebook, Scope
from .remote import LinkedNotebookRecord, NoteStore
from .state import SessionStateManager
from .transform import note_from_record, notebook_from_records, remote_call

T = TypeVar("T")

NoteAction = Callable[[NoteStore, str, str], T]


def _includes(scope: Scope | None, wanted: Scope) -> bool:
    return scope is None or scope is wanted


class ScopeFallbackResolver:
    """Find the domain that owns an entity, then act on it there."""

    def __init__(
        self,
        session: SessionStateManager,
        credentials: CredentialResolver,
        aggregator: NotebookAggregator,
    ) -> None:
        self._session = session
        self._credentials = credentials
        self._aggregator = aggregator

    def linked_stores(self) -> Iterator[tuple[LinkedNotebookRecord, NoteStore, str]]:
        """Yield each usable linked notebook with its store and token, lazily.

        Links the user has no rights on, or whose share no longer exists, are
        skipped.
        """
        for linked in self._aggregator.list_linked_notebooks():
            try:
                auth = self._credentials.resolve_shared_access(linked)
                store = self._credentials.linked_store(linked)
            except EvernoteError as exc:
                if not exc.is_recoverable_in_scope:
                    raise
                logger.debug(f"Skipping linked notebook {linked.guid}: {exc.kind.value}")
                continue
            yield linked, store, auth.authentication_token

    def find_note(self, guid: str, scope: Scope | None = None) -> Note | None:
        """Return the note stamped with its owning store, or None if absent."""
        if _includes(scope, Scope.PERSONAL):
            store = self._session.ensure_personal_store()
            token = self._session.token
            try:
                with remote_call("getNote"):
                    record = store.get_note(token, guid, True, True, False, False)
            except EvernoteError as exc:
                if not exc.is_not_found:
                    raise
                if scope is Scope.PERSONAL:
                    return None
                logger.debug(f"Note {guid} not in personal store, searching linked notebooks")
            else:
                return note_from_record(record, store, token, saved=True)

        for linked, store, token in self.linked_stores():
            try:
                with remote_call("getNote"):
                    record = store.get_note(token, guid, True, True, False, False)
            except EvernoteError as exc:
                if not exc.is_recoverable_in_scope:
                    raise
                continue
            logger.debug(f"Found note {guid} through linked notebook {linked.guid}")
            return note_from_record(record, store, token, saved=True)

        return None

    def find_notebook(self, guid: str, scope: Scope | None = None) -> Notebook | None:
        if _includes(scope, Scope.PERSONAL):
            store = self._session.ensure_personal_store()
            try:
                with remote_call("getNotebook"):
                    record = store.get_notebook(self._session.token, guid)
            except EvernoteError as exc:
                if not exc.is_not_found:
                    raise
                if scope is Scope.PERSONAL:
                    return None
            else:
                return notebook_from_records(
                    record, note_store_url=self._session.ensure_personal_store_url()
                )

        for linked in self._aggregator.list_linked_notebooks():
            try:
                notebook = self._credentials.notebook_from_linked(linked)
            except EvernoteError as exc:
                if not exc.is_recoverable_in_scope:
                    raise
                continue
            if notebook.guid == guid:
                return notebook

        return None

    def delete_note(self, note: Note) -> bool:
        """Delete ``note`` wherever it lives. False means it was not found."""

        def action(store: NoteStore, token: str, guid: str) -> bool:
            with remote_call("deleteNote"):
                store.delete_note(token, guid)
            return True

        return self._locate_and_apply(note, action) is not None

    def share_note(self, note: Note) -> tuple[Note, str] | None:
        """Share ``note`` and return its owning copy with the share key."""

        def action(store: NoteStore, token: str, guid: str) -> str:
            with remote_call("shareNote"):
                return store.share_note(token, guid)

        return self._locate_and_apply(note, action)

    def _locate_and_apply(self, note: Note, action: NoteAction[T]) -> tuple[Note, T] | None:
        if note.guid is None:
            raise InvalidInputError("Note has not been saved", resource="Note.guid")
        guid = note.guid

        if note.has_owning_store:
            try:
                return note, action(note.note_store, note.auth_token, guid)  # type: ignore[arg-type]
            except EvernoteError as exc:
                if not exc.is_not_found:
                    raise
            logger.debug(f"Note {guid} moved from its recorded store, searching all scopes")
            located = self.find_note(guid)
        else:
            store = self._session.ensure_personal_store()
            token = self._session.token
            try:
                result = action(store, token, guid)
            except EvernoteError as exc:
                if not exc.is_not_found:
                    raise
            else:
                return note.model_copy(update={"note_store": store, "auth_token": token}), result
            located = self.find_note(guid, Scope.LINKED)

        if located is None:
            return None
        return located, action(located.note_store, located.auth_token, guid)  # type: ignore[arg-type]
