"""Pytest configuration and in-memory stand-ins for the remote service.

This file ensures that:
- `src/` is importable
- tests get a fake gateway whose stores record every call
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Ensure src directory is in path for imports
repo_root = Path(__file__).parent.parent
src_path = repo_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from evernote_client.client import EvernoteClient  # noqa: E402
from evernote_client.remote import (  # noqa: E402
    AuthenticationResult,
    EDAMNotFoundException,
    LinkedNotebookRecord,
    NotebookRecord,
    NoteRecord,
    SharedNotebookRecord,
    User,
)

BASE_TOKEN = "S=s1:U=1:E=150:C=14f:P=1cd:A=en-devtoken:V=2:H=abc"
PERSONAL_URL = "https://sandbox.evernote.com/shard/s1/notestore"
BUSINESS_URL = "https://sandbox.evernote.com/shard/s9/notestore"


class FakeNoteStore:
    """Note store backed by plain dictionaries."""

    def __init__(self, url: str) -> None:
        self.url = url
        self.notebooks: list[NotebookRecord] = []
        self.shared_notebooks: list[SharedNotebookRecord] = []
        self.linked_notebooks: list[LinkedNotebookRecord] = []
        self.notes: dict[str, NoteRecord] = {}
        self.share_auth: dict[str, AuthenticationResult] = {}
        self.shared_by_auth: dict[str, SharedNotebookRecord] = {}
        self.default_notebook: NotebookRecord | None = None
        self.failures: dict[str, Exception] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._next_guid = 0

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.failures:
            raise self.failures[name]

    def called(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]

    def list_notebooks(self, token: str) -> list[NotebookRecord]:
        self._record("list_notebooks", token)
        return list(self.notebooks)

    def list_shared_notebooks(self, token: str) -> list[SharedNotebookRecord]:
        self._record("list_shared_notebooks", token)
        return list(self.shared_notebooks)

    def list_linked_notebooks(self, token: str) -> list[LinkedNotebookRecord]:
        self._record("list_linked_notebooks", token)
        return list(self.linked_notebooks)

    def get_notebook(self, token: str, guid: str) -> NotebookRecord:
        self._record("get_notebook", token, guid)
        for notebook in self.notebooks:
            if notebook.guid == guid:
                return notebook
        raise EDAMNotFoundException("Notebook.guid", guid)

    def get_default_notebook(self, token: str) -> NotebookRecord:
        self._record("get_default_notebook", token)
        assert self.default_notebook is not None
        return self.default_notebook

    def authenticate_to_shared_notebook(
        self, share_key: str, token: str
    ) -> AuthenticationResult:
        self._record("authenticate_to_shared_notebook", share_key, token)
        if share_key not in self.share_auth:
            raise EDAMNotFoundException("SharedNotebook.id", share_key)
        return self.share_auth[share_key]

    def get_shared_notebook_by_auth(self, token: str) -> SharedNotebookRecord:
        self._record("get_shared_notebook_by_auth", token)
        return self.shared_by_auth[token]

    def get_note(
        self,
        token: str,
        guid: str,
        with_content: bool,
        with_resources_data: bool,
        with_resources_recognition: bool,
        with_resources_alternate_data: bool,
    ) -> NoteRecord:
        self._record("get_note", token, guid)
        if guid not in self.notes:
            raise EDAMNotFoundException("Note.guid", guid)
        return self.notes[guid].model_copy()

    def create_note(self, token: str, note: NoteRecord) -> NoteRecord:
        self._record("create_note", token, note)
        known = {notebook.guid for notebook in self.notebooks}
        if note.notebook_guid is not None and note.notebook_guid not in known:
            raise EDAMNotFoundException("Note.notebookGuid", note.notebook_guid)
        self._next_guid += 1
        created = note.model_copy(update={"guid": f"{self.url}#note-{self._next_guid}"})
        self.notes[created.guid] = created  # type: ignore[index]
        # Simulate the service normalizing content on the way back.
        return created.model_copy(update={"content": "<normalized/>"})

    def update_note(self, token: str, note: NoteRecord) -> NoteRecord:
        self._record("update_note", token, note)
        if note.guid not in self.notes:
            raise EDAMNotFoundException("Note.guid", note.guid)
        self.notes[note.guid] = note.model_copy()
        return note.model_copy(update={"content": "<normalized/>"})

    def delete_note(self, token: str, guid: str) -> int:
        self._record("delete_note", token, guid)
        if guid not in self.notes:
            raise EDAMNotFoundException("Note.guid", guid)
        del self.notes[guid]
        return 1

    def share_note(self, token: str, guid: str) -> str:
        self._record("share_note", token, guid)
        if guid not in self.notes:
            raise EDAMNotFoundException("Note.guid", guid)
        return f"key-{guid}"


class FakeUserStore:
    def __init__(self) -> None:
        self.user = User(id=1, username="alice", shard_id="s1")
        self.note_store_url = PERSONAL_URL
        self.business_auth = AuthenticationResult(
            authentication_token="S=s9:U=1:biz", note_store_url=BUSINESS_URL
        )
        self.failures: dict[str, Exception] = {}
        self.calls: list[str] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failures:
            raise self.failures[name]

    def get_user(self, token: str) -> User:
        self._record("get_user")
        return self.user

    def authenticate_to_business(self, token: str) -> AuthenticationResult:
        self._record("authenticate_to_business")
        return self.business_auth

    def get_note_store_url(self, token: str) -> str:
        self._record("get_note_store_url")
        return self.note_store_url


class FakeGateway:
    def __init__(self) -> None:
        self.user_store = FakeUserStore()
        self.stores: dict[str, FakeNoteStore] = {}
        self.opened: list[str] = []

    def get_user_store(self) -> FakeUserStore:
        return self.user_store

    def get_note_store(self, note_store_url: str) -> FakeNoteStore:
        self.opened.append(note_store_url)
        if note_store_url not in self.stores:
            self.stores[note_store_url] = FakeNoteStore(note_store_url)
        return self.stores[note_store_url]

    def store(self, note_store_url: str) -> FakeNoteStore:
        """Test-side access that is not recorded as an opened connection."""
        if note_store_url not in self.stores:
            self.stores[note_store_url] = FakeNoteStore(note_store_url)
        return self.stores[note_store_url]

    def add_linked_notebook(
        self,
        link_guid: str,
        notebook_guid: str,
        *,
        share_key: str | None = None,
        url: str | None = None,
        name: str | None = None,
    ) -> FakeNoteStore:
        """Register a linked notebook reachable through its own store."""
        index = len(self.stores) + 2
        url = url or f"https://sandbox.evernote.com/shard/s{index}/notestore"
        share_key = share_key if share_key is not None else f"share-{link_guid}"
        linked = LinkedNotebookRecord(
            guid=link_guid,
            share_name=name or link_guid,
            share_key=share_key,
            note_store_url=url,
        )
        self.store(PERSONAL_URL).linked_notebooks.append(linked)
        store = self.store(url)
        token = f"S=s{index}:shared-{link_guid}"
        store.share_auth[share_key] = AuthenticationResult(
            authentication_token=token, note_store_url=url
        )
        store.shared_by_auth[token] = SharedNotebookRecord(
            notebook_guid=notebook_guid, share_key=share_key
        )
        store.notebooks.append(NotebookRecord(guid=notebook_guid, name=name or notebook_guid))
        return store


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def personal_store(gateway: FakeGateway) -> FakeNoteStore:
    return gateway.store(PERSONAL_URL)


@pytest.fixture
def make_client(gateway: FakeGateway) -> Callable[..., EvernoteClient]:
    def factory(token: str = BASE_TOKEN, **kwargs: Any) -> EvernoteClient:
        return EvernoteClient(token, True, gateway=gateway, **kwargs)

    return factory
