"""Merge notebooks from every authorization domain into one catalog."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from loguru import logger

from .auth import CredentialResolver
from .errors import ErrorKind, EvernoteError
from .models import Notebook
from .remote import (
    LinkedNotebookRecord,
    NotebookRecord,
    SharedNotebookRecord,
)
from .state import SessionStateManager
from .transform import notebook_from_records, remote_call

# Failures of listLinkedNotebooks that mean "this account cannot link",
# together with any other user-level fault.
_NO_LINKING_KINDS = frozenset({ErrorKind.PERMISSION_DENIED, ErrorKind.INVALID_INPUT})


@dataclass
class _NotebookFacts:
    """Everything learned about one notebook before it is built."""

    notebook: NotebookRecord | None = None
    linked: LinkedNotebookRecord | None = None
    shared: SharedNotebookRecord | None = None
    business: NotebookRecord | None = None
    is_shared: bool = False
    auth_token: str | None = None
    note_store_url: str | None = None

    @classmethod
    def from_notebook(cls, notebook: Notebook) -> _NotebookFacts:
        return cls(
            notebook=notebook.notebook,
            linked=notebook.linked_notebook,
            shared=notebook.shared_notebook,
            business=notebook.business_notebook,
            is_shared=notebook.is_shared,
            auth_token=notebook.auth_token,
            note_store_url=notebook.note_store_url,
        )

    def absorb(self, other: _NotebookFacts) -> None:
        self.notebook = self.notebook or other.notebook
        self.linked = self.linked or other.linked
        self.shared = self.shared or other.shared
        self.business = self.business or other.business
        self.is_shared = self.is_shared or other.is_shared
        # The first contributor's credentials stay paired with its store.
        if self.auth_token is None and self.note_store_url is None:
            self.auth_token = other.auth_token
            self.note_store_url = other.note_store_url

    def build(self) -> Notebook:
        return notebook_from_records(
            self.notebook,
            self.linked,
            self.shared,
            self.business,
            is_shared=self.is_shared,
            auth_token=self.auth_token,
            note_store_url=self.note_store_url,
        )


@dataclass
class _Catalog:
    """Insertion-ordered facts, unique by resolved guid."""

    entries: list[_NotebookFacts] = field(default_factory=list)
    by_guid: dict[str, _NotebookFacts] = field(default_factory=dict)

    def add(self, guid: str | None, facts: _NotebookFacts) -> None:
        if guid is not None and guid in self.by_guid:
            logger.debug(f"Merging duplicate notebook {guid}")
            self.by_guid[guid].absorb(facts)
            return
        self.entries.append(facts)
        if guid is not None:
            self.by_guid[guid] = facts

    def add_notebook(self, notebook: Notebook) -> None:
        self.add(notebook.guid, _NotebookFacts.from_notebook(notebook))

    def mark_shared(self, guid: str) -> None:
        if guid in self.by_guid:
            self.by_guid[guid].is_shared = True

    def build(self) -> list[Notebook]:
        return [facts.build() for facts in self.entries]


class NotebookAggregator:
    """Produce the deduplicated notebook catalog for a session."""

    def __init__(self, session: SessionStateManager, credentials: CredentialResolver) -> None:
        self._session = session
        self._credentials = credentials

    def list_personal_notebooks(self) -> list[NotebookRecord]:
        store = self._session.ensure_personal_store()
        with remote_call("listNotebooks"):
            return list(store.list_notebooks(self._session.token))

    def list_shared_notebooks(self) -> list[SharedNotebookRecord]:
        store = self._session.ensure_personal_store()
        with remote_call("listSharedNotebooks"):
            return list(store.list_shared_notebooks(self._session.token))

    def list_linked_notebooks(self) -> list[LinkedNotebookRecord]:
        store = self._session.ensure_personal_store()
        with remote_call("listLinkedNotebooks"):
            return list(store.list_linked_notebooks(self._session.token))

    def list_business_shared_notebooks(self) -> list[SharedNotebookRecord]:
        store = self._session.ensure_business_store()
        with remote_call("listSharedNotebooks"):
            return list(store.list_shared_notebooks(self._session.ensure_business_token()))

    def list_business_notebooks(self) -> list[NotebookRecord]:
        store = self._session.ensure_business_store()
        with remote_call("listNotebooks"):
            return list(store.list_notebooks(self._session.ensure_business_token()))

    def list_all_notebooks(self) -> list[Notebook]:
        """Return personal notebooks followed by linked and business ones.

        Personal notebooks that appear in the user's sharing records are
        flagged shared. Linked notebooks are resolved through the business
        directory when the account has one and through their share key
        otherwise; links the user cannot use are left out.
        """
        catalog = _Catalog()
        personal_url = self._session.ensure_personal_store_url()
        for record in self.list_personal_notebooks():
            catalog.add(record.guid, _NotebookFacts(notebook=record, note_store_url=personal_url))

        for shared in self.list_shared_notebooks():
            if shared.notebook_guid is not None:
                catalog.mark_shared(shared.notebook_guid)

        try:
            linked_notebooks = self.list_linked_notebooks()
        except EvernoteError as exc:
            if exc.kind not in _NO_LINKING_KINDS and exc.context.get("fault") != "user":
                raise
            logger.debug(f"Linked notebooks unavailable for this account: {exc.message}")
            linked_notebooks = []

        if linked_notebooks:
            if self._session.is_business_user():
                self._merge_business(catalog, linked_notebooks)
            else:
                self._merge_linked(catalog, linked_notebooks)

        notebooks = catalog.build()
        logger.info(
            f"Listed {len(notebooks)} notebooks ({len(linked_notebooks)} linked descriptors)"
        )
        return notebooks

    def _merge_linked(
        self, catalog: _Catalog, linked_notebooks: list[LinkedNotebookRecord]
    ) -> None:
        for linked in linked_notebooks:
            try:
                notebook = self._credentials.notebook_from_linked(linked)
            except EvernoteError as exc:
                if not exc.is_recoverable_in_scope:
                    raise
                logger.debug(f"Skipping linked notebook {linked.guid}: {exc.kind.value}")
                continue
            catalog.add_notebook(notebook)

    def _merge_business(
        self, catalog: _Catalog, linked_notebooks: list[LinkedNotebookRecord]
    ) -> None:
        business_token = self._session.ensure_business_token()
        business_url = self._session.ensure_business_auth().note_store_url
        shared_records = self.list_business_shared_notebooks()
        business_records = self.list_business_notebooks()

        by_share_key = {r.share_key: r for r in shared_records if r.share_key is not None}
        by_guid = {r.guid: r for r in business_records if r.guid is not None}
        share_counts = Counter(
            r.notebook_guid for r in shared_records if r.notebook_guid is not None
        )

        for linked in linked_notebooks:
            shared = by_share_key.get(linked.share_key) if linked.share_key is not None else None
            business = by_guid.get(shared.notebook_guid) if shared is not None else None
            if shared is not None and business is not None:
                is_shared = (
                    share_counts[shared.notebook_guid] > 1
                    or business.business_notebook is not None
                )
                catalog.add(
                    business.guid,
                    _NotebookFacts(
                        linked=linked,
                        shared=shared,
                        business=business,
                        is_shared=is_shared,
                        auth_token=business_token,
                        note_store_url=business_url,
                    ),
                )
                continue

            if linked.share_key is None:
                logger.debug(f"Skipping linked notebook {linked.guid}: no share key")
                continue

            try:
                notebook = self._credentials.notebook_from_linked(linked)
            except EvernoteError as exc:
                logger.warning(f"Dropping linked notebook {linked.guid}: {exc}")
                continue
            catalog.add_notebook(notebook)
