"""User-facing entry point over personal, linked and business notebooks."""

from __future__ import annotations

from loguru import logger

from .aggregator import NotebookAggregator
from .auth import CredentialResolver
from .config import ClientSettings, service_host_for
from .errors import EvernoteError, InvalidInputError
from .models import Note, Notebook, Scope
from .remote import (
    AuthenticationResult,
    LinkedNotebookRecord,
    NotebookRecord,
    NoteStore,
    SharedNotebookRecord,
    StoreGateway,
    User,
)
from .resolver import ScopeFallbackResolver
from .state import SessionStateManager
from .tokens import build_share_url, is_app_notebook_token, shard_id_from_token
from .transform import note_from_record, note_record_from_note, notebook_from_records, remote_call


class EvernoteClient:
    """One session against the note service for a single auth token.

    Store handles, the user record and business credentials are fetched on
    first use and cached for the life of the client. Assigning a new token
    drops the cache. Not safe for concurrent use.
    """

    def __init__(
        self,
        token: str,
        sandbox: bool = True,
        *,
        gateway: StoreGateway,
        service_host: str | None = None,
    ) -> None:
        self._sandbox = sandbox
        self._service_host_override = service_host
        self._gateway = gateway
        self._session = SessionStateManager(gateway, token)
        self._credentials = CredentialResolver(self._session)
        self._aggregator = NotebookAggregator(self._session, self._credentials)
        self._resolver = ScopeFallbackResolver(self._session, self._credentials, self._aggregator)

    @classmethod
    def from_settings(cls, settings: ClientSettings, *, gateway: StoreGateway) -> EvernoteClient:
        return cls(
            settings.token,
            settings.sandbox,
            gateway=gateway,
            service_host=settings.resolved_service_host,
        )

    @property
    def token(self) -> str:
        return self._session.token

    @token.setter
    def token(self, value: str) -> None:
        self._session.reset(value)

    @property
    def sandbox(self) -> bool:
        return self._sandbox

    @sandbox.setter
    def sandbox(self, value: bool) -> None:
        self._sandbox = value

    @property
    def gateway(self) -> StoreGateway:
        return self._gateway

    @property
    def service_host(self) -> str:
        return self._service_host_override or service_host_for(self._sandbox)

    def reset(self) -> None:
        """Forget cached stores and credentials."""
        self._session.reset()

    # Session accessors

    def get_user(self) -> User:
        return self._session.ensure_user()

    def is_business_user(self) -> bool:
        return self._session.is_business_user()

    def get_business_auth(self) -> AuthenticationResult:
        return self._session.ensure_business_auth()

    def get_business_token(self) -> str:
        return self._session.ensure_business_token()

    def get_business_note_store(self) -> NoteStore:
        return self._session.ensure_business_store()

    def is_app_notebook_token(self, token: str | None = None) -> bool:
        return is_app_notebook_token(self.token if token is None else token)

    # Notebooks

    def list_notebooks(self) -> list[Notebook]:
        return self._aggregator.list_all_notebooks()

    def list_personal_notebooks(self) -> list[NotebookRecord]:
        return self._aggregator.list_personal_notebooks()

    def list_shared_notebooks(self) -> list[SharedNotebookRecord]:
        return self._aggregator.list_shared_notebooks()

    def list_linked_notebooks(self) -> list[LinkedNotebookRecord]:
        return self._aggregator.list_linked_notebooks()

    def get_business_shared_notebooks(self) -> list[SharedNotebookRecord]:
        return self._aggregator.list_business_shared_notebooks()

    def get_business_linked_notebooks(self) -> list[NotebookRecord]:
        return self._aggregator.list_business_notebooks()

    def get_notebook(self, guid: str, scope: Scope | None = None) -> Notebook | None:
        return self._resolver.find_notebook(guid, scope)

    def get_default_notebook(self) -> Notebook:
        store = self._session.ensure_personal_store()
        with remote_call("getDefaultNotebook"):
            record = store.get_default_notebook(self.token)
        return notebook_from_records(
            record, note_store_url=self._session.ensure_personal_store_url()
        )

    # Notes

    def get_note(self, guid: str, scope: Scope | None = None) -> Note | None:
        return self._resolver.find_note(guid, scope)

    def replace_note(self, note_to_replace: Note, note: Note) -> Note:
        """Overwrite ``note_to_replace`` remotely with the fields of ``note``."""
        if note_to_replace.guid is None:
            raise InvalidInputError("Cannot replace a note that has no guid", resource="Note.guid")

        if note_to_replace.has_owning_store:
            store: NoteStore = note_to_replace.note_store
            token: str = note_to_replace.auth_token  # type: ignore[assignment]
        else:
            store = self._session.ensure_personal_store()
            token = self.token

        record = note_record_from_note(
            note, guid=note_to_replace.guid, notebook_guid=note_to_replace.notebook_guid
        )
        with remote_call("updateNote"):
            uploaded = store.update_note(token, record)
        # The service may not echo rich content verbatim.
        uploaded.content = note.content
        logger.debug(f"Updated note {uploaded.guid}")
        return note_from_record(uploaded, store, token, saved=True)

    def upload_note(self, note: Note, notebook: Notebook | None = None) -> Note:
        """Create ``note`` remotely, or update it if it was saved before.

        With an app-notebook token the note always lands in the app notebook
        and ``notebook`` is ignored. A target notebook unknown to the personal
        store is looked up among linked notebooks and the note is created
        there with that notebook's token.
        """
        if self.is_app_notebook_token():
            notebook = None

        if note.saved:
            uploaded = self.replace_note(note, note)
            self._mark_saved(note, uploaded)
            return uploaded

        target_guid = notebook.guid if notebook is not None else None
        record = note_record_from_note(note, notebook_guid=target_guid)
        store = self._session.ensure_personal_store()
        token = self.token
        try:
            with remote_call("createNote"):
                created = store.create_note(token, record)
        except EvernoteError as exc:
            if not exc.is_not_found or target_guid is None:
                raise
            target = self._resolver.find_notebook(target_guid, Scope.LINKED)
            if target is None or not target.is_linked_notebook:
                raise
            if target.note_store_url is None or target.auth_token is None:
                raise
            logger.debug(f"Creating note in linked notebook {target_guid}")
            store = self._session.note_store(target.note_store_url)
            token = target.auth_token
            with remote_call("createNote"):
                created = store.create_note(token, record)

        created.content = note.content
        uploaded = note_from_record(created, store, token, saved=True)
        self._mark_saved(note, uploaded)
        logger.info(f"Uploaded note {uploaded.guid}")
        return uploaded

    @staticmethod
    def _mark_saved(note: Note, uploaded: Note) -> None:
        note.guid = uploaded.guid
        note.notebook_guid = uploaded.notebook_guid
        note.note_store = uploaded.note_store
        note.auth_token = uploaded.auth_token
        note.saved = True

    def delete_note(self, note: Note) -> bool:
        return self._resolver.delete_note(note)

    def share_note(self, note: Note) -> str | None:
        """Share ``note`` publicly and return its URL, or None if it was not found."""
        shared = self._resolver.share_note(note)
        if shared is None:
            return None
        owner, share_key = shared

        shard_id = shard_id_from_token(owner.auth_token)
        if shard_id is None and owner.auth_token == self.token:
            shard_id = self.get_user().shard_id
        if shard_id is None:
            raise InvalidInputError("Cannot determine shard for shared note", resource="shardId")

        return build_share_url(self.service_host, shard_id, owner.guid or "", share_key)
