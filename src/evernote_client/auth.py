"""Per-notebook credentials for notebooks owned by other accounts."""

from __future__ import annotations

from loguru import logger

from .errors import PermissionDeniedError
from .models import Notebook
from .remote import AuthenticationResult, LinkedNotebookRecord, NoteStore
from .state import SessionStateManager
from .transform import notebook_from_records, remote_call


class CredentialResolver:
    """Exchange a linked notebook's share key for a token on its own store."""

    def __init__(self, session: SessionStateManager) -> None:
        self._session = session

    def linked_store(self, linked: LinkedNotebookRecord) -> NoteStore:
        if not linked.note_store_url:
            raise PermissionDeniedError("noteStoreUrl")
        return self._session.note_store(linked.note_store_url)

    def resolve_shared_access(self, linked: LinkedNotebookRecord) -> AuthenticationResult:
        """Authenticate the session token to the notebook behind ``linked``.

        Raises:
            PermissionDeniedError: The link carries no share key, so there is
                nothing to authenticate with. No remote call is made.
        """
        if linked.share_key is None:
            raise PermissionDeniedError("shareKey")

        store = self.linked_store(linked)
        logger.debug(f"Authenticating to shared notebook via link {linked.guid}")
        with remote_call("authenticateToSharedNotebook"):
            return store.authenticate_to_shared_notebook(linked.share_key, self._session.token)

    def notebook_from_linked(self, linked: LinkedNotebookRecord) -> Notebook:
        """Resolve ``linked`` into a notebook carrying its own token."""
        auth_token = self.resolve_shared_access(linked).authentication_token
        store = self.linked_store(linked)
        with remote_call("getSharedNotebookByAuth"):
            shared = store.get_shared_notebook_by_auth(auth_token)

        return notebook_from_records(
            linked=linked,
            shared=shared,
            auth_token=auth_token,
            note_store_url=linked.note_store_url,
        )
