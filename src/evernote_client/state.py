"""Lazily populated per-session state.

Each field is computed at most once per :class:`SessionStateManager` and kept
until :meth:`SessionStateManager.reset`. First access is not atomic, so one
manager must not be shared between threads.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from .errors import PermissionDeniedError
from .remote import AuthenticationResult, NoteStore, StoreGateway, User
from .transform import remote_call


@dataclass
class SessionState:
    """Values cached for the lifetime of one client."""

    personal_store_url: str | None = None
    personal_store: NoteStore | None = None
    user: User | None = None
    business_auth: AuthenticationResult | None = None
    business_token: str | None = None
    business_store: NoteStore | None = None


class SessionStateManager:
    """Owns a :class:`SessionState` and fills it on demand."""

    def __init__(self, gateway: StoreGateway, token: str) -> None:
        self._gateway = gateway
        self._token = token
        self._state = SessionState()

    @property
    def token(self) -> str:
        return self._token

    @property
    def gateway(self) -> StoreGateway:
        return self._gateway

    @property
    def state(self) -> SessionState:
        return self._state

    def reset(self, token: str | None = None) -> None:
        """Drop every cached value, optionally switching to a new token."""
        if token is not None:
            self._token = token
        self._state = SessionState()
        logger.debug("Session state reset")

    def note_store(self, note_store_url: str) -> NoteStore:
        return self._gateway.get_note_store(note_store_url)

    def ensure_user(self) -> User:
        if self._state.user is None:
            with remote_call("getUser"):
                self._state.user = self._gateway.get_user_store().get_user(self._token)
        return self._state.user

    def ensure_personal_store_url(self) -> str:
        if self._state.personal_store_url is None:
            with remote_call("getNoteStoreUrl"):
                self._state.personal_store_url = (
                    self._gateway.get_user_store().get_note_store_url(self._token)
                )
        return self._state.personal_store_url

    def ensure_personal_store(self) -> NoteStore:
        if self._state.personal_store is None:
            self._state.personal_store = self.note_store(self.ensure_personal_store_url())
        return self._state.personal_store

    def is_business_user(self) -> bool:
        return self.ensure_user().business_id is not None

    def ensure_business_auth(self) -> AuthenticationResult:
        if self._state.business_auth is None:
            with remote_call("authenticateToBusiness"):
                self._state.business_auth = (
                    self._gateway.get_user_store().authenticate_to_business(self._token)
                )
            logger.debug("Authenticated to business")
        return self._state.business_auth

    def ensure_business_token(self) -> str:
        if self._state.business_token is None:
            self._state.business_token = self.ensure_business_auth().authentication_token
        return self._state.business_token

    def ensure_business_store(self) -> NoteStore:
        if not self.is_business_user():
            raise PermissionDeniedError("Business")
        if self._state.business_store is None:
            note_store_url = self.ensure_business_auth().note_store_url
            if not note_store_url:
                raise PermissionDeniedError(
                    "Business", "Business authentication returned no note store URL"
                )
            self._state.business_store = self.note_store(note_store_url)
        return self._state.business_store
