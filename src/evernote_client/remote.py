"""Records and store interfaces exchanged with the remote note service.

The transport itself (Thrift, HTTP, a test double) lives outside this package.
Anything that satisfies :class:`StoreGateway` can back an ``EvernoteClient``.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field


class EDAMErrorCode(IntEnum):
    """Numeric error codes reported by the service."""

    UNKNOWN = 1
    BAD_DATA_FORMAT = 2
    PERMISSION_DENIED = 3
    INTERNAL_ERROR = 4
    DATA_REQUIRED = 5
    LIMIT_REACHED = 6
    QUOTA_REACHED = 7
    INVALID_AUTH = 8
    AUTH_EXPIRED = 9
    DATA_CONFLICT = 10
    ENML_VALIDATION = 11
    SHARD_UNAVAILABLE = 12
    LEN_TOO_SHORT = 13
    LEN_TOO_LONG = 14
    TOO_FEW = 15
    TOO_MANY = 16
    UNSUPPORTED_OPERATION = 17
    TAKEN_DOWN = 18
    RATE_LIMIT_REACHED = 19


class RemoteFault(Exception):
    """Base class for failures raised by a store gateway."""


class EDAMNotFoundException(RemoteFault):
    def __init__(self, identifier: str | None = None, key: str | None = None) -> None:
        super().__init__(f"{identifier or 'object'} not found: {key or ''}".rstrip(": "))
        self.identifier = identifier
        self.key = key


class EDAMUserException(RemoteFault):
    def __init__(self, error_code: int, parameter: str | None = None) -> None:
        super().__init__(f"user error {error_code}: {parameter or ''}".rstrip(": "))
        self.error_code = error_code
        self.parameter = parameter


class EDAMSystemException(RemoteFault):
    def __init__(
        self,
        error_code: int,
        message: str | None = None,
        rate_limit_duration: int | None = None,
    ) -> None:
        super().__init__(message or f"system error {error_code}")
        self.error_code = error_code
        self.message = message
        self.rate_limit_duration = rate_limit_duration


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class User(_Record):
    """Account record; ``business_id`` is set for business-enabled accounts."""

    id: int | None = None
    username: str | None = None
    shard_id: str | None = None
    business_id: int | None = None


class AuthenticationResult(_Record):
    authentication_token: str
    note_store_url: str | None = None
    expiration: int | None = None


class BusinessNotebookMarker(_Record):
    """Present on a notebook that is published to the whole business."""

    notebook_description: str | None = None
    privilege: int | None = None
    recommended: bool = False


class NotebookRecord(_Record):
    guid: str | None = None
    name: str | None = None
    default_notebook: bool = False
    stack: str | None = None
    business_notebook: BusinessNotebookMarker | None = None


class SharedNotebookRecord(_Record):
    id: int | None = None
    notebook_guid: str | None = None
    share_key: str | None = None
    username: str | None = None
    email: str | None = None


class LinkedNotebookRecord(_Record):
    """Pointer to a notebook that lives in another account's store.

    ``guid`` identifies this link record, not the target notebook.
    """

    guid: str | None = None
    share_name: str | None = None
    username: str | None = None
    shard_id: str | None = None
    share_key: str | None = None
    uri: str | None = None
    note_store_url: str | None = None
    business_id: int | None = None


class NoteAttributes(_Record):
    model_config = ConfigDict(extra="allow")

    author: str | None = None
    source: str | None = None
    source_url: str | None = None
    subject_date: int | None = None
    latitude: float | None = None
    longitude: float | None = None


class ResourceRecord(_Record):
    guid: str | None = None
    note_guid: str | None = None
    mime: str | None = None
    filename: str | None = None
    body: bytes | None = None
    body_hash: bytes | None = None


class NoteRecord(_Record):
    guid: str | None = None
    title: str | None = None
    content: str | None = None
    notebook_guid: str | None = None
    attributes: NoteAttributes | None = None
    resources: list[ResourceRecord] = Field(default_factory=list)
    created: int | None = None
    updated: int | None = None


class UserStore(Protocol):
    def get_user(self, token: str) -> User: ...

    def authenticate_to_business(self, token: str) -> AuthenticationResult: ...

    def get_note_store_url(self, token: str) -> str: ...


class NoteStore(Protocol):
    def list_notebooks(self, token: str) -> list[NotebookRecord]: ...

    def list_shared_notebooks(self, token: str) -> list[SharedNotebookRecord]: ...

    def list_linked_notebooks(self, token: str) -> list[LinkedNotebookRecord]: ...

    def get_notebook(self, token: str, guid: str) -> NotebookRecord: ...

    def get_default_notebook(self, token: str) -> NotebookRecord: ...

    def authenticate_to_shared_notebook(
        self, share_key: str, token: str
    ) -> AuthenticationResult: ...

    def get_shared_notebook_by_auth(self, token: str) -> SharedNotebookRecord: ...

    def get_note(
        self,
        token: str,
        guid: str,
        with_content: bool,
        with_resources_data: bool,
        with_resources_recognition: bool,
        with_resources_alternate_data: bool,
    ) -> NoteRecord: ...

    def create_note(self, token: str, note: NoteRecord) -> NoteRecord: ...

    def update_note(self, token: str, note: NoteRecord) -> NoteRecord: ...

    def delete_note(self, token: str, guid: str) -> Any: ...

    def share_note(self, token: str, guid: str) -> str: ...


class StoreGateway(Protocol):
    """Hands out store handles; one note store per backend URL."""

    def get_user_store(self) -> UserStore: ...

    def get_note_store(self, note_store_url: str) -> NoteStore: ...
