"""Client-side notebook and note models.

``Notebook`` is immutable: aggregation gathers every contributing record for
a guid first and builds the notebook once. ``Note`` is mutable because an
upload stamps it with the store and token it was saved through.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .remote import (
    LinkedNotebookRecord,
    NoteAttributes,
    NotebookRecord,
    ResourceRecord,
    SharedNotebookRecord,
)


class Scope(str, Enum):
    """Authorization domain searched by a lookup. ``None`` means both."""

    PERSONAL = "personal"
    LINKED = "linked"


class Notebook(BaseModel):
    """A notebook reachable by the current user, from any domain.

    Attributes:
        guid: Notebook guid; absent for an app-notebook placeholder.
        name: Display name.
        is_shared: True when any contributing source marks the notebook shared.
        auth_token: Token to use for this notebook when it is not personal.
        note_store_url: Backend endpoint serving this notebook.
        notebook: Raw personal or business notebook record.
        linked_notebook: Link record the notebook was reached through.
        shared_notebook: Sharing record resolved for the link.
        business_notebook: Raw notebook record from the business store.
    """

    model_config = ConfigDict(frozen=True)

    guid: str | None = None
    name: str | None = None
    is_shared: bool = False
    auth_token: str | None = Field(default=None, repr=False)
    note_store_url: str | None = None
    notebook: NotebookRecord | None = None
    linked_notebook: LinkedNotebookRecord | None = None
    shared_notebook: SharedNotebookRecord | None = None
    business_notebook: NotebookRecord | None = None

    @property
    def is_business_notebook(self) -> bool:
        return self.business_notebook is not None

    @property
    def is_linked_notebook(self) -> bool:
        return self.linked_notebook is not None

    @property
    def is_default_notebook(self) -> bool:
        return self.notebook is not None and self.notebook.default_notebook


class Note(BaseModel):
    """A note and, once fetched or saved, the store that owns it."""

    guid: str | None = None
    title: str | None = None
    content: str | None = None
    notebook_guid: str | None = None
    attributes: NoteAttributes | None = None
    resources: list[ResourceRecord] = Field(default_factory=list)
    saved: bool = False
    auth_token: str | None = Field(default=None, repr=False)
    note_store: Any = Field(default=None, exclude=True, repr=False)

    @property
    def has_owning_store(self) -> bool:
        return self.note_store is not None and self.auth_token is not None
