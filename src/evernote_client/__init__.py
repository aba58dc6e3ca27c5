"""Scoped access to personal, linked and business notebooks."""

from .client import EvernoteClient
from .config import ClientSettings
from .errors import ErrorKind, EvernoteError
from .models import Note, Notebook, Scope

__all__ = [
    "ClientSettings",
    "ErrorKind",
    "EvernoteClient",
    "EvernoteError",
    "Note",
    "Notebook",
    "Scope",
]
