"""Structural predicates over service auth tokens."""

from __future__ import annotations

import re

APP_NOTEBOOK_MARKER = ":B="

_SHARD_PATTERN = re.compile(r":?S=(s[0-9]+):?")


def is_app_notebook_token(token: str | None) -> bool:
    """Return True when the token is restricted to a single app notebook."""
    return token is not None and APP_NOTEBOOK_MARKER in token


def shard_id_from_token(token: str | None) -> str | None:
    if not token:
        return None
    match = _SHARD_PATTERN.search(token)
    return match.group(1) if match else None


def build_share_url(service_host: str, shard_id: str, guid: str, share_key: str) -> str:
    """Compose the public URL of a shared note."""
    return f"{service_host.rstrip('/')}/shard/{shard_id}/sh/{guid}/{share_key}"
