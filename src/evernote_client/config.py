"""Client settings loaded from a YAML secrets file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from omegaconf import OmegaConf
from pydantic import BaseModel, Field, HttpUrl

SANDBOX_HOST = "https://sandbox.evernote.com"
PRODUCTION_HOST = "https://www.evernote.com"

CONFIG_PATH_ENV = "EVERNOTE_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "conf/secrets.yml"


def service_host_for(sandbox: bool) -> str:
    return SANDBOX_HOST if sandbox else PRODUCTION_HOST


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _candidate_paths(raw: Path) -> tuple[Path, ...]:
    if raw.is_absolute():
        return (raw,)
    return (Path.cwd() / raw, _repo_root() / raw)


def _resolve_settings_location(spec: Path | str, *, source: str) -> Path:
    raw = Path(spec).expanduser()
    candidates = _candidate_paths(raw)
    existing: list[Path] = []
    for candidate in candidates:
        if candidate.exists() and candidate.resolve() not in existing:
            existing.append(candidate.resolve())
    if len(existing) == 1:
        return existing[0]
    if not existing:
        checked = "\n".join(str(candidate) for candidate in candidates)
        raise FileNotFoundError(f"Settings file not found for {source}: {raw}\nChecked:\n{checked}")
    joined = ", ".join(str(path) for path in existing)
    raise RuntimeError(f"Multiple settings files found for {source}: {raw}. Candidates: {joined}")


def _load_normalized(location: Path) -> dict[str, Any]:
    config = OmegaConf.to_container(OmegaConf.load(location), resolve=True)
    if not isinstance(config, dict):
        raise ValueError("Settings file must contain a mapping of keys.")
    return {str(key).upper(): value for key, value in config.items()}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


class ClientSettings(BaseModel):
    """Token and endpoint selection for one client session."""

    token: str = Field(min_length=1, description="Developer or OAuth auth token")
    sandbox: bool = Field(default=True, description="Talk to the sandbox service")
    service_host: HttpUrl | None = Field(
        default=None,
        description="Override for the public web host used in share URLs",
    )

    @property
    def resolved_service_host(self) -> str:
        if self.service_host is not None:
            return str(self.service_host).rstrip("/")
        return service_host_for(self.sandbox)

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> ClientSettings:
        """Load settings from ``conf/secrets.yml`` unless told otherwise.

        ``$EVERNOTE_CONFIG_PATH`` wins over ``path``.
        """
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            location = _resolve_settings_location(env_path, source=CONFIG_PATH_ENV)
        elif path is not None:
            location = _resolve_settings_location(path, source="path")
        else:
            location = _resolve_settings_location(DEFAULT_CONFIG_PATH, source="default")

        normalized = _load_normalized(location)
        if not normalized.get("EVERNOTE_TOKEN"):
            raise ValueError("Missing Evernote settings: EVERNOTE_TOKEN")

        kwargs: dict[str, Any] = {"token": str(normalized["EVERNOTE_TOKEN"])}
        if "EVERNOTE_SANDBOX" in normalized:
            kwargs["sandbox"] = _as_bool(normalized["EVERNOTE_SANDBOX"])
        if normalized.get("EVERNOTE_SERVICE_HOST"):
            kwargs["service_host"] = str(normalized["EVERNOTE_SERVICE_HOST"])
        return cls(**kwargs)
