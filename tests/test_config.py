"""Tests for loading client settings from a secrets file."""

from __future__ import annotations

from pathlib import Path

import pytest

from evernote_client.config import PRODUCTION_HOST, SANDBOX_HOST, ClientSettings


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EVERNOTE_CONFIG_PATH", raising=False)


def _write(tmp_path: Path, body: str) -> Path:
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir(parents=True, exist_ok=True)
    secrets_file = conf_dir / "secrets.yml"
    secrets_file.write_text(body.strip())
    return secrets_file


def test_settings_from_file_missing_file(tmp_path: Path) -> None:
    """Given no secrets file, when `ClientSettings.from_file()` runs,
    then a `FileNotFoundError` is raised."""
    with pytest.raises(FileNotFoundError):
        ClientSettings.from_file(tmp_path / "conf" / "secrets.yml")


def test_settings_from_file_missing_token(tmp_path: Path) -> None:
    secrets_file = _write(tmp_path, "EVERNOTE_SANDBOX: true\n")

    with pytest.raises(ValueError, match="EVERNOTE_TOKEN"):
        ClientSettings.from_file(secrets_file)


def test_settings_from_file_success(tmp_path: Path) -> None:
    """Given a populated secrets file with lower-case keys, when loaded,
    then keys are normalized and the production host is selected."""
    secrets_file = _write(
        tmp_path,
        """
evernote_token: S=s1:U=1:H=abc
evernote_sandbox: "false"
""",
    )

    settings = ClientSettings.from_file(secrets_file)

    assert settings.token == "S=s1:U=1:H=abc"
    assert settings.sandbox is False
    assert settings.resolved_service_host == PRODUCTION_HOST


def test_settings_env_path_wins(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    secrets_file = _write(
        tmp_path,
        """
EVERNOTE_TOKEN: from-env
EVERNOTE_SERVICE_HOST: https://notes.example.com
""",
    )
    monkeypatch.setenv("EVERNOTE_CONFIG_PATH", str(secrets_file))

    settings = ClientSettings.from_file(tmp_path / "elsewhere.yml")

    assert settings.token == "from-env"
    assert settings.sandbox is True
    assert settings.resolved_service_host == "https://notes.example.com"


def test_default_host_follows_sandbox_flag() -> None:
    assert ClientSettings(token="t").resolved_service_host == SANDBOX_HOST
