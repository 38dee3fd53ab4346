"""Persistent JSON config helpers.

Stores the issued API credential and user settings under the platform config
directory. Reads are forgiving: malformed or missing files fall back to
defaults. Credential writes report failure so the user can be told.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from ..api.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS
from ..api.models import Credential
from ..session.state import DEFAULT_PAGE_SIZE

log = logging.getLogger(__name__)

APP_NAME = "lazymolt"
CONFIG_FILENAME = "config.json"
CREDENTIALS_FILENAME = "credentials.json"
CONFIG_DIR = Path(user_config_dir(APP_NAME, appauthor=False))
CONFIG_PATH = CONFIG_DIR / CONFIG_FILENAME
DEFAULT_CREDENTIALS_PATH = CONFIG_DIR / CREDENTIALS_FILENAME
LEGACY_CREDENTIALS_PATH = Path.home() / ".config" / "moltbook" / CREDENTIALS_FILENAME
CREDENTIALS_PATH = DEFAULT_CREDENTIALS_PATH

ENV_BASE_URL = "LAZYMOLT_BASE_URL"
ENV_API_KEY = "LAZYMOLT_API_KEY"
MAX_PAGE_SIZE = 100


class CredentialStoreError(Exception):
    """Raised when the credential file cannot be written."""


def _read_json_object(path: Path) -> dict[str, object]:
    """Return the JSON object stored at ``path``, or ``{}`` for anything else."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _credentials_path() -> Path:
    """Return preferred credential path, falling back to legacy location when needed."""
    if CREDENTIALS_PATH.exists():
        return CREDENTIALS_PATH
    if CREDENTIALS_PATH == DEFAULT_CREDENTIALS_PATH and LEGACY_CREDENTIALS_PATH.exists():
        return LEGACY_CREDENTIALS_PATH
    return CREDENTIALS_PATH


class CredentialStore:
    """Load and save the single credential record.

    ``path`` defaults to the module-level ``CREDENTIALS_PATH`` resolved at
    call time, with the legacy location consulted when it is missing.
    """

    def __init__(self, path: Path | None = None, *, environ: dict[str, str] | None = None) -> None:
        self._path = path
        self._environ = os.environ if environ is None else environ

    @property
    def path(self) -> Path:
        return self._path if self._path is not None else CREDENTIALS_PATH

    def load(self) -> Credential | None:
        """Return the stored credential, or ``None`` when there is none.

        A key in ``LAZYMOLT_API_KEY`` wins over the file; the stored agent
        name is still used when present.
        """
        source = self._path if self._path is not None else _credentials_path()
        data = _read_json_object(source)
        agent_name = data.get("agent_name")
        agent_name = agent_name.strip() if isinstance(agent_name, str) else ""

        env_key = self._environ.get(ENV_API_KEY, "").strip()
        if env_key:
            log.info("using API key from %s", ENV_API_KEY)
            return Credential(api_key=env_key, agent_name=agent_name)

        api_key = data.get("api_key")
        if not isinstance(api_key, str) or not api_key.strip():
            log.info("no stored credential at %s", source)
            return None
        log.info("loaded credential for %r from %s", agent_name, source)
        return Credential(api_key=api_key.strip(), agent_name=agent_name)

    def save(self, credential: Credential) -> None:
        """Persist ``credential`` readable by the owner only.

        Raises :class:`CredentialStoreError` on any filesystem failure.
        """
        target = self.path
        payload = json.dumps(
            {"api_key": credential.api_key, "agent_name": credential.agent_name},
            indent=2,
        )
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload + "\n")
            os.chmod(target, 0o600)
        except OSError as exc:
            log.warning("could not save credential to %s: %s", target, exc)
            raise CredentialStoreError(f"{target}: {exc.strerror or exc}") from exc
        log.info("saved credential for %r to %s", credential.agent_name, target)


@dataclass(frozen=True)
class Settings:
    """User-tunable options from ``config.json`` and the environment."""

    base_url: str = DEFAULT_BASE_URL
    theme: str | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS


def load_config() -> dict[str, object]:
    """Load the persisted JSON settings object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    return _read_json_object(CONFIG_PATH)


def _coerce_page_size(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return DEFAULT_PAGE_SIZE
    if value <= 0:
        return DEFAULT_PAGE_SIZE
    return min(value, MAX_PAGE_SIZE)


def _coerce_timeout(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return DEFAULT_TIMEOUT_SECONDS
    return float(value)


def _coerce_text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Read ``config.json`` and apply environment overrides.

    Malformed values fall back to defaults; nothing here raises.
    """
    environ = os.environ if environ is None else environ
    data = load_config()
    base_url = _coerce_text(environ.get(ENV_BASE_URL)) or _coerce_text(data.get("base_url")) or DEFAULT_BASE_URL
    return Settings(
        base_url=base_url.rstrip("/"),
        theme=_coerce_text(data.get("theme")),
        page_size=_coerce_page_size(data.get("page_size")),
        request_timeout=_coerce_timeout(data.get("request_timeout")),
    )


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "CREDENTIALS_PATH",
    "CredentialStore",
    "CredentialStoreError",
    "ENV_API_KEY",
    "ENV_BASE_URL",
    "Settings",
    "load_config",
    "load_settings",
]
