"""Tests for credential persistence and settings loading.

Covers owner-only credential files, the legacy fallback location, the
environment key override, and sanitizing of malformed settings.
"""

from __future__ import annotations

import os
import stat
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazymolt.api.client import DEFAULT_BASE_URL
from lazymolt.api.models import Credential
from lazymolt.runtime import config


class CredentialStoreTests(unittest.TestCase):
    def test_save_then_load_round_trips_with_owner_only_mode(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "credentials.json"
            store = config.CredentialStore(path, environ={})

            store.save(Credential(api_key="moltbook_sk_1", agent_name="molty"))

            self.assertEqual(store.load(), Credential(api_key="moltbook_sk_1", agent_name="molty"))
            self.assertEqual(stat.S_IMODE(os.stat(path).st_mode), 0o600)

    def test_missing_malformed_or_empty_key_loads_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "credentials.json"
            store = config.CredentialStore(path, environ={})
            self.assertIsNone(store.load())

            path.write_text("{not json", encoding="utf-8")
            self.assertIsNone(store.load())

            path.write_text('["api_key"]', encoding="utf-8")
            self.assertIsNone(store.load())

            path.write_text('{"api_key": "  ", "agent_name": "molty"}', encoding="utf-8")
            self.assertIsNone(store.load())

    def test_environment_key_wins_and_keeps_stored_name(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "credentials.json"
            path.write_text('{"api_key": "stored", "agent_name": "molty"}', encoding="utf-8")
            store = config.CredentialStore(path, environ={config.ENV_API_KEY: " from-env "})

            self.assertEqual(store.load(), Credential(api_key="from-env", agent_name="molty"))

    def test_load_falls_back_to_legacy_path_when_default_missing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            default_path = Path(tmp) / "native" / "credentials.json"
            legacy_path = Path(tmp) / "moltbook" / "credentials.json"
            legacy_path.parent.mkdir()
            legacy_path.write_text('{"api_key": "legacy", "agent_name": "old"}', encoding="utf-8")
            with mock.patch("lazymolt.runtime.config.CREDENTIALS_PATH", default_path), mock.patch(
                "lazymolt.runtime.config.DEFAULT_CREDENTIALS_PATH", default_path
            ), mock.patch("lazymolt.runtime.config.LEGACY_CREDENTIALS_PATH", legacy_path):
                store = config.CredentialStore(environ={})
                loaded = store.load()
                self.assertEqual(store.path, default_path)

            self.assertEqual(loaded, Credential(api_key="legacy", agent_name="old"))

    def test_save_failure_raises_store_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("", encoding="utf-8")
            store = config.CredentialStore(blocker / "credentials.json", environ={})

            with self.assertRaises(config.CredentialStoreError):
                store.save(Credential(api_key="k"))


class SettingsTests(unittest.TestCase):
    def test_defaults_without_config_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("lazymolt.runtime.config.CONFIG_PATH", Path(tmp) / "config.json"):
                settings = config.load_settings(environ={})

        self.assertEqual(settings, config.Settings())
        self.assertEqual(settings.base_url, DEFAULT_BASE_URL)

    def test_config_values_are_read_and_sanitized(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(
                '{"base_url": "http://localhost:3000/api/v1/", "theme": "ocean",'
                ' "page_size": 500, "request_timeout": true}',
                encoding="utf-8",
            )
            with mock.patch("lazymolt.runtime.config.CONFIG_PATH", config_path):
                settings = config.load_settings(environ={})

        self.assertEqual(settings.base_url, "http://localhost:3000/api/v1")
        self.assertEqual(settings.theme, "ocean")
        self.assertEqual(settings.page_size, config.MAX_PAGE_SIZE)
        self.assertEqual(settings.request_timeout, 60.0)

    def test_invalid_page_size_falls_back_and_env_base_url_wins(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text('{"base_url": "http://config", "page_size": 0}', encoding="utf-8")
            with mock.patch("lazymolt.runtime.config.CONFIG_PATH", config_path):
                settings = config.load_settings(environ={config.ENV_BASE_URL: "http://env/"})

        self.assertEqual(settings.base_url, "http://env")
        self.assertEqual(settings.page_size, 20)


if __name__ == "__main__":
    unittest.main()
