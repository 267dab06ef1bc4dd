import os
import unittest
from unittest.mock import patch

from variant_sync.config import DEFAULT_MAILBOX_URL, SyncConfig


class TestSyncConfigFromEnv(unittest.TestCase):
    def test_defaults_when_unset(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = SyncConfig.from_env()

        self.assertEqual(config.mailbox_url, DEFAULT_MAILBOX_URL)
        self.assertIsNone(config.session_token)
        self.assertEqual(config.poll_interval, 2.0)
        self.assertEqual(config.mailbox_ttl, 300.0)
        self.assertEqual(config.reread_window, 60.0)

    def test_env_overrides(self) -> None:
        env = {
            "VARIANT_SYNC_MAILBOX_URL": "https://gifts.example.com/api/extension/save-variants",
            "VARIANT_SYNC_SESSION_TOKEN": "abc",
            "VARIANT_SYNC_POLL_INTERVAL": "0.5",
            "VARIANT_SYNC_REQUEST_TIMEOUT": "3",
        }
        with patch.dict(os.environ, env, clear=True):
            config = SyncConfig.from_env()

        self.assertEqual(config.mailbox_url, env["VARIANT_SYNC_MAILBOX_URL"])
        self.assertEqual(config.session_token, "abc")
        self.assertEqual(config.poll_interval, 0.5)
        self.assertEqual(config.request_timeout, 3.0)

    def test_invalid_numbers_fall_back(self) -> None:
        with patch.dict(os.environ, {"VARIANT_SYNC_POLL_INTERVAL": "soon"}, clear=True):
            config = SyncConfig.from_env()
        self.assertEqual(config.poll_interval, 2.0)

    def test_blank_token_is_none(self) -> None:
        with patch.dict(os.environ, {"VARIANT_SYNC_SESSION_TOKEN": "  "}, clear=True):
            config = SyncConfig.from_env()
        self.assertIsNone(config.session_token)
