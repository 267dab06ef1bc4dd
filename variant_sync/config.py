"""
Runtime settings for the mailbox and the poll loop.

Every value can be overridden with a VARIANT_SYNC_* environment variable;
unset or unparseable values fall back to the defaults below.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MAILBOX_URL = "http://localhost:3000/api/extension/save-variants"


def _read_env_float(name: str, default: float) -> float:
    """Read env var as float; return default if unset or invalid."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _read_env_str(name: str, default: str | None) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True)
class SyncConfig:
    """Mailbox location and timing. Overridable via VARIANT_SYNC_* env vars."""

    mailbox_url: str = DEFAULT_MAILBOX_URL
    session_token: str | None = None
    poll_interval: float = 2.0
    request_timeout: float = 10.0
    mailbox_ttl: float = 300.0
    reread_window: float = 60.0

    @classmethod
    def from_env(cls) -> "SyncConfig":
        """Build config from VARIANT_SYNC_* env vars, falling back to defaults."""
        return cls(
            mailbox_url=_read_env_str("VARIANT_SYNC_MAILBOX_URL", DEFAULT_MAILBOX_URL)
            or DEFAULT_MAILBOX_URL,
            session_token=_read_env_str("VARIANT_SYNC_SESSION_TOKEN", None),
            poll_interval=_read_env_float("VARIANT_SYNC_POLL_INTERVAL", 2.0),
            request_timeout=_read_env_float("VARIANT_SYNC_REQUEST_TIMEOUT", 10.0),
            mailbox_ttl=_read_env_float("VARIANT_SYNC_MAILBOX_TTL", 300.0),
            reread_window=_read_env_float("VARIANT_SYNC_REREAD_WINDOW", 60.0),
        )
