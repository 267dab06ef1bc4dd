"""
Exceptions raised by the preference engine.

Only NoPreferenceSelected ever reaches the user. CoordinatorClosed flags a
caller that arms after close(). MailboxUnreachable is raised by the mailbox
client and absorbed by the coordinator; discarded values and stale captures
are logged, never raised.
"""

from typing import Any


class VariantSyncError(Exception):
    """Base class. `code` is a stable identifier for API responses."""

    code = "VARIANT_SYNC_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message, "details": self.details}}


class NoPreferenceSelected(VariantSyncError):
    code = "NO_PREFERENCE_SELECTED"

    def __init__(self) -> None:
        super().__init__("Please select at least one preference option")


class MailboxUnreachable(VariantSyncError):
    code = "MAILBOX_UNREACHABLE"


class SlotTransitionError(VariantSyncError, ValueError):
    code = "INVALID_SLOT_TRANSITION"


class CoordinatorClosed(VariantSyncError, RuntimeError):
    code = "COORDINATOR_CLOSED"

    def __init__(self) -> None:
        super().__init__("The sync coordinator has been closed")
