from .client import MailboxClient
from .store import LATEST_KEY, MailboxStore, StoredCapture, is_placeholder_image

__all__ = [
    "LATEST_KEY",
    "MailboxClient",
    "MailboxStore",
    "StoredCapture",
    "is_placeholder_image",
]
