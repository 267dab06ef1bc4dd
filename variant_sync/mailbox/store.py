"""
In-memory capture mailbox.

The capture agent posts the variants it scraped; the preference engine polls
for them. Entries are keyed by session token, and every save is mirrored under
LATEST_KEY so a poller without a token still finds the newest capture.

Expiry is checked on every save and read:
  - anything older than `ttl` seconds is evicted, whether it was read or not;
  - once read, an entry is re-served until `reread_window` seconds after it was
    stored, so a poller that lost a response can fetch it again.
"""
from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

logger = logging.getLogger(__name__)

LATEST_KEY = "latest"

# Obvious placeholder images. Real product images must never match these.
_PLACEHOLDER_IMAGE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\+\+"),
    re.compile(r"transparent-pixel", re.IGNORECASE),
    re.compile(r"blank\.gif", re.IGNORECASE),
    re.compile(r"placeholder\.", re.IGNORECASE),
    re.compile(r"spacer\.", re.IGNORECASE),
    re.compile(r"1x1\.", re.IGNORECASE),
)

# Amazon size tokens such as "_SS40_" or "_US38_"; below this many pixels it is a swatch.
_SIZE_TOKEN_RE = re.compile(r"_(?:ss|sx|sy|us)(\d+)", re.IGNORECASE)
_MIN_IMAGE_SIZE = 50


def is_placeholder_image(image_url: str | None) -> bool:
    """True for missing URLs, non-http URLs, placeholders and colour swatches."""
    if not image_url or not image_url.startswith("http"):
        return True
    if any(pattern.search(image_url) for pattern in _PLACEHOLDER_IMAGE_PATTERNS):
        return True
    match = _SIZE_TOKEN_RE.search(image_url)
    if match and int(match.group(1)) < _MIN_IMAGE_SIZE:
        return True
    return False


@dataclass
class StoredCapture:
    variants: dict[str, Any]
    specifications: dict[str, Any] = field(default_factory=dict)
    url: str = ""
    image: str | None = None
    title: str | None = None
    price: float | None = None
    timestamp: float = 0.0
    retrieved: bool = False

    def to_response(self) -> dict[str, Any]:
        return {
            "variants": self.variants,
            "specifications": self.specifications,
            "url": self.url,
            "image": self.image,
            "title": self.title,
            "price": self.price,
            # Milliseconds, as the capture agent reports them.
            "timestamp": int(self.timestamp * 1000),
        }


class MailboxStore:
    def __init__(
        self,
        ttl: float = 300.0,
        reread_window: float = 60.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl = ttl
        self.reread_window = reread_window
        self._clock = clock
        self._entries: dict[str, StoredCapture] = {}

    def save(
        self,
        key: str | None,
        *,
        variants: dict[str, Any],
        specifications: dict[str, Any] | None = None,
        url: str | None = None,
        image: str | None = None,
        title: str | None = None,
        price: float | None = None,
    ) -> str:
        """Store a capture, overwriting any previous one. Returns the key used."""
        store_key = key or LATEST_KEY
        valid_image = None if is_placeholder_image(image) else image
        if image and valid_image is None:
            logger.info("Dropped placeholder image %s", image[:80])

        entry = StoredCapture(
            variants=variants,
            specifications=specifications or {},
            url=url or "",
            image=valid_image,
            title=title or None,
            price=price or None,
            timestamp=self._clock(),
        )
        self._sweep()
        self._entries[store_key] = entry
        self._entries[LATEST_KEY] = replace(entry)
        logger.info("Stored capture under %s with %d variant(s)", store_key, len(variants))
        return store_key

    def fetch(self, key: str | None) -> StoredCapture | None:
        """Return the live capture for key (falling back to the latest one), or None."""
        self._sweep()
        store_key = key or LATEST_KEY
        entry = self._entries.get(store_key)
        if entry is None and store_key != LATEST_KEY:
            entry = self._entries.get(LATEST_KEY)
        if entry is None:
            return None

        age = self._clock() - entry.timestamp
        if entry.retrieved and age > self.reread_window:
            return None

        entry.retrieved = True
        latest = self._entries.get(LATEST_KEY)
        if latest is not None:
            latest.retrieved = True
        return entry

    def _sweep(self) -> None:
        """Drop every entry older than ttl, read or not."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now - entry.timestamp > self.ttl]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Evicted %d expired capture(s)", len(expired))

    def __len__(self) -> int:
        return len(self._entries)
