"""
Capture mailbox API.

The browser capture agent POSTs the variants it scraped from a retailer page;
the add-to-wishlist dialog polls GET until something arrives.
"""

import logging
from functools import lru_cache
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Query

from variant_sync.config import SyncConfig
from variant_sync.mailbox.store import MailboxStore

logger = logging.getLogger(__name__)

MAILBOX_PATH = "/api/extension/save-variants"

# Field names different agent versions use for the product image, in preference order.
_IMAGE_FIELDS = (
    "image",
    "imageUrl",
    "productImage",
    "img",
    "mainImage",
    "productImageUrl",
    "mainImageUrl",
    "selectedImage",
    "clippedImage",
    "clipImage",
)

app = FastAPI(title="Variant Capture Mailbox")


@lru_cache
def get_store() -> MailboxStore:
    config = SyncConfig.from_env()
    return MailboxStore(ttl=config.mailbox_ttl, reread_window=config.reread_window)


def _first_image(payload: dict[str, Any]) -> str | None:
    for name in _IMAGE_FIELDS:
        value = payload.get(name)
        if isinstance(value, str) and value:
            return value
    return None


def _as_price(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


@app.post(MAILBOX_PATH)
def save_variants(
    payload: dict[str, Any] = Body(...),
    store: MailboxStore = Depends(get_store),
) -> dict[str, Any]:
    variants = payload.get("variants")
    if not isinstance(variants, dict):
        logger.warning("Rejected mailbox post: variants is %s", type(variants).__name__)
        raise HTTPException(status_code=400, detail="Invalid variants data")

    specifications = payload.get("specifications")
    key = store.save(
        payload.get("sessionToken") or None,
        variants=variants,
        specifications=specifications if isinstance(specifications, dict) else None,
        url=payload.get("url") if isinstance(payload.get("url"), str) else None,
        image=_first_image(payload),
        title=payload.get("title") if isinstance(payload.get("title"), str) else None,
        price=_as_price(payload.get("price")),
    )
    return {"success": True, "key": key}


@app.get(MAILBOX_PATH)
def get_variants(
    session_token: str | None = Query(default=None, alias="sessionToken"),
    store: MailboxStore = Depends(get_store),
) -> dict[str, Any]:
    entry = store.fetch(session_token)
    if entry is None:
        return {"variants": None}
    return entry.to_response()
