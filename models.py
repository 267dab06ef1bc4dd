import json
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, ValidationInfo, field_validator


class SlotId(str, Enum):
    # Declaration order is the priority order used for the primary preference.
    IDEAL = "Ideal"
    ALTERNATIVE = "Alternative"
    OK_TO_BUY = "OkToBuy"


# Product-level label sent to the wishlist API for each slot.
PREFERENCE_LABELS: dict[SlotId, str] = {
    SlotId.IDEAL: "Ideal",
    SlotId.ALTERNATIVE: "Alternative",
    SlotId.OK_TO_BUY: "Nice to have",
}


def _new_field_id() -> str:
    return uuid4().hex


class CustomField(BaseModel):
    id: str = Field(default_factory=_new_field_id)
    key: str = ""
    value: str = ""


class CapturedMedia(BaseModel):
    image_url: str | None = None
    title: str | None = None

    def is_empty(self) -> bool:
        return not self.image_url and not self.title


class RawCapture(BaseModel):
    """
    One mailbox delivery, exactly as the capture agent posted it.

    Keys and values are untrusted scraped text; nothing here is shown to the
    user before it goes through the normalizer and the value validator.
    """

    variants: dict[str, str] | None = None
    specifications: dict[str, str] = Field(default_factory=dict)
    image: str | None = None
    title: str | None = None
    url: str | None = None
    price: float | None = None
    timestamp: float | None = None

    @field_validator("variants", "specifications", mode="before")
    @classmethod
    def _coerce_scalar_values(cls, v: object, info: ValidationInfo) -> object:
        """
        The agent sends whatever the page exposed: numbers, booleans, nulls.
        Keep scalars as strings and drop everything else.
        """
        if v is None and info.field_name == "specifications":
            return {}
        if not isinstance(v, dict):
            return v
        coerced: dict[str, str] = {}
        for key, value in v.items():
            if value is None or isinstance(value, (dict, list)):
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            coerced[str(key)] = str(value)
        return coerced

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price_string(cls, v: object) -> object:
        if isinstance(v, str):
            stripped = v.replace("$", "").replace(",", "").strip()
            try:
                return float(stripped)
            except ValueError:
                return None
        return v

    def is_empty(self) -> bool:
        return not self.variants and not self.image and not self.title

    @property
    def media(self) -> CapturedMedia:
        return CapturedMedia(
            image_url=(self.image or "").strip() or None,
            title=(self.title or "").strip() or None,
        )


class ProductRef(BaseModel):
    name: str
    url: str | None = None
    price: float = 0.0
    image_url: str | None = None
    store_name: str | None = None


class SlotPreference(BaseModel):
    image: str | None = None
    title: str | None = None
    attributes: dict[str, str] = Field(default_factory=dict)
    custom_fields: list[CustomField] = Field(default_factory=list)
    notes: str = ""


class CommitPayload(BaseModel):
    product: ProductRef | None = None
    primary_preference: str
    preferences: dict[SlotId, SlotPreference]

    def preference_options_json(self) -> str:
        """Per-slot structure as the opaque blob the wishlist API stores."""
        blob: dict[str, Any] = {}
        for slot_id in SlotId:
            preference = self.preferences.get(slot_id)
            blob[slot_id.value] = preference.model_dump(mode="json") if preference else None
        return json.dumps(blob)

    def to_wishlist_item(self) -> dict[str, Any]:
        """Request body for the wishlist item endpoint."""
        item: dict[str, Any] = {
            "preferenceOptions": self.preference_options_json(),
            "variantPreference": self.primary_preference,
        }
        if self.product is not None:
            item.update(
                {
                    "productName": self.product.name,
                    "productUrl": self.product.url,
                    "productPrice": self.product.price,
                    "productImage": self.product.image_url,
                    "source": (self.product.store_name or "").lower() or None,
                }
            )
        return item
