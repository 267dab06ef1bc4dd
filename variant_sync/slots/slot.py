"""
Preference slots.

One PreferenceSlot per tier (Ideal, Alternative, OkToBuy). A slot is
*active* once the user opts into the tier or a capture lands in it, and
*armed* while it is the target of a capture session.

    Inactive --activate()--> Active
    any      --arm()-------> armed (attributes and media cleared)
    armed    --receive_capture()--> Active, unarmed
    any      --deactivate()--> Inactive (everything cleared)

Notes and custom fields survive arm(): they are the user's own annotations,
not data from a previous capture.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator

from pydantic import BaseModel, Field

from models import CapturedMedia, CustomField, SlotId
from variant_sync.errors import SlotTransitionError

logger = logging.getLogger(__name__)


class PreferenceSlot(BaseModel):
    slot_id: SlotId
    active: bool = False
    armed: bool = False
    attributes: dict[str, str] = Field(default_factory=dict)
    custom_fields: list[CustomField] = Field(default_factory=list)
    notes: str = ""
    media: CapturedMedia = Field(default_factory=CapturedMedia)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self) -> None:
        self.active = True

    def deactivate(self) -> None:
        self.active = False
        self.armed = False
        self.attributes = {}
        self.custom_fields = []
        self.notes = ""
        self.media = CapturedMedia()

    def arm(self) -> None:
        """Become the capture target, dropping data from any earlier capture."""
        self.attributes = {}
        self.media = CapturedMedia()
        self.armed = True

    def disarm(self) -> None:
        self.armed = False

    def receive_capture(self, attributes: dict[str, str], media: CapturedMedia | None = None) -> None:
        """Write a processed capture. Only legal while armed; otherwise nothing changes."""
        if not self.armed:
            raise SlotTransitionError(
                f"{self.slot_id.value} slot is not armed",
                details={"slot": self.slot_id.value},
            )
        self.attributes = dict(attributes)
        if media is not None:
            if media.image_url:
                self.media.image_url = media.image_url
            if media.title:
                self.media.title = media.title
        self.active = True
        self.armed = False

    # ------------------------------------------------------------------
    # User edits
    # ------------------------------------------------------------------

    def edit_attribute(self, key: str, value: str) -> None:
        """Set an attribute; an empty value removes it."""
        self._require_active("edit an attribute")
        key = key.strip()
        if not key:
            raise ValueError("Attribute key must not be empty")
        value = value.strip()
        if value:
            self.attributes[key] = value
        else:
            self.attributes.pop(key, None)

    def delete_attribute(self, key: str) -> None:
        self._require_active("delete an attribute")
        self.attributes.pop(key.strip(), None)

    def add_custom_field(self, key: str = "", value: str = "") -> CustomField:
        self._require_active("add a custom field")
        custom_field = CustomField(key=key.strip(), value=value.strip())
        self.custom_fields.append(custom_field)
        return custom_field

    def update_custom_field(
        self, field_id: str, *, key: str | None = None, value: str | None = None
    ) -> CustomField:
        self._require_active("update a custom field")
        custom_field = self._find_custom_field(field_id)
        if key is not None:
            custom_field.key = key.strip()
        if value is not None:
            custom_field.value = value.strip()
        return custom_field

    def remove_custom_field(self, field_id: str) -> None:
        self._require_active("remove a custom field")
        self.custom_fields = [f for f in self.custom_fields if f.id != field_id]

    def set_notes(self, text: str) -> None:
        self._require_active("set notes")
        self.notes = text.strip()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def has_content(self) -> bool:
        return bool(self.attributes or self.custom_fields or self.notes or not self.media.is_empty())

    def _require_active(self, action: str) -> None:
        if not self.active:
            raise SlotTransitionError(
                f"Cannot {action}: {self.slot_id.value} slot is inactive",
                details={"slot": self.slot_id.value},
            )

    def _find_custom_field(self, field_id: str) -> CustomField:
        for custom_field in self.custom_fields:
            if custom_field.id == field_id:
                return custom_field
        raise KeyError(field_id)


class SlotSet:
    """The three preference slots of one add-to-wishlist dialog."""

    def __init__(self) -> None:
        self._slots: dict[SlotId, PreferenceSlot] = {
            slot_id: PreferenceSlot(slot_id=slot_id) for slot_id in SlotId
        }

    def __getitem__(self, slot_id: SlotId) -> PreferenceSlot:
        return self._slots[SlotId(slot_id)]

    def __iter__(self) -> Iterator[PreferenceSlot]:
        # SlotId order is priority order.
        return iter(self._slots[slot_id] for slot_id in SlotId)

    def armed_slot(self) -> PreferenceSlot | None:
        armed = [slot for slot in self if slot.armed]
        if len(armed) > 1:
            # Only the coordinator arms slots, and it disarms before arming.
            raise SlotTransitionError(
                "More than one slot is armed",
                details={"slots": [slot.slot_id.value for slot in armed]},
            )
        return armed[0] if armed else None

    def active_slots(self) -> list[PreferenceSlot]:
        return [slot for slot in self if slot.active]

    def reset(self) -> None:
        for slot in self:
            slot.deactivate()
        logger.debug("All preference slots reset")
