"""
Commit-time validation and payload assembly.

At least one slot must be active. Attribute values are cleaned and validated
again here because user edits bypass the capture pipeline.
"""

import logging

from models import (
    PREFERENCE_LABELS,
    CommitPayload,
    CustomField,
    ProductRef,
    SlotPreference,
)
from variant_sync.errors import NoPreferenceSelected
from variant_sync.normalize import clean, rejection_reason
from variant_sync.slots.slot import PreferenceSlot, SlotSet

logger = logging.getLogger(__name__)


def _slot_preference(slot: PreferenceSlot) -> SlotPreference:
    attributes: dict[str, str] = {}
    for key, value in slot.attributes.items():
        reason = rejection_reason(value)
        if reason is not None:
            logger.info("Dropped %s=%r from %s slot at commit (%s)", key, value, slot.slot_id.value, reason)
            continue
        attributes[key] = clean(value)

    custom_fields = [
        CustomField(id=f.id, key=f.key, value=f.value)
        for f in slot.custom_fields
        if f.key and f.value
    ]
    return SlotPreference(
        image=slot.media.image_url,
        title=slot.media.title,
        attributes=attributes,
        custom_fields=custom_fields,
        notes=slot.notes,
    )


def build_payload(slots: SlotSet, product: ProductRef | None = None) -> CommitPayload:
    """
    Assemble the wishlist payload from the active slots.

    Raises NoPreferenceSelected when no slot is active. The primary preference
    is the first active slot in Ideal > Alternative > OkToBuy order.
    """
    active = slots.active_slots()
    if not active:
        raise NoPreferenceSelected()

    preferences = {slot.slot_id: _slot_preference(slot) for slot in active}
    primary = PREFERENCE_LABELS[active[0].slot_id]
    return CommitPayload(product=product, primary_preference=primary, preferences=preferences)
