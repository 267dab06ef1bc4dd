"""Unit tests for the per-tier preference slot state machine."""

import unittest

from models import CapturedMedia, SlotId
from variant_sync.errors import SlotTransitionError
from variant_sync.slots import PreferenceSlot, SlotSet


def _captured_slot(attributes: dict[str, str] | None = None) -> PreferenceSlot:
    slot = PreferenceSlot(slot_id=SlotId.IDEAL)
    slot.arm()
    slot.receive_capture(
        attributes if attributes is not None else {"Color": "Red", "Size": "M"},
        CapturedMedia(image_url="https://img.example.com/a.jpg", title="Tee"),
    )
    return slot


class TestSlotLifecycle(unittest.TestCase):
    def test_new_slot_is_inactive_and_empty(self) -> None:
        slot = PreferenceSlot(slot_id=SlotId.ALTERNATIVE)
        self.assertFalse(slot.active)
        self.assertFalse(slot.armed)
        self.assertFalse(slot.has_content())

    def test_activate_does_not_arm(self) -> None:
        slot = PreferenceSlot(slot_id=SlotId.OK_TO_BUY)
        slot.activate()
        self.assertTrue(slot.active)
        self.assertFalse(slot.armed)

    def test_receive_capture_activates_and_disarms(self) -> None:
        slot = _captured_slot()
        self.assertTrue(slot.active)
        self.assertFalse(slot.armed)
        self.assertEqual(slot.attributes, {"Color": "Red", "Size": "M"})
        self.assertEqual(slot.media.image_url, "https://img.example.com/a.jpg")
        self.assertEqual(slot.media.title, "Tee")

    def test_receive_capture_requires_armed(self) -> None:
        slot = _captured_slot()
        before = slot.model_copy(deep=True)

        with self.assertRaises(SlotTransitionError):
            slot.receive_capture({"Color": "Blue"}, CapturedMedia(title="Other"))

        self.assertEqual(slot, before)

    def test_media_fields_only_written_when_present(self) -> None:
        slot = PreferenceSlot(slot_id=SlotId.IDEAL)
        slot.arm()
        slot.receive_capture({}, CapturedMedia(title="Only a title"))
        self.assertIsNone(slot.media.image_url)
        self.assertEqual(slot.media.title, "Only a title")

    def test_arm_clears_capture_but_keeps_annotations(self) -> None:
        slot = _captured_slot()
        slot.set_notes("Prefer the matte finish")
        custom = slot.add_custom_field("Engraving", "J.K.")

        slot.arm()

        self.assertTrue(slot.armed)
        self.assertEqual(slot.attributes, {})
        self.assertTrue(slot.media.is_empty())
        self.assertEqual(slot.notes, "Prefer the matte finish")
        self.assertEqual([f.id for f in slot.custom_fields], [custom.id])

    def test_deactivate_clears_everything(self) -> None:
        slot = _captured_slot()
        slot.set_notes("note")
        slot.add_custom_field("k", "v")
        slot.arm()

        slot.deactivate()

        self.assertFalse(slot.active)
        self.assertFalse(slot.armed)
        self.assertFalse(slot.has_content())


class TestSlotEdits(unittest.TestCase):
    def setUp(self) -> None:
        self.slot = _captured_slot()

    def test_edit_attribute_trims(self) -> None:
        self.slot.edit_attribute(" Color ", "  Navy ")
        self.assertEqual(self.slot.attributes["Color"], "Navy")

    def test_edit_attribute_empty_value_removes(self) -> None:
        self.slot.edit_attribute("Size", "   ")
        self.assertNotIn("Size", self.slot.attributes)

    def test_edit_attribute_rejects_empty_key(self) -> None:
        with self.assertRaises(ValueError):
            self.slot.edit_attribute("  ", "Red")

    def test_delete_attribute(self) -> None:
        self.slot.delete_attribute("Color")
        self.slot.delete_attribute("Missing")
        self.assertEqual(self.slot.attributes, {"Size": "M"})

    def test_custom_field_add_update_remove(self) -> None:
        first = self.slot.add_custom_field(" Strap ", " Leather ")
        second = self.slot.add_custom_field()
        self.assertEqual((first.key, first.value), ("Strap", "Leather"))
        self.assertNotEqual(first.id, second.id)

        self.slot.update_custom_field(second.id, key="Gift wrap", value="yes")
        self.assertEqual(self.slot.custom_fields[1].key, "Gift wrap")

        self.slot.remove_custom_field(first.id)
        self.assertEqual([f.id for f in self.slot.custom_fields], [second.id])

    def test_update_unknown_custom_field(self) -> None:
        with self.assertRaises(KeyError):
            self.slot.update_custom_field("nope", value="x")

    def test_edits_require_active_slot(self) -> None:
        slot = PreferenceSlot(slot_id=SlotId.OK_TO_BUY)
        edits = [
            lambda: slot.edit_attribute("Color", "Red"),
            lambda: slot.delete_attribute("Color"),
            lambda: slot.add_custom_field("k", "v"),
            lambda: slot.remove_custom_field("id"),
            lambda: slot.set_notes("hi"),
        ]
        for edit in edits:
            with self.assertRaises(SlotTransitionError):
                edit()
        self.assertFalse(slot.has_content())


class TestSlotSet(unittest.TestCase):
    def test_iterates_in_priority_order(self) -> None:
        slots = SlotSet()
        self.assertEqual(
            [slot.slot_id for slot in slots],
            [SlotId.IDEAL, SlotId.ALTERNATIVE, SlotId.OK_TO_BUY],
        )

    def test_lookup_by_value(self) -> None:
        slots = SlotSet()
        self.assertIs(slots["OkToBuy"], slots[SlotId.OK_TO_BUY])

    def test_active_slots(self) -> None:
        slots = SlotSet()
        slots[SlotId.OK_TO_BUY].activate()
        slots[SlotId.IDEAL].activate()
        self.assertEqual(
            [slot.slot_id for slot in slots.active_slots()],
            [SlotId.IDEAL, SlotId.OK_TO_BUY],
        )

    def test_armed_slot(self) -> None:
        slots = SlotSet()
        self.assertIsNone(slots.armed_slot())
        slots[SlotId.ALTERNATIVE].arm()
        self.assertIs(slots.armed_slot(), slots[SlotId.ALTERNATIVE])

    def test_two_armed_slots_is_an_error(self) -> None:
        slots = SlotSet()
        slots[SlotId.IDEAL].arm()
        slots[SlotId.ALTERNATIVE].arm()
        with self.assertRaises(SlotTransitionError):
            slots.armed_slot()

    def test_reset(self) -> None:
        slots = SlotSet()
        slots[SlotId.IDEAL].activate()
        slots[SlotId.IDEAL].set_notes("x")
        slots.reset()
        self.assertEqual(slots.active_slots(), [])
