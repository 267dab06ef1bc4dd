from .slot import PreferenceSlot, SlotSet

__all__ = ["PreferenceSlot", "SlotSet"]
