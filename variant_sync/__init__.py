"""Variant preference capture and synchronization for the add-to-wishlist flow."""
