from .coordinator import SyncCoordinator, SyncSession, build_attribute_map

__all__ = ["SyncCoordinator", "SyncSession", "build_attribute_map"]
