from .api import app, get_store

__all__ = ["app", "get_store"]
