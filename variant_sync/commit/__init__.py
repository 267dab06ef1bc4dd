from .payload import build_payload

__all__ = ["build_payload"]
