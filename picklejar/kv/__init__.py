"""Raw in-memory storage."""

from .memory import Memory

__all__ = ["Memory"]
