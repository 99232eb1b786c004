"""In-memory persistence for allocated groups."""

from .memory import GroupStore

__all__ = ["GroupStore"]
