"""Exception types raised by the allocator."""
from __future__ import annotations


class GroupAllocatorError(Exception):
    """Base class for allocator errors."""


class InvalidConfigurationError(GroupAllocatorError, ValueError):
    """The roster or configuration cannot be allocated."""


class AllocationFailureError(GroupAllocatorError, RuntimeError):
    """The allocator reached an inconsistent internal state."""
