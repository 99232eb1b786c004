"""Data models for group_allocator."""

from .student import Student
from .config import AllocationConfig
from .group import Group, GroupMetrics, WorkingGroup

__all__ = ["Student", "AllocationConfig", "Group", "GroupMetrics", "WorkingGroup"]
