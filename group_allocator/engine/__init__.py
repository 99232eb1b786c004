"""Allocation engine for group_allocator."""

from .allocator import Allocator, allocate
from .outcome import (
    AllocationFailure,
    AllocationOutcome,
    AllocationSuccess,
    InvalidConfiguration,
)
from .scorer import FitScore, Scorer, rank_students, ranking_key

__all__ = [
    "Allocator",
    "allocate",
    "AllocationOutcome",
    "AllocationSuccess",
    "AllocationFailure",
    "InvalidConfiguration",
    "FitScore",
    "Scorer",
    "rank_students",
    "ranking_key",
]
