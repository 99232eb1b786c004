from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable

from ..errors import InvalidConfigurationError

MIN_GROUP_SIZE = 2


def is_real_number(value: Any) -> bool:
    """Return True for finite ints and floats; bools and NaN are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


@dataclass
class AllocationConfig:
    """Target group size, skill priorities and optional score-term weights.

    Values are not checked on construction; :meth:`validate` is called by the
    allocator before any group is created.
    """

    group_size: int
    skill_priorities: Dict[str, float] = field(default_factory=dict)
    weights: Dict[str, float] = field(default_factory=dict)

    def validate(self, known_terms: Iterable[str] = ()) -> None:
        if isinstance(self.group_size, bool) or not isinstance(self.group_size, int):
            raise InvalidConfigurationError("group_size must be an integer")
        if self.group_size < MIN_GROUP_SIZE:
            raise InvalidConfigurationError(
                f"group_size must be at least {MIN_GROUP_SIZE}, got {self.group_size}"
            )
        for skill, priority in sorted(self.skill_priorities.items()):
            if not is_real_number(priority):
                raise InvalidConfigurationError(
                    f"Priority for skill {skill!r} must be a finite number"
                )
            if priority <= 0:
                raise InvalidConfigurationError(
                    f"Priority for skill {skill!r} must be positive"
                )
        for term, weight in sorted(self.weights.items()):
            if not is_real_number(weight):
                raise InvalidConfigurationError(
                    f"Weight for score term {term!r} must be a finite number"
                )
        known = set(known_terms)
        if known:
            unknown = sorted(set(self.weights) - known)
            if unknown:
                raise InvalidConfigurationError(
                    f"Unknown score terms in weights: {', '.join(unknown)}"
                )
