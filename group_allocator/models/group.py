from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Set, Tuple

from ..errors import AllocationFailureError
from .student import CATEGORY_ATTRIBUTES, Student


def _empty_counts() -> Dict[str, Dict[str, int]]:
    return {attribute: {} for attribute in CATEGORY_ATTRIBUTES}


@dataclass
class GroupMetrics:
    """Running aggregates for one group.

    The ``*_after`` helpers answer "what if this student joined" without
    touching the stored counts or averages; only :meth:`add` mutates.
    """

    size: int = 0
    category_counts: Dict[str, Dict[str, int]] = field(default_factory=_empty_counts)
    skill_averages: Dict[str, float] = field(default_factory=dict)
    key_skills: Set[str] = field(default_factory=set)

    def counts_after(self, attribute: str, value: str) -> Dict[str, int]:
        counts = dict(self.category_counts.get(attribute, {}))
        counts[value] = counts.get(value, 0) + 1
        return counts

    def distinct_after(self, attribute: str, value: str) -> int:
        return len(self.counts_after(attribute, value))

    def average_after(self, skill: str, level: int) -> float:
        current = self.skill_averages.get(skill, 0.0)
        return (current * self.size + level) / (self.size + 1)

    def add(self, student: Student, priorities: Mapping[str, float]) -> None:
        averages = {
            skill: self.average_after(skill, student.skill_level(skill))
            for skill in priorities
        }
        key_skills = student.key_skills(priorities)
        for attribute in CATEGORY_ATTRIBUTES:
            self.category_counts[attribute] = self.counts_after(
                attribute, student.category(attribute)
            )
        self.skill_averages.update(averages)
        self.key_skills.update(key_skills)
        self.size += 1


@dataclass
class WorkingGroup:
    """Mutable group state used while the allocator runs."""

    index: int
    target_size: int
    members: List[str] = field(default_factory=list)
    metrics: GroupMetrics = field(default_factory=GroupMetrics)

    def has_capacity(self) -> bool:
        return len(self.members) < self.target_size

    def remaining(self) -> int:
        return self.target_size - len(self.members)

    def add_member(self, student: Student, priorities: Mapping[str, float]) -> None:
        if not self.has_capacity():
            raise AllocationFailureError(
                f"Group index {self.index} is already at its target size"
            )
        if student.student_id in self.members:
            raise AllocationFailureError(
                f"Student {student.student_id} is already in group index {self.index}"
            )
        self.metrics.add(student, priorities)
        self.members.append(student.student_id)


@dataclass(frozen=True)
class Group:
    """A finished group as handed back to the caller."""

    number: int
    name: str
    student_ids: Tuple[str, ...]

    @property
    def size(self) -> int:
        return len(self.student_ids)
