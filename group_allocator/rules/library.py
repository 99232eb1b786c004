from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from group_allocator.models.group import WorkingGroup
from group_allocator.models.student import Student

from .base import ScoreTerm

SKILL_SCALE_TOP = 5.0
SKILL_MIDPOINT = 3.5


@dataclass
class CapacityTerm(ScoreTerm):
    """Prefer groups with more open seats."""

    def score(
        self, student: Student, group: WorkingGroup, priorities: Mapping[str, float]
    ) -> float:
        return float(group.remaining())


@dataclass
class DiversityTerm(ScoreTerm):
    """Count distinct values of a categorical attribute once the student joins."""

    attribute: str = "gender"

    def score(
        self, student: Student, group: WorkingGroup, priorities: Mapping[str, float]
    ) -> float:
        value = student.category(self.attribute)
        return float(group.metrics.distinct_after(self.attribute, value))


@dataclass
class KeySkillNoveltyTerm(ScoreTerm):
    """Reward key skills the group does not have yet."""

    def score(
        self, student: Student, group: WorkingGroup, priorities: Mapping[str, float]
    ) -> float:
        novel = student.key_skills(priorities) - group.metrics.key_skills
        return float(len(novel))


@dataclass
class SkillBalanceTerm(ScoreTerm):
    """Reward group skill averages that land near the middle of the scale.

    Each prioritised skill contributes ``(5 - |3.5 - avg|) * priority`` where
    ``avg`` is the group's mean after the student joins.
    """

    def score(
        self, student: Student, group: WorkingGroup, priorities: Mapping[str, float]
    ) -> float:
        total = 0.0
        for skill, priority in priorities.items():
            new_avg = group.metrics.average_after(skill, student.skill_level(skill))
            total += (SKILL_SCALE_TOP - abs(SKILL_MIDPOINT - new_avg)) * priority
        return total
