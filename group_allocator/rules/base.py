from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Tuple

from group_allocator.models.group import WorkingGroup
from group_allocator.models.student import Student


@dataclass
class ScoreTerm(ABC):
    """One weighted component of a student's fit score against a group."""

    name: str
    weight: float = 1.0
    explain: str | None = None

    def evaluate(
        self,
        student: Student,
        group: WorkingGroup,
        priorities: Mapping[str, float],
    ) -> Tuple[float, str]:
        base = self.score(student, group, priorities)
        score = base * self.weight
        template = self.explain or f"{self.name} score {score:.2f}"
        rationale = template.format(
            student=student, group=group, base=base, score=score
        )
        return score, rationale

    @abstractmethod
    def score(
        self,
        student: Student,
        group: WorkingGroup,
        priorities: Mapping[str, float],
    ) -> float:
        """Return the unweighted value of this term for the pair."""
