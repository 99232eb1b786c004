"""Student ranking and group fit scoring."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

from ..errors import AllocationFailureError
from ..models.group import WorkingGroup
from ..models.student import KEY_SKILL_THRESHOLD, Student
from ..rules import ScoreTerm, build_terms


def ranking_key(student: Student, priorities: Mapping[str, float]) -> Tuple[int, float]:
    """Return ``(max_key_skill_level, weighted_skill_score)`` for ``student``.

    The first element is the highest prioritised skill level at or above the
    key threshold (0 when there is none); the second is the sum of
    ``level * priority`` over the prioritised skills.
    """
    max_key_level = 0
    weighted = 0.0
    for skill, priority in priorities.items():
        level = student.skill_level(skill)
        if level >= KEY_SKILL_THRESHOLD and level > max_key_level:
            max_key_level = level
        weighted += level * priority
    return max_key_level, weighted


def rank_students(
    roster: Sequence[Student], priorities: Mapping[str, float]
) -> List[Student]:
    """Sort the roster strongest first; equal keys keep roster order."""
    keys = {id(student): ranking_key(student, priorities) for student in roster}
    return sorted(roster, key=lambda s: keys[id(s)], reverse=True)


@dataclass
class FitScore:
    """Total fit of one student against one group, with its breakdown."""

    group_index: int
    total: float
    contributions: List[Tuple[str, float, str]] = field(default_factory=list)

    def top_rationale(self) -> str:
        if not self.contributions:
            return ""
        # max() keeps the first of equal contributions
        _, _, rationale = max(self.contributions, key=lambda c: c[1])
        return rationale


class Scorer:
    """Evaluate how well a student fits each open group."""

    def __init__(
        self,
        priorities: Mapping[str, float],
        terms: Optional[List[ScoreTerm]] = None,
    ) -> None:
        self.priorities = dict(priorities)
        self.terms = terms if terms is not None else build_terms()

    def fit(self, student: Student, group: WorkingGroup) -> FitScore:
        contributions = []
        total = 0.0
        for term in self.terms:
            score, rationale = term.evaluate(student, group, self.priorities)
            contributions.append((term.name, score, rationale))
            total += score
        return FitScore(group.index, total, contributions)

    def best_group(
        self, student: Student, groups: Sequence[WorkingGroup]
    ) -> Tuple[WorkingGroup, FitScore, int]:
        """Return the best open group, its score and the number of open groups.

        Groups are scanned in index order and only a strictly higher score
        replaces the current best, so ties go to the lowest index.
        """
        best: Optional[Tuple[WorkingGroup, FitScore]] = None
        eligible = 0
        for group in groups:
            if not group.has_capacity():
                continue
            eligible += 1
            fit = self.fit(student, group)
            if best is None or fit.total > best[1].total:
                best = (group, fit)
        if best is None:
            raise AllocationFailureError(
                f"No open group left for student {student.student_id}"
            )
        return best[0], best[1], eligible
