from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Set

MIN_SKILL_LEVEL = 0
MAX_SKILL_LEVEL = 5
KEY_SKILL_THRESHOLD = 4

CATEGORY_ATTRIBUTES = ("gender", "ethnicity", "academic_year", "status")


@dataclass(frozen=True, eq=False)
class Student:
    """A survey respondent taking part in one allocation run."""

    student_id: str
    gender: str = ""
    ethnicity: str = ""
    academic_year: str = ""
    status: str = ""
    name: str = ""
    major: str = ""
    skills: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        student_id = str(self.student_id).strip()
        if not student_id:
            raise ValueError("student_id must not be blank")
        object.__setattr__(self, "student_id", student_id)
        for attribute in CATEGORY_ATTRIBUTES:
            object.__setattr__(self, attribute, getattr(self, attribute).strip())
        for skill, level in self.skills.items():
            if isinstance(level, bool) or not isinstance(level, int):
                raise ValueError(f"Skill level for {skill} must be an integer")
            if not MIN_SKILL_LEVEL <= level <= MAX_SKILL_LEVEL:
                raise ValueError(
                    f"Skill level for {skill} must be between "
                    f"{MIN_SKILL_LEVEL} and {MAX_SKILL_LEVEL}"
                )

    def skill_level(self, skill: str) -> int:
        """Return the student's level for ``skill``.

        Raises ``KeyError`` when the student has no rating for the skill.
        """
        try:
            return self.skills[skill]
        except KeyError:
            raise KeyError(
                f"Student {self.student_id} has no rating for skill {skill!r}"
            ) from None

    def category(self, attribute: str) -> str:
        return getattr(self, attribute)

    def key_skills(self, priorities: Mapping[str, float]) -> Set[str]:
        """Return prioritised skills this student rates at or above the key threshold."""
        return {
            skill
            for skill in priorities
            if self.skill_level(skill) >= KEY_SKILL_THRESHOLD
        }
