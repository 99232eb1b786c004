"""Utilities for loading :class:`~group_allocator.models.student.Student` rosters from CSV files."""
from __future__ import annotations

import csv
from typing import Dict, List, Set

from ..models.student import Student

REQUIRED_COLUMNS = {"student_id", "gender", "ethnicity", "academic_year", "status"}


def parse_skills(field: str, lineno: int) -> Dict[str, int]:
    """Parse a ``skill=level;skill=level`` string into a mapping."""
    skills: Dict[str, int] = {}
    for pair in field.split(";"):
        if not pair.strip():
            continue
        if "=" not in pair:
            raise ValueError(f"Row {lineno}: skills entry '{pair}' missing '='")
        skill, level = pair.rsplit("=", 1)
        skill = skill.strip()
        if not skill:
            raise ValueError(f"Row {lineno}: skills entry '{pair}' has no skill name")
        try:
            skills[skill] = int(level)
        except ValueError as exc:
            raise ValueError(
                f"Row {lineno}: skill level '{level.strip()}' for '{skill}' must be an integer"
            ) from exc
    return skills


def load_roster(path: str) -> List[Student]:
    """Load a roster of students from a CSV file.

    The CSV must include ``student_id``, ``gender``, ``ethnicity``,
    ``academic_year`` and ``status`` columns. Optional columns are ``name``,
    ``major`` and ``skills``. Skills are a semicolon-delimited list of
    ``skill=level`` pairs with levels between 0 and 5.

    Parameters
    ----------
    path:
        Path to the CSV file.

    Returns
    -------
    list[Student]
        Students in file order. The order is significant: it breaks ties in
        the allocator's ranking.

    Raises
    ------
    ValueError
        If required columns are missing, ids are blank or repeated, or skill
        data is invalid.
    """

    with open(path, newline="", encoding="utf8") as handle:
        reader = csv.DictReader(handle)
        fieldnames = reader.fieldnames or []
        missing = REQUIRED_COLUMNS - set(fieldnames)
        if missing:
            raise ValueError(f"Missing required columns: {', '.join(sorted(missing))}")

        roster: List[Student] = []
        seen: Set[str] = set()
        for lineno, row in enumerate(reader, start=2):
            student_id = (row.get("student_id") or "").strip()
            if not student_id:
                raise ValueError(f"Row {lineno}: 'student_id' is required")
            if student_id in seen:
                raise ValueError(f"Row {lineno}: duplicate student_id '{student_id}'")
            seen.add(student_id)

            skills = parse_skills((row.get("skills") or "").strip(), lineno)
            try:
                student = Student(
                    student_id=student_id,
                    name=(row.get("name") or "").strip(),
                    major=(row.get("major") or "").strip(),
                    gender=row.get("gender") or "",
                    ethnicity=row.get("ethnicity") or "",
                    academic_year=row.get("academic_year") or "",
                    status=row.get("status") or "",
                    skills=skills,
                )
            except ValueError as exc:
                raise ValueError(f"Row {lineno}: {exc}") from exc
            roster.append(student)

    return roster
