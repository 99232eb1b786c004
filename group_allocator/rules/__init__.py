"""Fit-score terms for group_allocator."""
from __future__ import annotations

from typing import Callable, Dict, List, Mapping

from .base import ScoreTerm
from .library import (
    CapacityTerm,
    DiversityTerm,
    KeySkillNoveltyTerm,
    SkillBalanceTerm,
)


TERM_REGISTRY: Dict[str, Callable[[float], ScoreTerm]] = {
    "capacity": lambda weight: CapacityTerm(
        name="capacity",
        weight=weight,
        explain="{base:.0f} open seats",
    ),
    "gender": lambda weight: DiversityTerm(
        name="gender",
        weight=weight,
        attribute="gender",
        explain="{base:.0f} distinct genders",
    ),
    "ethnicity": lambda weight: DiversityTerm(
        name="ethnicity",
        weight=weight,
        attribute="ethnicity",
        explain="{base:.0f} distinct ethnicities",
    ),
    "academic_year": lambda weight: DiversityTerm(
        name="academic_year",
        weight=weight,
        attribute="academic_year",
        explain="{base:.0f} distinct academic years",
    ),
    "key_skill": lambda weight: KeySkillNoveltyTerm(
        name="key_skill",
        weight=weight,
        explain="brings {base:.0f} new key skills",
    ),
    "skill_balance": lambda weight: SkillBalanceTerm(
        name="skill_balance",
        weight=weight,
        explain="skill balance {score:.2f}",
    ),
}

DEFAULT_WEIGHTS: Dict[str, float] = {
    "capacity": 5.0,
    "gender": 3.0,
    "ethnicity": 3.0,
    "academic_year": 2.0,
    "key_skill": 5.0,
    "skill_balance": 1.0,
}


def create_term(name: str, weight: float | None = None) -> ScoreTerm:
    """Instantiate a registered :class:`ScoreTerm` by name."""
    factory = TERM_REGISTRY.get(name)
    if factory is None:
        raise KeyError(f"Unknown score term: {name}")
    return factory(DEFAULT_WEIGHTS[name] if weight is None else float(weight))


def build_terms(overrides: Mapping[str, float] | None = None) -> List[ScoreTerm]:
    """Build every registered term, applying weight overrides by name."""
    overrides = overrides or {}
    return [create_term(name, overrides.get(name)) for name in TERM_REGISTRY]


__all__ = [
    "ScoreTerm",
    "CapacityTerm",
    "DiversityTerm",
    "KeySkillNoveltyTerm",
    "SkillBalanceTerm",
    "TERM_REGISTRY",
    "DEFAULT_WEIGHTS",
    "create_term",
    "build_terms",
]
