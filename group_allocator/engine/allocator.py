from __future__ import annotations

import logging
import math
from typing import Dict, List, Sequence, Tuple

from ..errors import AllocationFailureError, InvalidConfigurationError
from ..models.config import AllocationConfig
from ..models.group import Group, WorkingGroup
from ..models.student import CATEGORY_ATTRIBUTES, Student
from ..rules import TERM_REGISTRY, build_terms
from .outcome import (
    AllocationFailure,
    AllocationOutcome,
    AllocationSuccess,
    InvalidConfiguration,
)
from .scorer import Scorer, rank_students

logger = logging.getLogger(__name__)


class Allocator:
    """Partition a roster into balanced groups with a single greedy pass.

    Students are placed strongest first (stable on roster order) into the
    open group with the highest fit score, lowest index winning ties. There is
    no backtracking: a placement is never revisited. The stages are:
    1. validation
    2. group skeleton with fixed target sizes
    3. greedy assignment
    4. final packaging
    """

    @staticmethod
    def validate(roster: Sequence[Student], config: AllocationConfig) -> None:
        """Reject requests that cannot be allocated before any group exists."""
        if not roster:
            raise InvalidConfigurationError("Roster is empty")
        config.validate(TERM_REGISTRY)
        seen = set()
        for student in roster:
            if student.student_id in seen:
                raise InvalidConfigurationError(
                    f"Duplicate student id {student.student_id}"
                )
            seen.add(student.student_id)

    @staticmethod
    def build_groups(roster_size: int, group_size: int) -> List[WorkingGroup]:
        """Create empty groups whose target sizes sum to ``roster_size``.

        The first ``roster_size % num_groups`` groups take one extra seat, so
        target sizes differ by at most one.
        """
        num_groups = math.ceil(roster_size / group_size)
        min_per_group, extra = divmod(roster_size, num_groups)
        return [
            WorkingGroup(
                index=index,
                target_size=min_per_group + 1 if index < extra else min_per_group,
            )
            for index in range(num_groups)
        ]

    @staticmethod
    def assign(
        ranked: Sequence[Student],
        groups: List[WorkingGroup],
        scorer: Scorer,
        rationales: Dict[Tuple[int, str], str],
    ) -> None:
        """Place each student, in order, into its best-scoring open group."""
        for processed, student in enumerate(ranked, start=1):
            group, fit, eligible = scorer.best_group(student, groups)
            group.add_member(student, scorer.priorities)
            rationales[(group.index, student.student_id)] = (
                f"Best fit score {fit.total:.2f} among {eligible} open groups; "
                f"top term: {fit.top_rationale()}"
            )
            logger.debug(
                "Placed %s in group index %d (score %.2f)",
                student.student_id,
                group.index,
                fit.total,
            )
            placed = sum(len(g.members) for g in groups)
            if placed != processed:
                raise AllocationFailureError(
                    f"Placed {placed} students after processing {processed}"
                )

        for group in groups:
            if len(group.members) != group.target_size:
                raise AllocationFailureError(
                    f"Group index {group.index} has {len(group.members)} members, "
                    f"expected {group.target_size}"
                )

    @staticmethod
    def summarize(group: WorkingGroup) -> Dict[str, object]:
        """Return plain-data metrics for one finished group."""
        metrics = group.metrics
        summary: Dict[str, object] = {
            "size": len(group.members),
            "target_size": group.target_size,
            "skill_averages": {
                skill: round(avg, 4)
                for skill, avg in sorted(metrics.skill_averages.items())
            },
            "key_skills": sorted(metrics.key_skills),
        }
        for attribute in CATEGORY_ATTRIBUTES:
            summary[attribute] = dict(sorted(metrics.category_counts[attribute].items()))
        return summary

    @staticmethod
    def package_result(
        groups: List[WorkingGroup], rationales: Dict[Tuple[int, str], str]
    ) -> AllocationSuccess:
        """Number the non-empty groups and attach rationales and summaries."""
        output: List[Group] = []
        names: Dict[int, str] = {}
        summaries: Dict[str, Dict[str, object]] = {}
        for group in groups:
            if not group.members:
                continue
            number = len(output) + 1
            name = f"Group {number}"
            names[group.index] = name
            output.append(
                Group(number=number, name=name, student_ids=tuple(group.members))
            )
            summaries[name] = Allocator.summarize(group)
        named_rationales = {
            (names[index], student_id): text
            for (index, student_id), text in rationales.items()
        }
        return AllocationSuccess(
            groups=output, rationales=named_rationales, group_summaries=summaries
        )

    @staticmethod
    def run(roster: Sequence[Student], config: AllocationConfig) -> AllocationSuccess:
        """Run every stage, raising on invalid input or internal failure."""
        Allocator.validate(roster, config)
        priorities = dict(config.skill_priorities)
        groups = Allocator.build_groups(len(roster), config.group_size)
        logger.info(
            "Allocating %d students into %d groups (target size %d)",
            len(roster),
            len(groups),
            config.group_size,
        )
        scorer = Scorer(priorities, build_terms(config.weights))
        ranked = rank_students(roster, priorities)
        rationales: Dict[Tuple[int, str], str] = {}
        Allocator.assign(ranked, groups, scorer, rationales)
        return Allocator.package_result(groups, rationales)


def allocate(roster: Sequence[Student], config: AllocationConfig) -> AllocationOutcome:
    """Allocate ``roster`` into groups, reporting errors as outcome values.

    Returns :class:`AllocationSuccess`, :class:`InvalidConfiguration` or
    :class:`AllocationFailure`. Failed runs never carry groups.
    """
    try:
        return Allocator.run(roster, config)
    except InvalidConfigurationError as exc:
        logger.warning("Rejected allocation request: %s", exc)
        return InvalidConfiguration(str(exc))
    except (AllocationFailureError, KeyError, ValueError, TypeError) as exc:
        logger.exception("Allocation failed")
        if isinstance(exc, KeyError) and exc.args:
            message = str(exc.args[0])
        else:
            message = str(exc)
        return AllocationFailure(message)
