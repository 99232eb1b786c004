"""Utilities for exporting allocated groups, seat rationales and group summaries.

This module turns an
:class:`~group_allocator.engine.outcome.AllocationSuccess` into structures
suitable for YAML or CSV output. Seat rationales are grouped by group name and
student id, and summaries describe each group's skill and category mix.
"""
from __future__ import annotations

import csv
from typing import Dict

import yaml

from ..engine.outcome import AllocationSuccess
from ..models.student import CATEGORY_ATTRIBUTES


def format_seat_rationales(result: AllocationSuccess) -> Dict[str, Dict[str, str]]:
    """Return seat rationales grouped by group name and student id.

    Parameters
    ----------
    result:
        Allocation result containing rationales keyed by ``(group, student_id)``.

    Returns
    -------
    dict[str, dict[str, str]]
        Mapping of group name -> student id -> rationale string. Groups follow
        their number, students their assignment order.
    """
    grouped: Dict[str, Dict[str, str]] = {}
    for group in result.groups:
        seats = grouped.setdefault(group.name, {})
        for student_id in group.student_ids:
            rationale = result.rationales.get((group.name, student_id))
            if rationale is not None:
                seats[student_id] = rationale
    return grouped


def export_yaml(result: AllocationSuccess, allocation_file: str, rationale_file: str) -> None:
    """Write allocation and rationale data to YAML files.

    The allocation file maps each group name to its list of student ids in
    assignment order. The rationale file contains per-seat rationales and
    group summaries. Groups are written in number order, so "Group 10"
    follows "Group 9".
    """
    allocations = {group.name: list(group.student_ids) for group in result.groups}
    rationales = {
        "seats": format_seat_rationales(result),
        "group_summaries": result.group_summaries,
    }
    with open(allocation_file, "w", encoding="utf8") as handle:
        yaml.safe_dump(allocations, handle, sort_keys=False)
    with open(rationale_file, "w", encoding="utf8") as handle:
        yaml.safe_dump(rationales, handle, sort_keys=False)


def _format_pairs(mapping: Dict[str, object]) -> str:
    return ";".join(f"{key}={value}" for key, value in sorted(mapping.items()))


def export_csv(result: AllocationSuccess, allocation_file: str, rationale_file: str) -> None:
    """Write allocation and rationale data to CSV files.

    The allocation CSV has columns ``group`` and ``student_id``. The
    rationale CSV first lists seat rationales with columns ``group``,
    ``student_id`` and ``rationale``. After a blank row a second header is
    written containing one summary row per group; mapping values are written
    as ``key=value`` pairs separated by semicolons.
    """
    with open(allocation_file, "w", newline="", encoding="utf8") as handle:
        writer = csv.DictWriter(handle, fieldnames=["group", "student_id"])
        writer.writeheader()
        for group in result.groups:
            for student_id in group.student_ids:
                writer.writerow({"group": group.name, "student_id": student_id})

    seat_rationales = format_seat_rationales(result)
    summary_columns = ["group", "size", "target_size", "skill_averages", "key_skills"]
    summary_columns.extend(CATEGORY_ATTRIBUTES)
    with open(rationale_file, "w", newline="", encoding="utf8") as handle:
        writer = csv.writer(handle)
        writer.writerow(["group", "student_id", "rationale"])
        for group, seats in seat_rationales.items():
            for student_id, rationale in seats.items():
                writer.writerow([group, student_id, rationale])
        writer.writerow([])
        writer.writerow(summary_columns)
        for group in result.groups:
            summary = result.group_summaries.get(group.name, {})
            row = [
                group.name,
                summary.get("size"),
                summary.get("target_size"),
                _format_pairs(summary.get("skill_averages", {})),
                ";".join(summary.get("key_skills", [])),
            ]
            row.extend(_format_pairs(summary.get(a, {})) for a in CATEGORY_ATTRIBUTES)
            writer.writerow(row)
