"""Process-local store holding the current group set for each form."""
from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Dict, Hashable, List, Sequence

from ..engine.allocator import allocate
from ..engine.outcome import AllocationOutcome
from ..models.config import AllocationConfig
from ..models.group import Group
from ..models.student import Student

logger = logging.getLogger(__name__)


class GroupStore:
    """Keep the latest groups per form id.

    A new allocation always supersedes the previous group set for the same
    form. Runs for one form are serialised with a per-form lock; runs for
    different forms do not block each other.
    """

    def __init__(self) -> None:
        self._groups: Dict[Hashable, List[Group]] = {}
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, form_id: Hashable) -> threading.Lock:
        with self._registry_lock:
            return self._locks.setdefault(form_id, threading.Lock())

    def get(self, form_id: Hashable) -> List[Group]:
        with self._registry_lock:
            return list(self._groups.get(form_id, []))

    def replace(self, form_id: Hashable, groups: Sequence[Group]) -> None:
        """Drop any groups stored for ``form_id`` and store ``groups`` instead."""
        with self._registry_lock:
            previous = self._groups.get(form_id, [])
            self._groups[form_id] = list(groups)
        logger.info(
            "Replaced %d groups for form %s with %d new groups",
            len(previous),
            form_id,
            len(groups),
        )

    def clear(self, form_id: Hashable) -> None:
        with self._registry_lock:
            self._groups.pop(form_id, None)

    def run(
        self,
        form_id: Hashable,
        roster: Sequence[Student],
        config: AllocationConfig,
    ) -> AllocationOutcome:
        """Allocate ``roster`` and store the groups if the run succeeds.

        A failed run leaves the previously stored groups untouched.
        """
        with self._lock_for(form_id):
            outcome = allocate(roster, config)
            if outcome.ok:
                self.replace(form_id, outcome.groups)
            return outcome

    def move(
        self, form_id: Hashable, student_id: str, target_group_name: str
    ) -> List[Group]:
        """Move one student into another stored group and return the new set.

        Raises ``KeyError`` when the student or the target group is not part of
        the groups stored for ``form_id``. Moving a student to the group it is
        already in leaves the set unchanged.
        """
        with self._lock_for(form_id):
            groups = self.get(form_id)
            source = next((g for g in groups if student_id in g.student_ids), None)
            if source is None:
                raise KeyError(f"Student {student_id} is not in any group for form {form_id}")
            target = next((g for g in groups if g.name == target_group_name), None)
            if target is None:
                raise KeyError(f"Form {form_id} has no group named {target_group_name!r}")
            if source.name == target.name:
                return groups

            moved = []
            for group in groups:
                if group.name == source.name:
                    members = tuple(m for m in group.student_ids if m != student_id)
                    group = dataclasses.replace(group, student_ids=members)
                elif group.name == target.name:
                    group = dataclasses.replace(group, student_ids=group.student_ids + (student_id,))
                moved.append(group)

            with self._registry_lock:
                self._groups[form_id] = moved
            logger.info(
                "Moved student %s from %s to %s for form %s",
                student_id,
                source.name,
                target.name,
                form_id,
            )
            return list(moved)
