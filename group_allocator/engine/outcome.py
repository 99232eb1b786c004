"""Result types returned by :func:`group_allocator.engine.allocate`.

A run either succeeds with the full group set or fails without any groups;
there is no partial result.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Tuple, Union

from ..errors import AllocationFailureError, InvalidConfigurationError
from ..models.group import Group


@dataclass(frozen=True)
class AllocationSuccess:
    """Groups produced by a completed run."""

    groups: List[Group]
    rationales: Dict[Tuple[str, str], str] = field(default_factory=dict)
    group_summaries: Dict[str, Dict[str, object]] = field(default_factory=dict)

    ok: ClassVar[bool] = True

    def unwrap(self) -> "AllocationSuccess":
        return self


@dataclass(frozen=True)
class InvalidConfiguration:
    """The caller supplied an empty roster or an unusable configuration."""

    message: str

    ok: ClassVar[bool] = False

    def unwrap(self) -> AllocationSuccess:
        raise InvalidConfigurationError(self.message)


@dataclass(frozen=True)
class AllocationFailure:
    """The run hit an internal inconsistency and was abandoned."""

    message: str

    ok: ClassVar[bool] = False

    def unwrap(self) -> AllocationSuccess:
        raise AllocationFailureError(self.message)


AllocationOutcome = Union[AllocationSuccess, InvalidConfiguration, AllocationFailure]
