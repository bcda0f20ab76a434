from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Mapping, Sequence

from ...core.enums import Grouping
from ...punches.model import Punch
from ...sessions.model import EmployeeDaySession
from ..model import ReportGroup

SessionIndex = Mapping[tuple[str, date], EmployeeDaySession]


@dataclass(frozen=True)
class GroupingResult:
    groups: list[ReportGroup]
    total_employees: int
    total_records: int
    truncated: bool = False

    @property
    def total_groups(self) -> int:
        return len(self.groups)


class GroupingStrategy(ABC):
    """Strategy Pattern: encapsulate how report rows are bucketed."""

    grouping: Grouping

    @abstractmethod
    def build(self, rows: Sequence[Punch], sessions: SessionIndex) -> GroupingResult:
        raise NotImplementedError


def name_key(name: str | None) -> str:
    return (name or "").casefold()
