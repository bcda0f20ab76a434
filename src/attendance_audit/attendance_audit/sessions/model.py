from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import IssueType, SessionState, Severity
from ..punches.model import Punch


@dataclass(frozen=True)
class SessionClassification:
    state: SessionState
    issue_type: Optional[IssueType] = None
    severity: Optional[Severity] = None

    @property
    def is_complete(self) -> bool:
        return self.state == SessionState.COMPLETE


@dataclass(frozen=True)
class EmployeeDaySession:
    """Read-model: every punch of one employee on one calendar date.

    Derived on each query, never persisted.
    """

    employee_id: str
    work_date: date
    punches: tuple[Punch, ...]
    in_count: int
    out_count: int
    first_in: Optional[time]
    last_out: Optional[time]
    classification: SessionClassification

    @property
    def unknown_count(self) -> int:
        return len(self.punches) - self.in_count - self.out_count
