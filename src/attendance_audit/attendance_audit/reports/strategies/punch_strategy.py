from __future__ import annotations

from typing import Sequence

from ...core.constants import DEFAULT_PUNCH_ROW_LIMIT, GROUP_ALL_RECORDS, UNKNOWN_DESIGNATION
from ...core.enums import Grouping
from ...punches.model import Punch
from ...sessions.classifier import normalize_scan_type
from ..model import ReportGroup
from .base import GroupingResult, GroupingStrategy, SessionIndex, name_key


class PunchStrategy(GroupingStrategy):
    """One member per raw punch, no cross-row aggregation.

    Output is capped at ``row_limit`` rows; truncation is reported through the
    summary flag only.
    """

    grouping = Grouping.PUNCH

    def __init__(self, *, row_limit: int = DEFAULT_PUNCH_ROW_LIMIT):
        self._row_limit = int(row_limit)

    def build(self, rows: Sequence[Punch], sessions: SessionIndex) -> GroupingResult:
        ordered = sorted(rows, key=lambda p: (name_key(p.employee_name), p.employee_id, p.event_at))
        total_employees = len({p.employee_id for p in ordered})
        truncated = len(ordered) > self._row_limit
        if truncated:
            ordered = ordered[: self._row_limit]

        members: list[dict] = []
        by_designation: dict[str, int] = {}
        by_division: dict[str, int] = {}

        for p in ordered:
            session = sessions.get((p.employee_id, p.event_date))
            classification = session.classification if session else None
            members.append(
                {
                    "employeeId": p.employee_id,
                    "employeeName": p.employee_name,
                    "designation": p.designation,
                    "eventDate": p.event_date.isoformat(),
                    "eventTime": p.event_time.strftime("%H:%M:%S"),
                    "scanType": normalize_scan_type(p.scan_type).value,
                    "rawScanType": p.scan_type,
                    "divisionName": p.division_name,
                    "sectionName": p.section_name,
                    "deviceId": p.device_id,
                    "sessionState": classification.state.value if classification else None,
                    "issueType": classification.issue_type.value
                    if classification and classification.issue_type
                    else None,
                    "severity": classification.severity.value if classification and classification.severity else None,
                }
            )
            designation_key = p.designation or UNKNOWN_DESIGNATION
            division_key = p.division_name or "N/A"
            by_designation[designation_key] = by_designation.get(designation_key, 0) + 1
            by_division[division_key] = by_division.get(division_key, 0) + 1

        group = ReportGroup(
            group_name=GROUP_ALL_RECORDS,
            members=members,
            statistics={"byDesignation": by_designation, "byDivision": by_division},
        )
        return GroupingResult(
            groups=[group],
            total_employees=total_employees,
            total_records=len(ordered),
            truncated=truncated,
        )
