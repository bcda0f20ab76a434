from __future__ import annotations

from typing import Optional, Sequence

from ...core.constants import GROUP_ALL_EMPLOYEES
from ...core.enums import Grouping, ScanType
from ...punches.model import Punch
from ...sessions.classifier import normalize_scan_type
from ..model import ReportGroup
from .base import GroupingResult, GroupingStrategy, SessionIndex, name_key

EmployeeKey = tuple[str, str, Optional[str], Optional[str], Optional[str]]


class EmployeeSummaryStrategy(GroupingStrategy):
    """Default mode: one row per (id, name, designation, division, section)."""

    grouping = Grouping.NONE

    def build(self, rows: Sequence[Punch], sessions: SessionIndex) -> GroupingResult:
        summary: dict[EmployeeKey, dict] = {}

        for p in rows:
            key: EmployeeKey = (p.employee_id, p.employee_name, p.designation, p.division_name, p.section_name)
            m = summary.get(key)
            if m is None:
                m = {
                    "employeeId": p.employee_id,
                    "employeeName": p.employee_name,
                    "designation": p.designation or "Unassigned",
                    "divisionName": p.division_name or "N/A",
                    "sectionName": p.section_name or "N/A",
                    "issueCount": 0,
                    "inPunchCount": 0,
                    "outPunchCount": 0,
                    "scanTypes": set(),
                }
                summary[key] = m

            m["issueCount"] += 1
            kind = normalize_scan_type(p.scan_type)
            if kind == ScanType.IN:
                m["inPunchCount"] += 1
            elif kind == ScanType.OUT:
                m["outPunchCount"] += 1
            m["scanTypes"].add(kind.value)

        members = []
        for m in summary.values():
            m["recordCount"] = m["issueCount"]
            m["scanTypes"] = ", ".join(sorted(m["scanTypes"]))
            members.append(m)
        members.sort(key=lambda m: (-m["issueCount"], name_key(m["employeeName"]), m["employeeId"]))

        return GroupingResult(
            groups=[ReportGroup(group_name=GROUP_ALL_EMPLOYEES, members=members)],
            total_employees=len(members),
            total_records=sum(m["issueCount"] for m in members),
        )
