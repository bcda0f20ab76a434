from __future__ import annotations

from typing import Sequence

from ...core.constants import UNKNOWN_DESIGNATION
from ...core.enums import Grouping, ScanType
from ...punches.model import Punch
from ...sessions.classifier import normalize_scan_type
from ..model import ReportGroup
from .base import GroupingResult, GroupingStrategy, SessionIndex, name_key


def designation_key(value: str | None) -> str:
    text = (value or "").strip()
    return text or UNKNOWN_DESIGNATION


class DesignationStrategy(GroupingStrategy):
    """Bucket rows by designation; members are employee-level rows."""

    grouping = Grouping.DESIGNATION

    def build(self, rows: Sequence[Punch], sessions: SessionIndex) -> GroupingResult:
        buckets: dict[str, dict[str, dict]] = {}
        scan_counts: dict[str, dict[str, int]] = {}

        for p in rows:
            key = designation_key(p.designation)
            members = buckets.setdefault(key, {})
            counts = scan_counts.setdefault(key, {"in": 0, "out": 0, "unknown": 0})

            m = members.get(p.employee_id)
            if m is None:
                m = {
                    "employeeId": p.employee_id,
                    "employeeName": p.employee_name,
                    "designation": key,
                    "divisionName": p.division_name,
                    "sectionName": p.section_name,
                    "recordCount": 0,
                    "inPunchCount": 0,
                    "outPunchCount": 0,
                    "unknownPunchCount": 0,
                    "firstEventDate": p.event_date.isoformat(),
                    "lastEventDate": p.event_date.isoformat(),
                }
                members[p.employee_id] = m

            m["recordCount"] += 1
            kind = normalize_scan_type(p.scan_type)
            if kind == ScanType.IN:
                m["inPunchCount"] += 1
                counts["in"] += 1
            elif kind == ScanType.OUT:
                m["outPunchCount"] += 1
                counts["out"] += 1
            else:
                m["unknownPunchCount"] += 1
                counts["unknown"] += 1

            iso = p.event_date.isoformat()
            m["firstEventDate"] = min(m["firstEventDate"], iso)
            m["lastEventDate"] = max(m["lastEventDate"], iso)

        groups = [
            ReportGroup(
                group_name=key,
                members=sorted(
                    members.values(),
                    key=lambda m: (name_key(m["employeeName"]), m["employeeId"]),
                ),
                statistics={"scanTypeCounts": scan_counts[key]},
            )
            for key, members in buckets.items()
        ]
        groups.sort(key=lambda g: name_key(g.group_name))

        return GroupingResult(
            groups=groups,
            total_employees=len({p.employee_id for p in rows}),
            total_records=len(rows),
        )
