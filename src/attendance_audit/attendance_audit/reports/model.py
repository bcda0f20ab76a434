from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..common.params import canonical_params
from ..common.validators import require_date, require_date_range
from ..core.constants import DEFAULT_REPORT_FORMAT
from ..core.enums import Grouping, Severity
from ..core.exceptions import ValidationError
from ..punches.model import DateRange, OrgFilter


@dataclass(frozen=True)
class ReportFilters:
    """Validated, alias-free view of the caller's report parameters."""

    date_range: DateRange
    grouping: Grouping = Grouping.NONE
    org_filter: OrgFilter = field(default_factory=OrgFilter)
    employee_id: Optional[str] = None
    format: str = DEFAULT_REPORT_FORMAT

    @property
    def is_individual(self) -> bool:
        return self.employee_id is not None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "ReportFilters":
        p = canonical_params(params)

        start = require_date(p["from_date"], "from_date")
        end = require_date(p["to_date"], "to_date")
        require_date_range(start, end)

        grouping_raw = p["grouping"] or Grouping.NONE.value
        try:
            grouping = Grouping(grouping_raw)
        except ValueError:
            raise ValidationError(f"grouping must be one of: {', '.join(g.value for g in Grouping)}") from None

        # Individual reports are scoped by employee only.
        employee_id = p["employee_id"]
        org = OrgFilter() if employee_id else OrgFilter(
            division_id=p["division_id"],
            section_id=p["section_id"],
            sub_section_id=p["sub_section_id"],
        )

        return cls(
            date_range=DateRange(start=start, end=end),
            grouping=grouping,
            org_filter=org,
            employee_id=employee_id,
            format=p["format"] or DEFAULT_REPORT_FORMAT,
        )


@dataclass(frozen=True)
class ReportGroup:
    group_name: str
    members: list[dict]
    severity: Optional[Severity] = None
    statistics: dict = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.members)

    @property
    def record_count(self) -> int:
        return sum(int(m.get("recordCount", 1)) for m in self.members)

    def to_dict(self) -> dict:
        out: dict[str, Any] = {
            "groupName": self.group_name,
            "employees": self.members,
            "count": self.count,
            "recordCount": self.record_count,
        }
        if self.severity is not None:
            out["severity"] = self.severity.value
        if self.statistics:
            out["statistics"] = self.statistics
        return out


@dataclass(frozen=True)
class ReportSummary:
    total_employees: int
    total_groups: int
    total_records: int
    division_filter: str = "All"
    section_filter: str = "All"
    sub_section_filter: str = "All"
    filter_description: str = "No filters applied"
    issue_breakdown: dict = field(default_factory=dict)
    truncated: bool = False

    def to_dict(self) -> dict:
        return {
            "totalEmployees": self.total_employees,
            "totalGroups": self.total_groups,
            "totalRecords": self.total_records,
            "divisionFilter": self.division_filter,
            "sectionFilter": self.section_filter,
            "subSectionFilter": self.sub_section_filter,
            "filterDescription": self.filter_description,
            "issueBreakdown": self.issue_breakdown,
            "truncated": self.truncated,
        }


@dataclass(frozen=True)
class Report:
    groups: list[ReportGroup]
    summary: ReportSummary
    date_range: DateRange
    grouping: Grouping

    def to_dict(self) -> dict:
        return {
            "data": [g.to_dict() for g in self.groups],
            "summary": self.summary.to_dict(),
            "dateRange": self.date_range.to_dict(),
            "grouping": self.grouping.value,
        }
