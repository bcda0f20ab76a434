from __future__ import annotations

from typing import Iterable, Sequence

from ..common.logging_config import get_logger
from ..core.enums import Grouping, IssueType, SessionState
from ..punches.model import DateRange, OrgFilter, Punch
from ..sessions.classifier import sessionize
from .factory import GroupingStrategyFactory
from .model import ReportGroup, ReportSummary
from .strategies.base import GroupingResult, SessionIndex

logger = get_logger("reports.aggregator")


def issue_breakdown(sessions: SessionIndex) -> dict:
    counts = {"checkInOnly": 0, "checkOutOnly": 0, "unknown": 0, "complete": 0}
    for session in sessions.values():
        c = session.classification
        if c.state == SessionState.COMPLETE:
            counts["complete"] += 1
        elif c.issue_type == IssueType.CHECK_IN_ONLY:
            counts["checkInOnly"] += 1
        elif c.issue_type == IssueType.CHECK_OUT_ONLY:
            counts["checkOutOnly"] += 1
        else:
            counts["unknown"] += 1
    return counts


class ReportAggregator:
    """Scope rows to the date range and org filter, classify sessions, then group."""

    def __init__(self, *, factory: GroupingStrategyFactory | None = None):
        self._factory = factory or GroupingStrategyFactory()

    def aggregate(
        self,
        rows: Iterable[Punch],
        grouping: Grouping,
        date_range: DateRange,
        org_filter: OrgFilter,
    ) -> tuple[list[ReportGroup], ReportSummary]:
        scoped: Sequence[Punch] = [r for r in rows if date_range.contains(r.event_at) and org_filter.matches(r)]
        sessions = sessionize(scoped)

        strategy = self._factory.for_grouping(grouping)
        if scoped:
            result = strategy.build(scoped, sessions)
        else:
            # Nothing matched the filters: empty group set, zero counts.
            result = GroupingResult(groups=[], total_employees=0, total_records=0)

        summary = ReportSummary(
            total_employees=result.total_employees,
            total_groups=result.total_groups,
            total_records=result.total_records,
            division_filter=org_filter.division_id or "All",
            section_filter=org_filter.section_id or "All",
            sub_section_filter=org_filter.sub_section_id or "All",
            filter_description=org_filter.describe(),
            issue_breakdown=issue_breakdown(sessions),
            truncated=result.truncated,
        )

        if result.truncated:
            logger.info("punch report truncated", extra={"rows": len(scoped), "kept": result.total_records})
        logger.debug(
            "report aggregated",
            extra={"grouping": grouping.value, "rows": len(scoped), "groups": result.total_groups},
        )
        return result.groups, summary
