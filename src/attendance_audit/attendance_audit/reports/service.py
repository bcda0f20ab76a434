from __future__ import annotations

from typing import Any, Mapping, Optional

from ..cache.keys import derive_key
from ..cache.orchestrator import ReportCache
from ..cache.ttl import TtlPolicy
from ..common.logging_config import get_logger
from ..common.validators import normalize_filter_id
from ..core.constants import DEFAULT_PUNCH_ROW_LIMIT
from ..core.enums import CacheScope, Grouping
from ..core.exceptions import ValidationError
from ..punches.repository import PunchRepository
from .aggregator import ReportAggregator
from .factory import GroupingStrategyFactory
from .model import Report, ReportFilters

logger = get_logger("reports.service")


def _payload_size(payload: Mapping[str, Any]) -> int:
    return sum(int(g.get("count", 0)) for g in payload.get("data", []))


class AttendanceReportService:
    """Entry point for audit reports: cache-aside around fetch + aggregate."""

    def __init__(
        self,
        punches: PunchRepository,
        cache: Optional[ReportCache] = None,
        *,
        aggregator: Optional[ReportAggregator] = None,
        ttl_policy: Optional[TtlPolicy] = None,
        row_limit: int = DEFAULT_PUNCH_ROW_LIMIT,
    ):
        self._punches = punches
        self._cache = cache
        self._row_limit = int(row_limit)
        self._aggregator = aggregator or ReportAggregator(factory=GroupingStrategyFactory(row_limit=self._row_limit))
        self._ttl = ttl_policy or TtlPolicy()

    def build_report(self, filters: ReportFilters) -> Report:
        """Uncached path: query the store and aggregate. Store errors propagate."""
        # One row past the cap so PunchStrategy can tell the result was cut.
        limit = self._row_limit + 1 if filters.grouping == Grouping.PUNCH else None
        rows = self._punches.query_punches(
            start_date=filters.date_range.start,
            end_date=filters.date_range.end,
            org_filter=filters.org_filter,
            employee_id=filters.employee_id,
            limit=limit,
        )
        if filters.employee_id is not None:
            rows = [r for r in rows if r.employee_id == filters.employee_id]

        groups, summary = self._aggregator.aggregate(rows, filters.grouping, filters.date_range, filters.org_filter)
        logger.info(
            "report built",
            extra={
                "grouping": filters.grouping.value,
                "rows": len(rows),
                "groups": summary.total_groups,
                "employee_id": filters.employee_id,
            },
        )
        return Report(groups=groups, summary=summary, date_range=filters.date_range, grouping=filters.grouping)

    def generate_report(self, params: Mapping[str, Any]) -> dict:
        filters = ReportFilters.from_params(params)

        def compute() -> dict:
            return self.build_report(filters).to_dict()

        if self._cache is None:
            return {**compute(), "cached": False}

        key = derive_key(params)
        payload, hit = self._cache.get_or_compute(
            key,
            compute,
            ttl_for=lambda p: self._ttl.select_ttl(params, _payload_size(p)),
            tier_for=lambda p: self._ttl.tier_for(params, _payload_size(p)),
        )
        return {**payload, "cached": hit, "cacheKey": key}

    # -- invalidation hooks for mutation workflows -------------------------

    def invalidate_employee(self, employee_id: str, *, include_groups: bool = True) -> int:
        employee_id = normalize_filter_id(employee_id)
        if employee_id is None:
            raise ValidationError("employee_id is required")
        if self._cache is None:
            return 0
        return self._cache.invalidate_employee(employee_id, include_groups=include_groups)

    def invalidate_organization(
        self,
        division_id: Optional[str],
        section_id: Optional[str] = None,
        subsection_id: Optional[str] = None,
    ) -> int:
        division_id = normalize_filter_id(division_id)
        section_id = normalize_filter_id(section_id)
        subsection_id = normalize_filter_id(subsection_id)
        if not (division_id or section_id or subsection_id):
            raise ValidationError("at least one of division_id, section_id, sub_section_id is required")
        if self._cache is None:
            return 0
        return self._cache.invalidate_organization(division_id, section_id, subsection_id)

    def invalidate_all(self, scope: str = CacheScope.ALL.value) -> int:
        try:
            cache_scope = CacheScope(str(scope).strip().lower())
        except ValueError:
            raise ValidationError("scope must be one of: individual, group, all") from None
        if self._cache is None:
            return 0
        return self._cache.invalidate_all(cache_scope)
