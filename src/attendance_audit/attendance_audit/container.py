from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .cache.client import CacheClient, build_cache_client
from .cache.orchestrator import ReportCache
from .cache.ttl import TtlPolicy
from .core.constants import DEFAULT_PUNCH_ROW_LIMIT
from .database.connection import DBConfig, DatabaseConnection
from .organization.service import OrganizationLookupService
from .punches.mysql_punch_repository import MySQLHierarchyRepository, MySQLPunchRepository
from .punches.repository import HierarchyRepository, PunchRepository
from .reports.aggregator import ReportAggregator
from .reports.factory import GroupingStrategyFactory
from .reports.service import AttendanceReportService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    punches_repo: PunchRepository
    hierarchy_repo: HierarchyRepository
    report_cache: Optional[ReportCache]

    report_service: AttendanceReportService
    organization_service: OrganizationLookupService


def build_services(
    *,
    punches_repo: PunchRepository,
    hierarchy_repo: HierarchyRepository,
    report_cache: Optional[ReportCache],
    ttl_policy: TtlPolicy,
    row_limit: int = DEFAULT_PUNCH_ROW_LIMIT,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    aggregator = ReportAggregator(factory=GroupingStrategyFactory(row_limit=row_limit))
    report_service = AttendanceReportService(
        punches_repo,
        report_cache,
        aggregator=aggregator,
        ttl_policy=ttl_policy,
        row_limit=row_limit,
    )
    organization_service = OrganizationLookupService(hierarchy_repo, report_cache, ttl_policy=ttl_policy)

    return Container(
        conn=conn,
        punches_repo=punches_repo,
        hierarchy_repo=hierarchy_repo,
        report_cache=report_cache,
        report_service=report_service,
        organization_service=organization_service,
    )


def build_container(
    *,
    db_config: Mapping[str, Any],
    redis_config: Optional[Mapping[str, Any]] = None,
    cache_client: Optional[CacheClient] = None,
    ttl_config: Optional[Mapping[str, Any]] = None,
    row_limit: int = DEFAULT_PUNCH_ROW_LIMIT,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    client = cache_client or build_cache_client(redis_config)

    return build_services(
        punches_repo=MySQLPunchRepository(conn),
        hierarchy_repo=MySQLHierarchyRepository(conn),
        report_cache=ReportCache(client),
        ttl_policy=TtlPolicy.from_settings(ttl_config),
        row_limit=row_limit,
        conn=conn,
    )
