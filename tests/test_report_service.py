from __future__ import annotations

from concurrent.futures import Executor, Future
from datetime import date, time
from unittest import mock

import pytest
import redis

from src.attendance_audit.attendance_audit.cache.client import InMemoryCacheClient, RedisCacheClient
from src.attendance_audit.attendance_audit.cache.orchestrator import ReportCache
from src.attendance_audit.attendance_audit.core.exceptions import CacheError, ValidationError
from src.attendance_audit.attendance_audit.punches.model import Punch
from src.attendance_audit.attendance_audit.reports.service import AttendanceReportService


class FakePunchRepo:
    def __init__(self, rows):
        self._rows = rows
        self.calls = []

    def query_punches(self, *, start_date, end_date, org_filter, employee_id=None, limit=None):
        self.calls.append(
            {
                "start_date": start_date,
                "end_date": end_date,
                "org_filter": org_filter,
                "employee_id": employee_id,
                "limit": limit,
            }
        )
        return list(self._rows)


class LimitingPunchRepo(FakePunchRepo):
    """Honours ``limit`` the way the SQL query does."""

    def query_punches(self, **kwargs):
        rows = super().query_punches(**kwargs)
        limit = kwargs.get("limit")
        return rows if limit is None else rows[:limit]


class BrokenPunchRepo:
    def query_punches(self, **kwargs):
        raise ConnectionError("punch store unavailable")


class InlineExecutor(Executor):
    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        future.set_result(fn(*args, **kwargs))
        return future


class FailingCacheClient:
    def get(self, key):
        raise CacheError("timeout")

    def set(self, key, value, ttl):
        raise CacheError("timeout")

    def delete(self, *keys):
        raise CacheError("timeout")

    def scan_keys(self, pattern):
        raise CacheError("timeout")

    def ping(self):
        return False


def _punch(emp, scan_type, *, at=time(8, 0), day=date(2026, 1, 26), designation=None, div=None):
    return Punch(
        employee_id=emp,
        employee_name=f"Employee {emp}",
        event_date=day,
        event_time=at,
        scan_type=scan_type,
        designation=designation,
        division_id=div,
    )


SINGLE_IN = [_punch("E1", "IN")]
PARAMS = {"from_date": "2026-01-26", "to_date": "2026-01-26", "grouping": "none"}


def _service(rows, client=None, **kwargs):
    repo = FakePunchRepo(rows)
    cache = ReportCache(client or InMemoryCacheClient(), executor=InlineExecutor())
    return AttendanceReportService(repo, cache, **kwargs), repo, cache


def test_single_in_punch_end_to_end():
    svc, _, _ = _service(SINGLE_IN)

    payload = svc.generate_report(PARAMS)

    assert [g["groupName"] for g in payload["data"]] == ["All Employees"]
    [member] = payload["data"][0]["employees"]
    assert member["employeeId"] == "E1"
    assert member["issueCount"] == 1
    assert payload["summary"]["totalEmployees"] == 1
    assert payload["dateRange"] == {"from": "2026-01-26", "to": "2026-01-26"}
    assert payload["cached"] is False
    assert payload["cacheKey"] == "attendance-report:group:2026-01-26:2026-01-26"


def test_second_request_is_served_from_cache():
    svc, repo, _ = _service(SINGLE_IN)

    first = svc.generate_report(PARAMS)
    second = svc.generate_report({"startDate": "2026-01-26", "endDate": "2026-01-26", "division": "all"})

    assert second["cached"] is True
    assert len(repo.calls) == 1
    assert {k: v for k, v in second.items() if k != "cached"} == {k: v for k, v in first.items() if k != "cached"}


def test_failing_cache_matches_no_cache_path():
    rows = [_punch("E1", "IN"), _punch("E1", "OUT", at=time(17, 0)), _punch("E2", "OFF", designation="Clerk")]
    params = {**PARAMS, "grouping": "designation"}

    failing, _, _ = _service(rows, FailingCacheClient())
    uncached = AttendanceReportService(FakePunchRepo(rows))

    with_failures = failing.generate_report(params)
    baseline = uncached.generate_report(params)

    assert with_failures["data"] == baseline["data"]
    assert with_failures["summary"] == baseline["summary"]
    assert with_failures["cached"] is False


def test_store_errors_propagate():
    svc = AttendanceReportService(BrokenPunchRepo())

    with pytest.raises(ConnectionError):
        svc.generate_report(PARAMS)


def test_row_limit_is_only_pushed_down_for_punch_grouping():
    svc, repo, _ = _service(SINGLE_IN, row_limit=25)

    svc.generate_report({**PARAMS, "grouping": "punch"})
    svc.generate_report({**PARAMS, "grouping": "designation"})

    assert [c["limit"] for c in repo.calls] == [26, None]


def test_individual_report_forwards_employee_and_drops_other_rows():
    rows = [_punch("E1", "IN"), _punch("E2", "IN")]
    svc, repo, _ = _service(rows)

    payload = svc.generate_report({**PARAMS, "employeeId": "E1", "division_id": "D9"})

    assert repo.calls[0]["employee_id"] == "E1"
    assert repo.calls[0]["org_filter"].is_empty
    assert [m["employeeId"] for m in payload["data"][0]["employees"]] == ["E1"]
    assert payload["cacheKey"].startswith("attendance-report:individual:emp:E1:")


def test_empty_result_is_not_an_error():
    svc, _, _ = _service([])

    payload = svc.generate_report({**PARAMS, "grouping": "designation"})

    assert payload["data"] == []
    assert payload["summary"]["totalGroups"] == 0


def test_invalid_dates_raise_before_touching_the_store():
    svc, repo, _ = _service(SINGLE_IN)

    with pytest.raises(ValidationError):
        svc.generate_report({"from_date": "2026-01-27", "to_date": "2026-01-26"})
    assert repo.calls == []


def test_invalidation_hooks():
    rows = [_punch("E1", "IN", div="D1")]
    svc, repo, _ = _service(rows)
    svc.generate_report({**PARAMS, "division_id": "D1"})
    svc.generate_report({**PARAMS, "employee_id": "E1"})

    assert svc.invalidate_organization("D1") == 1
    assert svc.invalidate_employee("E1", include_groups=False) == 1
    assert svc.invalidate_all("all") == 0

    with pytest.raises(ValidationError):
        svc.invalidate_employee("  ")
    with pytest.raises(ValidationError):
        svc.invalidate_organization("all", None, "")
    with pytest.raises(ValidationError):
        svc.invalidate_all("everything")


def test_invalidation_without_cache_is_a_no_op():
    svc = AttendanceReportService(FakePunchRepo([]))

    assert svc.invalidate_all() == 0
    assert svc.invalidate_employee("E1") == 0


def test_punch_truncation_is_flagged_when_the_store_applies_the_limit():
    rows = [_punch(f"E{i}", "IN", at=time(8, i)) for i in range(3)]
    svc = AttendanceReportService(LimitingPunchRepo(rows), row_limit=2)

    payload = svc.generate_report({**PARAMS, "grouping": "punch"})

    assert payload["summary"]["totalRecords"] == 2
    assert payload["summary"]["truncated"] is True
    assert len(payload["data"][0]["employees"]) == 2


def test_punch_report_at_exactly_the_limit_is_not_truncated():
    rows = [_punch(f"E{i}", "IN", at=time(8, i)) for i in range(2)]
    svc = AttendanceReportService(LimitingPunchRepo(rows), row_limit=2)

    payload = svc.generate_report({**PARAMS, "grouping": "punch"})

    assert payload["summary"]["totalRecords"] == 2
    assert payload["summary"]["truncated"] is False


def test_undecodable_redis_value_is_a_cache_miss():
    fake_redis = mock.Mock(spec=redis.Redis)
    fake_redis.get.side_effect = UnicodeDecodeError("utf-8", b"\xff\xfe", 0, 1, "invalid start byte")
    svc, repo, cache = _service(SINGLE_IN, RedisCacheClient(fake_redis))

    payload = svc.generate_report(PARAMS)

    assert payload["cached"] is False
    assert payload["summary"]["totalEmployees"] == 1
    assert len(repo.calls) == 1
    assert cache.stats()["errors"] >= 1
