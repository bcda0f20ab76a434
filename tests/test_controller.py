from __future__ import annotations

import csv
import io
from concurrent.futures import Executor, Future
from datetime import date, time

import pytest

from src.attendance_audit.attendance_audit.cache.client import InMemoryCacheClient
from src.attendance_audit.attendance_audit.cache.orchestrator import ReportCache
from src.attendance_audit.attendance_audit.cache.ttl import TtlPolicy
from src.attendance_audit.attendance_audit.container import build_services
from src.attendance_audit.attendance_audit.main import create_app
from src.attendance_audit.attendance_audit.punches.model import Division, Punch, Section


class InlineExecutor(Executor):
    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        future.set_result(fn(*args, **kwargs))
        return future


class FakePunchRepo:
    def __init__(self, rows):
        self.rows = rows
        self.fail = False

    def query_punches(self, *, start_date, end_date, org_filter, employee_id=None, limit=None):
        if self.fail:
            raise RuntimeError("store down")
        return list(self.rows)


class FakeHierarchyRepo:
    def __init__(self):
        self.division_calls = 0

    def list_divisions(self):
        self.division_calls += 1
        return [Division("D1", "Operations"), Division("D2", "Finance")]

    def list_sections(self, *, division_id=None):
        sections = [Section("S1", "Warehouse", "D1"), Section("S2", "Accounts", "D2")]
        return [s for s in sections if division_id is None or s.division_id == division_id]

    def list_subsections(self, *, section_id=None):
        return []


ROWS = [
    Punch("E1", "Ana", date(2026, 1, 26), time(8, 0), "IN", designation="Clerk", division_id="D1"),
    Punch("E2", "Bimal", date(2026, 1, 26), time(17, 0), "OUT", division_id="D1"),
]


@pytest.fixture
def deps(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    punches = FakePunchRepo(ROWS)
    hierarchy = FakeHierarchyRepo()
    container = build_services(
        punches_repo=punches,
        hierarchy_repo=hierarchy,
        report_cache=ReportCache(InMemoryCacheClient(), executor=InlineExecutor()),
        ttl_policy=TtlPolicy(),
    )
    app = create_app(container)
    return app.test_client(), punches, hierarchy


def test_audit_report_json(deps):
    client, _, _ = deps

    res = client.get("/api/reports/audit?from_date=2026-01-26&to_date=2026-01-26&grouping=designation")

    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] is True
    assert [g["groupName"] for g in body["data"]] == ["Clerk", "Unknown"]
    assert body["cached"] is False


def test_audit_report_accepts_json_body(deps):
    client, _, _ = deps

    res = client.post("/api/reports/audit", json={"startDate": "2026-01-26", "endDate": "2026-01-26"})

    assert res.status_code == 200
    assert res.get_json()["summary"]["totalEmployees"] == 2


def test_audit_report_validation_error(deps):
    client, _, _ = deps

    res = client.get("/api/reports/audit?from_date=2026-01-27&to_date=2026-01-26")

    assert res.status_code == 400
    assert res.get_json()["success"] is False


def test_audit_report_store_error(deps):
    client, punches, _ = deps
    punches.fail = True

    res = client.get("/api/reports/audit?from_date=2026-01-26&to_date=2026-01-26")

    assert res.status_code == 500
    assert res.get_json()["success"] is False


def test_audit_report_csv_export(deps):
    client, _, _ = deps

    res = client.get("/api/reports/audit?from_date=2026-01-26&to_date=2026-01-26&grouping=punch&format=csv")

    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    assert "attachment" in res.headers["Content-Disposition"]
    rows = list(csv.DictReader(io.StringIO(res.data.decode("utf-8-sig"))))
    assert [r["employeeId"] for r in rows] == ["E1", "E2"]
    assert {r["groupName"] for r in rows} == {"All Records"}


def test_cache_stats_and_invalidation_endpoints(deps):
    client, _, _ = deps
    client.get("/api/reports/audit?from_date=2026-01-26&to_date=2026-01-26&division_id=D1")
    cached = client.get("/api/reports/audit?from_date=2026-01-26&to_date=2026-01-26&divisionId=D1").get_json()
    assert cached["cached"] is True

    stats = client.get("/api/cache/stats").get_json()["data"]
    assert (stats["hits"], stats["misses"]) == (1, 1)

    res = client.post("/api/cache/invalidate/organization", json={"division_id": "D1"})
    assert res.get_json()["deleted"] == 1

    res = client.post("/api/cache/invalidate/organization", json={})
    assert res.status_code == 400

    res = client.post("/api/cache/invalidate/employee/E1?groups=0")
    assert res.get_json() == {"success": True, "deleted": 0, "employeeId": "E1"}

    res = client.post("/api/cache/invalidate?scope=bogus")
    assert res.status_code == 400

    assert client.post("/api/cache/stats/reset").get_json()["success"] is True
    assert client.get("/api/cache/stats").get_json()["data"]["hits"] == 0


def test_hierarchy_lookups_are_cached(deps):
    client, _, hierarchy = deps

    first = client.get("/api/hierarchy/divisions").get_json()
    client.get("/api/hierarchy/divisions")

    assert first["count"] == 2
    assert first["data"][0] == {"division_id": "D1", "division_name": "Operations"}
    assert hierarchy.division_calls == 1

    sections = client.get("/api/hierarchy/sections?divisionId=D2").get_json()
    assert [s["section_id"] for s in sections["data"]] == ["S2"]

    assert client.post("/api/cache/invalidate/hierarchy").get_json()["deleted"] == 2
    client.get("/api/hierarchy/divisions")
    assert hierarchy.division_calls == 2
