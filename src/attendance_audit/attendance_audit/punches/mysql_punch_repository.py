from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_date, normalize_mysql_time, str_or_none
from .model import Division, OrgFilter, Punch, Section, SubSection
from .repository import HierarchyRepository, PunchRepository


def _row_to_punch(r: Dict[str, Any]) -> Punch:
    return Punch(
        employee_id=str(r["employee_id"]),
        employee_name=r.get("employee_name") or "",
        event_date=normalize_mysql_date(r["event_date"]),
        event_time=normalize_mysql_time(r["event_time"]),
        scan_type=r.get("scan_type"),
        designation=str_or_none(r.get("designation")),
        division_id=str_or_none(r.get("division_id")),
        division_name=str_or_none(r.get("division_name")),
        section_id=str_or_none(r.get("section_id")),
        section_name=str_or_none(r.get("section_name")),
        sub_section_id=str_or_none(r.get("sub_section_id")),
        device_id=str_or_none(r.get("device_id")),
    )


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def query_punches(
        self,
        *,
        start_date: date,
        end_date: date,
        org_filter: OrgFilter,
        employee_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Punch]:
        clauses = ["p.event_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if org_filter.division_id is not None:
            clauses.append("p.division_id=%s")
            params.append(org_filter.division_id)
        if org_filter.section_id is not None:
            clauses.append("p.section_id=%s")
            params.append(org_filter.section_id)
        if org_filter.sub_section_id is not None:
            clauses.append("p.sub_section_id=%s")
            params.append(org_filter.sub_section_id)
        if employee_id is not None:
            clauses.append("p.employee_id=%s")
            params.append(employee_id)

        where = " AND ".join(clauses)
        limit_sql = ""
        if limit is not None:
            limit_sql = "LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    p.employee_id, p.employee_name, p.designation,
                    p.division_id, p.division_name,
                    p.section_id, p.section_name, p.sub_section_id,
                    p.event_date, p.event_time, p.scan_type, p.device_id
                FROM attendance_punches p
                WHERE {where}
                ORDER BY p.employee_name ASC, p.event_date ASC, p.event_time ASC
                {limit_sql}
                """,
                tuple(params),
            )
            return [_row_to_punch(r) for r in fetchall(cur)]


class MySQLHierarchyRepository(HierarchyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_divisions(self) -> Sequence[Division]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT division_id, division_name FROM divisions ORDER BY division_name ASC")
            return [
                Division(division_id=str(r["division_id"]), division_name=r["division_name"])
                for r in fetchall(cur)
            ]

    def list_sections(self, *, division_id: Optional[str] = None) -> Sequence[Section]:
        sql = "SELECT section_id, section_name, division_id FROM sections"
        params: tuple = ()
        if division_id is not None:
            sql += " WHERE division_id=%s"
            params = (division_id,)
        sql += " ORDER BY section_name ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [
                Section(
                    section_id=str(r["section_id"]),
                    section_name=r["section_name"],
                    division_id=str_or_none(r.get("division_id")),
                )
                for r in fetchall(cur)
            ]

    def list_subsections(self, *, section_id: Optional[str] = None) -> Sequence[SubSection]:
        sql = "SELECT sub_section_id, sub_section_name, section_id FROM sub_sections"
        params: tuple = ()
        if section_id is not None:
            sql += " WHERE section_id=%s"
            params = (section_id,)
        sql += " ORDER BY sub_section_name ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [
                SubSection(
                    sub_section_id=str(r["sub_section_id"]),
                    sub_section_name=r["sub_section_name"],
                    section_id=str_or_none(r.get("section_id")),
                )
                for r in fetchall(cur)
            ]
