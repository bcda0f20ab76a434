"""Deterministic cache keys for attendance reports.

A key is an ordered list of segments joined with ``:``::

    attendance-report:individual:emp:E1:2026-01-01:2026-01-31
    attendance-report:group:div:D1:sec:S2:2026-01-01:2026-01-31:grp:punch:fmt:csv

Parameter aliases (``startDate``/``from_date`` ...) and "no filter" sentinels
(``"all"``, ``""``, None) are normalized first, so logically equivalent
filters always render the same key.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import coerce_date
from ..common.params import canonical_params
from ..core.constants import (
    DEFAULT_REPORT_FORMAT,
    KEY_DELIMITER,
    MANAGEMENT_KEY_NAMESPACE,
    REPORT_KEY_NAMESPACE,
)
from ..core.enums import CacheScope, Grouping

_GLOB_SPECIAL = set("*?[]\\")


def glob_escape(value: str) -> str:
    """Escape a literal for a Redis-style glob pattern."""
    return "".join(f"\\{ch}" if ch in _GLOB_SPECIAL else ch for ch in value)


def _date_segment(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return coerce_date(value).isoformat()
    text = str(value).strip()
    try:
        return coerce_date(text).isoformat()
    except ValueError:
        return text


@dataclass(frozen=True)
class ReportCacheKey:
    start: str
    end: str
    employee_id: Optional[str] = None
    division_id: Optional[str] = None
    section_id: Optional[str] = None
    sub_section_id: Optional[str] = None
    grouping: Optional[str] = None
    fmt: Optional[str] = None
    namespace: str = REPORT_KEY_NAMESPACE

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "ReportCacheKey":
        p = canonical_params(params)
        employee_id = p["employee_id"]
        return cls(
            start=_date_segment(p["from_date"]),
            end=_date_segment(p["to_date"]),
            employee_id=employee_id,
            division_id=None if employee_id else p["division_id"],
            section_id=None if employee_id else p["section_id"],
            sub_section_id=None if employee_id else p["sub_section_id"],
            grouping=p["grouping"],
            fmt=p["format"],
        )

    @property
    def is_individual(self) -> bool:
        return self.employee_id is not None

    def segments(self) -> list[str]:
        segs = [self.namespace]
        if self.employee_id is not None:
            segs += [CacheScope.INDIVIDUAL.value, f"emp{KEY_DELIMITER}{self.employee_id}"]
        else:
            segs.append(CacheScope.GROUP.value)
            for tag, value in (("div", self.division_id), ("sec", self.section_id), ("subsec", self.sub_section_id)):
                if value is not None:
                    segs.append(f"{tag}{KEY_DELIMITER}{value}")

        segs.append(f"{self.start}{KEY_DELIMITER}{self.end}")

        if self.grouping and self.grouping != Grouping.NONE.value:
            segs.append(f"grp{KEY_DELIMITER}{self.grouping}")
        if self.fmt and self.fmt != DEFAULT_REPORT_FORMAT:
            segs.append(f"fmt{KEY_DELIMITER}{self.fmt}")
        return segs

    def render(self) -> str:
        return KEY_DELIMITER.join(self.segments())


def derive_key(params: Mapping[str, Any]) -> str:
    return ReportCacheKey.from_params(params).render()


def scope_pattern(scope: CacheScope | str) -> str:
    scope = CacheScope(scope)
    if scope == CacheScope.ALL:
        return f"{REPORT_KEY_NAMESPACE}{KEY_DELIMITER}*"
    return f"{REPORT_KEY_NAMESPACE}{KEY_DELIMITER}{scope.value}{KEY_DELIMITER}*"


def employee_pattern(employee_id: str) -> str:
    return KEY_DELIMITER.join(
        [REPORT_KEY_NAMESPACE, CacheScope.INDIVIDUAL.value, "emp", glob_escape(str(employee_id)), "*"]
    )


def organization_pattern(
    division_id: Optional[str] = None,
    section_id: Optional[str] = None,
    subsection_id: Optional[str] = None,
) -> str:
    """Glob for group keys carrying every given org segment.

    Each segment is anchored by delimiters on both sides, so ``div:D1`` never
    matches ``div:D10`` and ``sec:S1`` never matches ``subsec:S1``.
    """

    pattern = f"{REPORT_KEY_NAMESPACE}{KEY_DELIMITER}{CacheScope.GROUP.value}"
    for tag, value in (("div", division_id), ("sec", section_id), ("subsec", subsection_id)):
        if value:
            pattern += f"*{KEY_DELIMITER}{tag}{KEY_DELIMITER}{glob_escape(str(value))}"
    return pattern + f"{KEY_DELIMITER}*"


def management_key(*parts: str) -> str:
    return KEY_DELIMITER.join([MANAGEMENT_KEY_NAMESPACE, *parts])


def management_pattern() -> str:
    return f"{MANAGEMENT_KEY_NAMESPACE}{KEY_DELIMITER}*"
