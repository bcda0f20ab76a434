from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import end_of_day, start_of_day


@dataclass(frozen=True)
class Punch:
    """Domain entity: one scan event read from the time-clock store."""

    employee_id: str
    employee_name: str
    event_date: date
    event_time: time
    scan_type: Optional[str]
    designation: Optional[str] = None
    division_id: Optional[str] = None
    division_name: Optional[str] = None
    section_id: Optional[str] = None
    section_name: Optional[str] = None
    sub_section_id: Optional[str] = None
    device_id: Optional[str] = None

    @property
    def event_at(self) -> datetime:
        return datetime.combine(self.event_date, self.event_time)


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def contains(self, moment: datetime) -> bool:
        """Inclusive start-of-day to end-of-day bound."""
        return start_of_day(self.start) <= moment <= end_of_day(self.end)

    def to_dict(self) -> dict:
        return {"from": self.start.isoformat(), "to": self.end.isoformat()}


@dataclass(frozen=True)
class OrgFilter:
    """Optional equality constraints; None means "no filter" for that level."""

    division_id: Optional[str] = None
    section_id: Optional[str] = None
    sub_section_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.division_id or self.section_id or self.sub_section_id)

    def matches(self, punch: Punch) -> bool:
        if self.division_id is not None and punch.division_id != self.division_id:
            return False
        if self.section_id is not None and punch.section_id != self.section_id:
            return False
        if self.sub_section_id is not None and punch.sub_section_id != self.sub_section_id:
            return False
        return True

    def describe(self) -> str:
        parts = []
        if self.division_id:
            parts.append(f"Division: {self.division_id}")
        if self.section_id:
            parts.append(f"Section: {self.section_id}")
        if self.sub_section_id:
            parts.append(f"Sub-Section: {self.sub_section_id}")
        return " | ".join(parts) if parts else "No filters applied"


@dataclass(frozen=True)
class Division:
    division_id: str
    division_name: str


@dataclass(frozen=True)
class Section:
    section_id: str
    section_name: str
    division_id: Optional[str] = None


@dataclass(frozen=True)
class SubSection:
    sub_section_id: str
    sub_section_name: str
    section_id: Optional[str] = None
