from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Division, OrgFilter, Punch, Section, SubSection


class PunchRepository(Protocol):
    def query_punches(
        self,
        *,
        start_date: date,
        end_date: date,
        org_filter: OrgFilter,
        employee_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Punch]:
        """Raw punches in the inclusive date range; no ordering guarantee."""

        raise NotImplementedError


class HierarchyRepository(Protocol):
    def list_divisions(self) -> Sequence[Division]:
        raise NotImplementedError

    def list_sections(self, *, division_id: Optional[str] = None) -> Sequence[Section]:
        raise NotImplementedError

    def list_subsections(self, *, section_id: Optional[str] = None) -> Sequence[SubSection]:
        raise NotImplementedError
