from __future__ import annotations

from dataclasses import asdict
from typing import Any, Callable, Optional

from ..cache.keys import management_key, management_pattern
from ..cache.orchestrator import ReportCache
from ..cache.ttl import TtlPolicy
from ..common.validators import normalize_filter_id
from ..punches.repository import HierarchyRepository


class OrganizationLookupService:
    """Division / section / subsection lookups behind the management TTL tier."""

    def __init__(
        self,
        hierarchy: HierarchyRepository,
        cache: Optional[ReportCache] = None,
        *,
        ttl_policy: Optional[TtlPolicy] = None,
    ):
        self._hierarchy = hierarchy
        self._cache = cache
        self._ttl = ttl_policy or TtlPolicy()

    def _cached(self, key: str, load: Callable[[], list[dict]]) -> list[dict]:
        if self._cache is None:
            return load()
        value, _ = self._cache.get_or_compute(
            key,
            load,
            ttl_for=lambda _: self._ttl.management_ttl(),
            tier_for=lambda _: "management",
        )
        return value

    def list_divisions(self) -> list[dict]:
        return self._cached(
            management_key("divisions", "all"),
            lambda: [asdict(d) for d in self._hierarchy.list_divisions()],
        )

    def list_sections(self, division_id: Any = None) -> list[dict]:
        division_id = normalize_filter_id(division_id)
        return self._cached(
            management_key("sections", f"div:{division_id}" if division_id else "all"),
            lambda: [asdict(s) for s in self._hierarchy.list_sections(division_id=division_id)],
        )

    def list_subsections(self, section_id: Any = None) -> list[dict]:
        section_id = normalize_filter_id(section_id)
        return self._cached(
            management_key("subsections", f"sec:{section_id}" if section_id else "all"),
            lambda: [asdict(s) for s in self._hierarchy.list_subsections(section_id=section_id)],
        )

    def invalidate(self) -> int:
        if self._cache is None:
            return 0
        return self._cache.invalidate(management_pattern())
