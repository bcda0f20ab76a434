from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_PUNCH_ROW_LIMIT
from ..core.enums import Grouping
from .strategies.base import GroupingStrategy
from .strategies.designation_strategy import DesignationStrategy
from .strategies.employee_summary_strategy import EmployeeSummaryStrategy
from .strategies.punch_strategy import PunchStrategy


@dataclass
class GroupingStrategyFactory:
    """Factory Pattern: map the explicit grouping choice to its strategy."""

    row_limit: int = DEFAULT_PUNCH_ROW_LIMIT

    def for_grouping(self, grouping: Grouping) -> GroupingStrategy:
        if grouping == Grouping.PUNCH:
            return PunchStrategy(row_limit=self.row_limit)
        if grouping == Grouping.DESIGNATION:
            return DesignationStrategy()
        if grouping == Grouping.NONE:
            return EmployeeSummaryStrategy()
        raise ValueError(f"Unsupported grouping: {grouping!r}")
