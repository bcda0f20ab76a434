from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..common.params import employee_scoped
from ..core import constants


@dataclass(frozen=True)
class TtlPolicy:
    """Maps report shape and size to a time-to-live tier (seconds).

    Individual reports are narrow and volatile; group aggregates cost more to
    recompute, so larger ones are kept longer.
    """

    individual: int = constants.TTL_INDIVIDUAL
    group_small: int = constants.TTL_GROUP_SMALL
    group_medium: int = constants.TTL_GROUP_MEDIUM
    group_large: int = constants.TTL_GROUP_LARGE
    management: int = constants.TTL_MANAGEMENT
    small_max: int = constants.GROUP_SMALL_MAX
    medium_max: int = constants.GROUP_MEDIUM_MAX

    @classmethod
    def from_settings(cls, ttl_config: Optional[Mapping[str, Any]]) -> "TtlPolicy":
        cfg = dict(ttl_config or {})
        defaults = cls()
        return cls(
            individual=int(cfg.get("individual", defaults.individual)),
            group_small=int(cfg.get("group_small", defaults.group_small)),
            group_medium=int(cfg.get("group_medium", defaults.group_medium)),
            group_large=int(cfg.get("group_large", defaults.group_large)),
            management=int(cfg.get("management", defaults.management)),
        )

    def tier_for(self, params: Mapping[str, Any], result_size: int) -> str:
        if employee_scoped(params):
            return "individual"
        if result_size < self.small_max:
            return "group-small"
        if result_size <= self.medium_max:
            return "group-medium"
        return "group-large"

    def select_ttl(self, params: Mapping[str, Any], result_size: int) -> int:
        return {
            "individual": self.individual,
            "group-small": self.group_small,
            "group-medium": self.group_medium,
            "group-large": self.group_large,
        }[self.tier_for(params, result_size)]

    def management_ttl(self) -> int:
        return self.management
