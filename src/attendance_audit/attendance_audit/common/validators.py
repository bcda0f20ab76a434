from __future__ import annotations

from datetime import date
from typing import Any, Optional

from ..core.constants import FILTER_SENTINELS
from ..core.exceptions import ValidationError
from .datetime_utils import coerce_date


def require_date(value: Any, field_name: str) -> date:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    try:
        return coerce_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an ISO date (YYYY-MM-DD)") from None


def require_date_range(start: date, end: date) -> None:
    if start > end:
        raise ValidationError("from_date must be on or before to_date")


def normalize_filter_id(value: Any) -> Optional[str]:
    """Collapse null, blank and sentinel values ("all", "none", ...) to None."""
    if value is None:
        return None
    text = str(value).strip()
    if text.lower() in FILTER_SENTINELS:
        return None
    return text
