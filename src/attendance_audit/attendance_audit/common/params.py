from __future__ import annotations

from typing import Any, Mapping, Optional

from .validators import normalize_filter_id

# canonical name -> accepted spellings, first match wins
PARAM_ALIASES: dict[str, tuple[str, ...]] = {
    "from_date": ("from_date", "startDate", "start_date", "from"),
    "to_date": ("to_date", "endDate", "end_date", "to"),
    "grouping": ("grouping",),
    "division_id": ("division_id", "divisionId", "division"),
    "section_id": ("section_id", "sectionId", "section"),
    "sub_section_id": ("sub_section_id", "subsection_id", "subSectionId", "subsectionId", "sub_section"),
    "employee_id": ("employee_id", "employeeId", "emp_id"),
    "format": ("format",),
}

_FILTER_PARAMS = ("division_id", "section_id", "sub_section_id", "employee_id")


def first_present(params: Mapping[str, Any], names: tuple[str, ...]) -> Any:
    for name in names:
        value = params.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def canonical_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Collapse alias spellings and "no filter" sentinels into one canonical dict.

    Dates and grouping are returned untouched (validation happens later);
    org and employee filters are stripped strings or None.
    """

    out: dict[str, Any] = {name: first_present(params, aliases) for name, aliases in PARAM_ALIASES.items()}
    for name in _FILTER_PARAMS:
        out[name] = normalize_filter_id(out[name])

    grouping = out["grouping"]
    out["grouping"] = str(grouping).strip().lower() if grouping is not None else None

    fmt = out["format"]
    out["format"] = str(fmt).strip().lower() if fmt is not None else None
    return out


def employee_scoped(params: Mapping[str, Any]) -> Optional[str]:
    return normalize_filter_id(first_present(params, PARAM_ALIASES["employee_id"]))
