"""Session classification for raw time-clock punches.

A session is every punch of one employee on one date. Completeness only
depends on whether at least one IN and at least one OUT are present; repeated
same-type scans never change the outcome.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import IssueType, ScanType, SessionState, Severity
from ..punches.model import Punch
from .model import EmployeeDaySession, SessionClassification

IN_LABELS = frozenset({"IN", "I", "ON"})
OUT_LABELS = frozenset({"OUT", "O", "OFF"})

ISSUE_SEVERITY = {
    IssueType.CHECK_IN_ONLY: Severity.HIGH,
    IssueType.CHECK_OUT_ONLY: Severity.MEDIUM,
    IssueType.UNKNOWN: Severity.LOW,
}


def normalize_scan_type(raw: Optional[str]) -> ScanType:
    if raw is None:
        return ScanType.UNKNOWN
    label = str(raw).strip().upper()
    if label in IN_LABELS:
        return ScanType.IN
    if label in OUT_LABELS:
        return ScanType.OUT
    return ScanType.UNKNOWN


def severity_for(issue_type: IssueType) -> Severity:
    return ISSUE_SEVERITY[issue_type]


def _classify_counts(in_count: int, out_count: int) -> SessionClassification:
    if in_count >= 1 and out_count >= 1:
        return SessionClassification(state=SessionState.COMPLETE)
    if in_count >= 1:
        return SessionClassification(
            state=SessionState.INCOMPLETE,
            issue_type=IssueType.CHECK_IN_ONLY,
            severity=severity_for(IssueType.CHECK_IN_ONLY),
        )
    if out_count >= 1:
        return SessionClassification(
            state=SessionState.INCOMPLETE,
            issue_type=IssueType.CHECK_OUT_ONLY,
            severity=severity_for(IssueType.CHECK_OUT_ONLY),
        )
    return SessionClassification(
        state=SessionState.UNKNOWN,
        issue_type=IssueType.UNKNOWN,
        severity=severity_for(IssueType.UNKNOWN),
    )


def classify(punches: Iterable[Punch]) -> SessionClassification:
    """Classify the punches of one employee on one date. Pure."""
    in_count = 0
    out_count = 0
    for p in punches:
        kind = normalize_scan_type(p.scan_type)
        if kind == ScanType.IN:
            in_count += 1
        elif kind == ScanType.OUT:
            out_count += 1
    return _classify_counts(in_count, out_count)


def build_session(punches: Sequence[Punch]) -> EmployeeDaySession:
    if not punches:
        raise ValueError("a session needs at least one punch")

    ordered = tuple(sorted(punches, key=lambda p: p.event_time))
    ins = [p.event_time for p in ordered if normalize_scan_type(p.scan_type) == ScanType.IN]
    outs = [p.event_time for p in ordered if normalize_scan_type(p.scan_type) == ScanType.OUT]

    return EmployeeDaySession(
        employee_id=ordered[0].employee_id,
        work_date=ordered[0].event_date,
        punches=ordered,
        in_count=len(ins),
        out_count=len(outs),
        first_in=ins[0] if ins else None,
        last_out=outs[-1] if outs else None,
        classification=_classify_counts(len(ins), len(outs)),
    )


def sessionize(rows: Iterable[Punch]) -> dict[tuple[str, date], EmployeeDaySession]:
    """Partition rows by (employee_id, event_date) and classify each session."""
    buckets: dict[tuple[str, date], list[Punch]] = {}
    for p in rows:
        buckets.setdefault((p.employee_id, p.event_date), []).append(p)
    return {key: build_session(items) for key, items in buckets.items()}
