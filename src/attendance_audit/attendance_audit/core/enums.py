from __future__ import annotations

from enum import Enum


class ScanType(str, Enum):
    """Loại quét đã chuẩn hoá từ nhãn thô của máy chấm công."""

    IN = "IN"
    OUT = "OUT"
    UNKNOWN = "UNKNOWN"


class SessionState(str, Enum):
    COMPLETE = "COMPLETE"
    INCOMPLETE = "INCOMPLETE"
    UNKNOWN = "UNKNOWN"


class IssueType(str, Enum):
    """Loại lỗi của một phiên chấm công chưa đầy đủ."""

    CHECK_IN_ONLY = "CHECK_IN_ONLY"
    CHECK_OUT_ONLY = "CHECK_OUT_ONLY"
    UNKNOWN = "UNKNOWN"


class Severity(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Grouping(str, Enum):
    """Chiến lược gom nhóm báo cáo (chọn tường minh, không suy luận)."""

    PUNCH = "punch"
    DESIGNATION = "designation"
    NONE = "none"


class CacheScope(str, Enum):
    INDIVIDUAL = "individual"
    GROUP = "group"
    ALL = "all"
