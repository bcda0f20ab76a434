"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PUNCH_ROW_LIMIT = 50_000

# Cache TTL tiers (seconds)
TTL_INDIVIDUAL = 300
TTL_GROUP_SMALL = 600
TTL_GROUP_MEDIUM = 900
TTL_GROUP_LARGE = 1200
TTL_MANAGEMENT = 600

# Group size thresholds (members) for TTL tiers
GROUP_SMALL_MAX = 100
GROUP_MEDIUM_MAX = 500

DEFAULT_CACHE_TIMEOUT_SECONDS = 2.0
MAX_PENDING_CACHE_WRITES = 32

REPORT_KEY_NAMESPACE = "attendance-report"
MANAGEMENT_KEY_NAMESPACE = "management"
KEY_DELIMITER = ":"
DEFAULT_REPORT_FORMAT = "json"

# Filter values meaning "no filter"
FILTER_SENTINELS = frozenset({"", "all", "none", "undefined", "null"})

GROUP_ALL_RECORDS = "All Records"
GROUP_ALL_EMPLOYEES = "All Employees"
UNKNOWN_DESIGNATION = "Unknown"
