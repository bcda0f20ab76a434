"""Example: build an audit report through the service layer (no Flask).

Controllers stay thin; the report pipeline and cache live in services.
"""

import importlib
import json

from config import get_settings_module

from src.attendance_audit.attendance_audit.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=settings.DB_CONFIG,
        redis_config=settings.REDIS_CONFIG,
        ttl_config=settings.CACHE_TTL,
        row_limit=settings.PUNCH_ROW_LIMIT,
    )
    report = container.report_service.generate_report(
        {"from_date": "2026-01-01", "to_date": "2026-01-31", "grouping": "designation"}
    )
    print(json.dumps(report["summary"], indent=2))
    print("cached:", report["cached"], "key:", report["cacheKey"])
    container.report_cache.shutdown()


if __name__ == "__main__":
    main()
