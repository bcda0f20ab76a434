"""Cache-aside orchestration for attendance reports.

Request flow is ``MISS -> COMPUTE -> STORE(async) -> RETURN`` or
``HIT -> RETURN``. The cache only ever accelerates: any backend failure is
logged, counted and treated as a miss (reads) or a no-op (writes). Errors
raised by ``compute`` itself propagate unchanged.

Concurrent misses on the same key both compute and both write; the last
write wins.
"""

from __future__ import annotations

import json
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ..common.logging_config import get_logger
from ..core.constants import MAX_PENDING_CACHE_WRITES
from ..core.enums import CacheScope
from ..core.exceptions import CacheError
from .client import CacheClient
from .keys import employee_pattern, organization_pattern, scope_pattern
from .stats import CacheStats

logger = get_logger("cache")


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0


def _dropped_write() -> Future:
    future: Future = Future()
    future.set_result(False)
    return future


class ReportCache:
    def __init__(
        self,
        client: CacheClient,
        *,
        executor: Optional[Executor] = None,
        stats: Optional[CacheStats] = None,
        max_pending_writes: int = MAX_PENDING_CACHE_WRITES,
    ):
        self._client = client
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="report-cache")
        self._stats = stats or CacheStats()
        self._write_slots = threading.BoundedSemaphore(max(1, int(max_pending_writes)))

    # -- primitives ---------------------------------------------------------

    def get(self, key: str) -> Any:
        """Cached payload, or None on miss / backend error / undecodable entry."""
        started = time.perf_counter()
        try:
            raw = self._client.get(key)
        except CacheError as e:
            self._stats.record_error()
            self._stats.record_get(hit=False, elapsed_ms=_elapsed_ms(started))
            logger.warning("cache get failed, treating as miss: %s", e)
            return None

        if raw is None:
            self._stats.record_get(hit=False, elapsed_ms=_elapsed_ms(started))
            logger.debug("cache miss %s", key)
            return None

        try:
            entry = json.loads(raw)
        except (TypeError, ValueError):
            self._stats.record_error()
            self._stats.record_get(hit=False, elapsed_ms=_elapsed_ms(started))
            logger.warning("cache entry %s is not valid JSON, treating as miss", key)
            return None

        self._stats.record_get(hit=True, elapsed_ms=_elapsed_ms(started))
        logger.debug("cache hit %s", key)
        if isinstance(entry, dict) and "payload" in entry:
            return entry["payload"]
        return entry

    def set(self, key: str, value: Any, ttl: int, *, tier: Optional[str] = None) -> bool:
        started = time.perf_counter()
        envelope = {
            "payload": value,
            "meta": {
                "ttl": int(ttl),
                "tier": tier,
                "cachedAt": datetime.now(timezone.utc).isoformat(),
            },
        }
        try:
            serialized = json.dumps(envelope, default=str)
        except (TypeError, ValueError) as e:
            self._stats.record_error()
            logger.warning("cache set skipped, payload for %s is not serializable: %s", key, e)
            return False

        try:
            self._client.set(key, serialized, int(ttl))
        except CacheError as e:
            self._stats.record_error()
            logger.warning("cache set failed for %s: %s", key, e)
            return False

        self._stats.record_set(elapsed_ms=_elapsed_ms(started))
        logger.info("cache set %s (ttl=%ss, tier=%s, %d bytes)", key, ttl, tier, len(serialized))
        return True

    def set_async(self, key: str, value: Any, ttl: int, *, tier: Optional[str] = None) -> Future:
        """Fire-and-forget write; the returned future is for tests and shutdown only.

        When the backlog is full the write is dropped (the next miss retries it).
        """
        if not self._write_slots.acquire(blocking=False):
            self._stats.record_error()
            logger.warning("cache write backlog full, dropping write for %s", key)
            return _dropped_write()

        try:
            future = self._executor.submit(self.set, key, value, ttl, tier=tier)
        except RuntimeError:
            self._write_slots.release()
            logger.warning("cache executor is shut down, dropping write for %s", key)
            return _dropped_write()
        future.add_done_callback(self._log_write_failure)
        return future

    def _log_write_failure(self, future: Future) -> None:
        self._write_slots.release()
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._stats.record_error()
            logger.error("detached cache write crashed", exc_info=(type(exc), exc, exc.__traceback__))

    def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Any],
        *,
        ttl_for: Callable[[Any], int],
        tier_for: Optional[Callable[[Any], str]] = None,
    ) -> tuple[Any, bool]:
        cached = self.get(key)
        if cached is not None:
            return cached, True

        value = compute()
        self.set_async(key, value, ttl_for(value), tier=tier_for(value) if tier_for else None)
        return value, False

    # -- invalidation -------------------------------------------------------

    def invalidate(self, pattern: str) -> int:
        try:
            keys = list(self._client.scan_keys(pattern))
            removed = self._client.delete(*keys) if keys else 0
        except CacheError as e:
            self._stats.record_error()
            logger.warning("cache invalidation failed for %s: %s", pattern, e)
            return 0

        self._stats.record_deletes(removed)
        logger.info("cache invalidated %s (%d keys)", pattern, removed)
        return removed

    def invalidate_employee(self, employee_id: str, *, include_groups: bool = True) -> int:
        """Drop one employee's individual reports.

        Group aggregates may contain the employee and cannot be surgically
        filtered, so by default every group report goes too. Pass
        ``include_groups=False`` for employee-local events.
        """

        removed = self.invalidate(employee_pattern(employee_id))
        if include_groups:
            removed += self.invalidate(scope_pattern(CacheScope.GROUP))
        return removed

    def invalidate_organization(
        self,
        division_id: Optional[str],
        section_id: Optional[str] = None,
        subsection_id: Optional[str] = None,
    ) -> int:
        return self.invalidate(organization_pattern(division_id, section_id, subsection_id))

    def invalidate_all(self, scope: CacheScope | str = CacheScope.ALL) -> int:
        return self.invalidate(scope_pattern(scope))

    # -- observability ------------------------------------------------------

    def stats(self) -> dict:
        out = self._stats.snapshot()
        out["connected"] = self._client.ping()
        return out

    def reset_stats(self) -> None:
        self._stats.reset()
        logger.info("cache statistics reset")

    def shutdown(self, *, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
