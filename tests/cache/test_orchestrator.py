import json
import threading
from concurrent.futures import Executor, Future

import pytest

from src.attendance_audit.attendance_audit.cache.client import InMemoryCacheClient
from src.attendance_audit.attendance_audit.cache.keys import derive_key
from src.attendance_audit.attendance_audit.cache.orchestrator import ReportCache
from src.attendance_audit.attendance_audit.cache.stats import CacheStats
from src.attendance_audit.attendance_audit.core.enums import CacheScope
from src.attendance_audit.attendance_audit.core.exceptions import CacheError


class InlineExecutor(Executor):
    """Runs submitted work immediately so async writes are visible to asserts."""

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as e:
            future.set_exception(e)
        return future


class FailingCacheClient:
    def get(self, key):
        raise CacheError("connection refused")

    def set(self, key, value, ttl):
        raise CacheError("connection refused")

    def delete(self, *keys):
        raise CacheError("connection refused")

    def scan_keys(self, pattern):
        raise CacheError("connection refused")

    def ping(self):
        return False


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _cache(client=None):
    return ReportCache(client or InMemoryCacheClient(), executor=InlineExecutor())


def _key(**params):
    return derive_key({"from_date": "2026-01-01", "to_date": "2026-01-31", **params})


def test_get_or_compute_miss_then_hit():
    cache = _cache()
    calls = []

    def compute():
        calls.append(1)
        return {"data": [], "summary": {"totalGroups": 0}}

    first, hit1 = cache.get_or_compute("k", compute, ttl_for=lambda _: 60)
    second, hit2 = cache.get_or_compute("k", compute, ttl_for=lambda _: 60)

    assert (hit1, hit2) == (False, True)
    assert first == second
    assert len(calls) == 1
    stats = cache.stats()
    assert (stats["hits"], stats["misses"], stats["sets"]) == (1, 1, 1)
    assert stats["hitRate"] == 50.0
    assert stats["connected"] is True


def test_entries_carry_ttl_metadata():
    client = InMemoryCacheClient()
    cache = _cache(client)

    cache.set("k", {"a": 1}, 900, tier="group-medium")

    entry = json.loads(client.get("k"))
    assert entry["payload"] == {"a": 1}
    assert entry["meta"]["ttl"] == 900
    assert entry["meta"]["tier"] == "group-medium"


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = _cache(InMemoryCacheClient(clock=clock))

    cache.set("k", {"a": 1}, 300)
    clock.now += 299
    assert cache.get("k") == {"a": 1}
    clock.now += 2
    assert cache.get("k") is None


def test_undecodable_entry_is_a_miss():
    client = InMemoryCacheClient()
    client.set("k", "{not json", 60)
    cache = _cache(client)

    assert cache.get("k") is None
    assert cache.stats()["errors"] == 1


def test_failing_backend_is_invisible_to_caller():
    cache = _cache(FailingCacheClient())

    value, hit = cache.get_or_compute("k", lambda: {"ok": True}, ttl_for=lambda _: 60)

    assert value == {"ok": True}
    assert hit is False
    assert cache.invalidate_all() == 0
    stats = cache.stats()
    assert stats["errors"] == 3
    assert stats["connected"] is False


def test_compute_errors_propagate():
    cache = _cache()

    def compute():
        raise RuntimeError("store down")

    try:
        cache.get_or_compute("k", compute, ttl_for=lambda _: 60)
    except RuntimeError as e:
        assert str(e) == "store down"
    else:
        raise AssertionError("compute error was swallowed")


def test_unserializable_payload_is_skipped():
    cache = _cache()

    assert cache.set("k", {"bad": object()}, 60) is True  # default=str stringifies
    assert cache.set("k", {1j: "complex key"}, 60) is False


def _seed(cache):
    keys = {
        "d1": _key(division_id="D1"),
        "d1_sec": _key(division_id="D1", section_id="S1"),
        "d10": _key(division_id="D10"),
        "d2": _key(division_id="D2"),
        "global": _key(),
        "emp1": _key(employee_id="E1"),
        "emp10": _key(employee_id="E10"),
    }
    for key in keys.values():
        cache.set(key, {"k": key}, 600)
    return keys


def _alive(cache, keys):
    return {name for name, key in keys.items() if cache.get(key) is not None}


def test_division_invalidation_is_segment_scoped():
    cache = _cache()
    keys = _seed(cache)

    removed = cache.invalidate_organization("D1")

    assert removed == 2
    assert _alive(cache, keys) == {"d10", "d2", "global", "emp1", "emp10"}


def test_section_invalidation_leaves_division_only_keys():
    cache = _cache()
    keys = _seed(cache)

    cache.invalidate_organization(None, "S1")

    assert "d1_sec" not in _alive(cache, keys)
    assert "d1" in _alive(cache, keys)


def test_employee_invalidation_with_and_without_groups():
    cache = _cache()
    keys = _seed(cache)

    cache.invalidate_employee("E1", include_groups=False)
    assert _alive(cache, keys) == set(keys) - {"emp1"}

    cache.invalidate_employee("E10")
    assert _alive(cache, keys) == set()


def test_scope_invalidation():
    cache = _cache()
    keys = _seed(cache)

    cache.invalidate_all(CacheScope.INDIVIDUAL)
    assert _alive(cache, keys) == {"d1", "d1_sec", "d10", "d2", "global"}

    cache.invalidate_all("all")
    assert _alive(cache, keys) == set()
    assert cache.stats()["deletes"] == len(keys)


def test_reset_stats():
    cache = _cache()
    cache.get("missing")

    cache.reset_stats()

    assert cache.stats()["misses"] == 0


class HeldExecutor(Executor):
    """Accepts work but never runs it, like a pool stuck behind a slow backend."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def drain(self):
        for future, fn, args, kwargs in self.pending:
            future.set_result(fn(*args, **kwargs))
        self.pending.clear()


def test_write_backlog_is_bounded():
    executor = HeldExecutor()
    cache = ReportCache(InMemoryCacheClient(), executor=executor, max_pending_writes=2)

    futures = [cache.set_async(f"k{i}", {"i": i}, 60) for i in range(4)]

    assert len(executor.pending) == 2
    assert [f.done() for f in futures] == [False, False, True, True]
    assert futures[2].result() is False
    assert cache.stats()["errors"] == 2

    executor.drain()
    assert not cache.set_async("k9", {"i": 9}, 60).done()
    assert len(executor.pending) == 1


def test_stats_counters_are_exact_under_threads():
    stats = CacheStats()
    threads_n, calls = 8, 2000
    start = threading.Barrier(threads_n)

    def hammer():
        start.wait()
        for i in range(calls):
            stats.record_get(hit=i % 2 == 0, elapsed_ms=1.0)
            stats.record_set(elapsed_ms=0.5)

    workers = [threading.Thread(target=hammer) for _ in range(threads_n)]
    for w in workers:
        w.start()
    for w in workers:
        w.join()

    snap = stats.snapshot()
    total = threads_n * calls
    assert snap["hits"] == total // 2
    assert snap["misses"] == total // 2
    assert snap["sets"] == total
    assert snap["totalRequests"] == total
    assert snap["totalGetMs"] == pytest.approx(float(total))
    assert snap["totalSetMs"] == pytest.approx(total * 0.5)
