from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass
class CacheStats:
    """Process-local cache counters; every update happens under one lock."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    errors: int = 0
    total_get_ms: float = 0.0
    total_set_ms: float = 0.0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_get(self, *, hit: bool, elapsed_ms: float) -> None:
        with self._lock:
            if hit:
                self.hits += 1
            else:
                self.misses += 1
            self.total_get_ms += elapsed_ms

    def record_set(self, *, elapsed_ms: float) -> None:
        with self._lock:
            self.sets += 1
            self.total_set_ms += elapsed_ms

    def record_deletes(self, count: int) -> None:
        with self._lock:
            self.deletes += int(count)

    def record_error(self) -> None:
        with self._lock:
            self.errors += 1

    def reset(self) -> None:
        with self._lock:
            self.hits = self.misses = self.sets = self.deletes = self.errors = 0
            self.total_get_ms = self.total_set_ms = 0.0

    def snapshot(self) -> dict:
        with self._lock:
            lookups = self.hits + self.misses
            return {
                "hits": self.hits,
                "misses": self.misses,
                "sets": self.sets,
                "deletes": self.deletes,
                "errors": self.errors,
                "totalRequests": lookups,
                "hitRate": round(self.hits / lookups * 100, 2) if lookups else 0.0,
                "totalGetMs": round(self.total_get_ms, 3),
                "totalSetMs": round(self.total_set_ms, 3),
                "avgGetMs": round(self.total_get_ms / lookups, 3) if lookups else 0.0,
                "avgSetMs": round(self.total_set_ms / self.sets, 3) if self.sets else 0.0,
            }
