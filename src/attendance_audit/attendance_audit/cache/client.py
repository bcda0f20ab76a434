from __future__ import annotations

import re
import threading
import time
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

import redis

from ..core.constants import DEFAULT_CACHE_TIMEOUT_SECONDS
from ..core.exceptions import CacheError


class CacheClient(Protocol):
    """Key/value primitives the cache-aside layer needs.

    Implementations raise ``CacheError`` for any backend failure.
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str, ttl: int) -> None:
        raise NotImplementedError

    def delete(self, *keys: str) -> int:
        raise NotImplementedError

    def scan_keys(self, pattern: str) -> Sequence[str]:
        raise NotImplementedError

    def ping(self) -> bool:
        raise NotImplementedError


class RedisCacheClient(CacheClient):
    def __init__(self, client: redis.Redis, *, scan_count: int = 500):
        self._redis = client
        self._scan_count = int(scan_count)

    @classmethod
    def from_config(cls, redis_config: Mapping[str, Any]) -> "RedisCacheClient":
        timeout = float(redis_config.get("socket_timeout", DEFAULT_CACHE_TIMEOUT_SECONDS))
        client = redis.Redis(
            host=str(redis_config.get("host", "127.0.0.1")),
            port=int(redis_config.get("port", 6379)),
            password=redis_config.get("password") or None,
            db=int(redis_config.get("db", 0)),
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
            decode_responses=True,
        )
        return cls(client)

    def get(self, key: str) -> Optional[str]:
        # decode_responses=True raises UnicodeDecodeError for non UTF-8 values.
        try:
            return self._redis.get(key)
        except (redis.RedisError, UnicodeDecodeError) as e:
            raise CacheError(f"GET {key} failed: {e}") from e

    def set(self, key: str, value: str, ttl: int) -> None:
        try:
            self._redis.setex(key, int(ttl), value)
        except redis.RedisError as e:
            raise CacheError(f"SETEX {key} failed: {e}") from e

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return int(self._redis.delete(*keys))
        except redis.RedisError as e:
            raise CacheError(f"DEL failed: {e}") from e

    def scan_keys(self, pattern: str) -> Sequence[str]:
        # SCAN instead of KEYS so large keyspaces do not block the server.
        try:
            return list(self._redis.scan_iter(match=pattern, count=self._scan_count))
        except (redis.RedisError, UnicodeDecodeError) as e:
            raise CacheError(f"SCAN {pattern} failed: {e}") from e

    def ping(self) -> bool:
        try:
            return bool(self._redis.ping())
        except redis.RedisError:
            return False


def glob_to_regex(pattern: str) -> "re.Pattern[str]":
    """Translate a Redis glob (``*``, ``?``, ``[...]``, ``\\`` escapes) to a regex."""
    out: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if ch == "*":
            out.append(".*")
        elif ch == "?":
            out.append(".")
        elif ch == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(ch))
            else:
                body = pattern[i + 1 : end].replace("\\", "\\\\")
                out.append(f"[{body}]")
                i = end
        else:
            out.append(re.escape(ch))
        i += 1
    return re.compile("".join(out) + r"\Z", re.DOTALL)


class InMemoryCacheClient(CacheClient):
    """Process-local store used when Redis is disabled, and in tests."""

    def __init__(self, *, clock: Callable[[], float] = time.monotonic):
        self._data: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _alive(self, key: str, now: float) -> bool:
        item = self._data.get(key)
        if item is None:
            return False
        if item[1] <= now:
            del self._data[key]
            return False
        return True

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            if not self._alive(key, self._clock()):
                return None
            return self._data[key][0]

    def _prune(self, now: float) -> None:
        expired = [k for k, (_, expires_at) in self._data.items() if expires_at <= now]
        for key in expired:
            del self._data[key]

    def set(self, key: str, value: str, ttl: int) -> None:
        with self._lock:
            now = self._clock()
            self._prune(now)
            self._data[key] = (value, now + int(ttl))

    def size(self) -> int:
        """Stored entries, including expired ones not yet pruned."""
        with self._lock:
            return len(self._data)

    def delete(self, *keys: str) -> int:
        with self._lock:
            now = self._clock()
            removed = 0
            for key in keys:
                if self._alive(key, now):
                    del self._data[key]
                    removed += 1
            return removed

    def scan_keys(self, pattern: str) -> Sequence[str]:
        regex = glob_to_regex(pattern)
        with self._lock:
            now = self._clock()
            return [k for k in list(self._data) if self._alive(k, now) and regex.match(k)]

    def ping(self) -> bool:
        return True


def build_cache_client(redis_config: Optional[Mapping[str, Any]]) -> CacheClient:
    cfg = dict(redis_config or {})
    if cfg.get("enabled", True):
        return RedisCacheClient.from_config(cfg)
    return InMemoryCacheClient()
