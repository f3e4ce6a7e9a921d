from __future__ import annotations

import asyncio
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class RateLimitEntry:
    attempt_count: int
    window_start: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after_seconds: int | None = None


class RateLimitStore(ABC):
    """Holds one fixed-window counter per key.

    ``acquire`` must run the whole check-and-count step atomically: start or
    restart the window when it is missing or expired, otherwise count the
    attempt only while it is below ``max_attempts``.
    """

    @abstractmethod
    async def acquire(
        self,
        key: str,
        max_attempts: int,
        window_seconds: float,
        now_seconds: float,
    ) -> tuple[bool, RateLimitEntry]:
        raise NotImplementedError


class RedisLikeClient(Protocol):
    async def eval(self, script: str, numkeys: int, *keys_and_args: Any) -> Any: ...


class InMemoryRateLimitStore(RateLimitStore):
    def __init__(self) -> None:
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = asyncio.Lock()

    async def acquire(
        self,
        key: str,
        max_attempts: int,
        window_seconds: float,
        now_seconds: float,
    ) -> tuple[bool, RateLimitEntry]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None or now_seconds - entry.window_start >= window_seconds:
                entry = RateLimitEntry(attempt_count=1, window_start=now_seconds)
                self._entries[key] = entry
                return True, entry
            if entry.attempt_count < max_attempts:
                entry = RateLimitEntry(attempt_count=entry.attempt_count + 1, window_start=entry.window_start)
                self._entries[key] = entry
                return True, entry
            return False, entry


# KEYS[1] = counter hash; ARGV = now, window_seconds, max_attempts, ttl_seconds.
# window_start travels as a string because Lua numbers come back truncated to integers.
_ACQUIRE_SCRIPT = """
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local max_attempts = tonumber(ARGV[3])
local state = redis.call('HMGET', KEYS[1], 'count', 'window_start')
if (not state[1]) or (not state[2]) or (now - tonumber(state[2]) >= window) then
  redis.call('HSET', KEYS[1], 'count', 1, 'window_start', ARGV[1])
  redis.call('EXPIRE', KEYS[1], ARGV[4])
  return {1, 1, ARGV[1]}
end
local count = tonumber(state[1])
if count < max_attempts then
  count = redis.call('HINCRBY', KEYS[1], 'count', 1)
  return {1, count, state[2]}
end
return {0, count, state[2]}
"""


class RedisRateLimitStore(RateLimitStore):
    def __init__(self, client: RedisLikeClient) -> None:
        self._client = client

    async def acquire(
        self,
        key: str,
        max_attempts: int,
        window_seconds: float,
        now_seconds: float,
    ) -> tuple[bool, RateLimitEntry]:
        ttl_seconds = math.ceil(window_seconds) + 5
        allowed, count, window_start = await self._client.eval(
            _ACQUIRE_SCRIPT,
            1,
            self._redis_key(key),
            repr(float(now_seconds)),
            repr(float(window_seconds)),
            str(max_attempts),
            str(ttl_seconds),
        )
        entry = RateLimitEntry(attempt_count=int(count), window_start=float(window_start))
        return bool(int(allowed)), entry

    def _redis_key(self, key: str) -> str:
        return f"rate_limit:{key}"


class FixedWindowRateLimiter:
    """Per identifier and endpoint quota that resets at window boundaries."""

    def __init__(
        self,
        store: RateLimitStore,
        max_attempts: int = 20,
        window_seconds: int = 60,
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("max_attempts must be > 0")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self._store = store
        self._max_attempts = max_attempts
        self._window_seconds = window_seconds

    async def check_limit(
        self,
        identifier: str,
        endpoint: str,
        now_seconds: float,
        max_attempts: int | None = None,
        window_seconds: int | None = None,
    ) -> RateLimitDecision:
        limit = self._max_attempts if max_attempts is None else max_attempts
        window = self._window_seconds if window_seconds is None else window_seconds
        if limit <= 0:
            raise ValueError("max_attempts must be > 0")
        if window <= 0:
            raise ValueError("window_seconds must be > 0")
        allowed, entry = await self._store.acquire(f"{identifier}:{endpoint}", limit, window, now_seconds)
        if allowed:
            return RateLimitDecision(allowed=True)
        retry_after = max(1, math.ceil(entry.window_start + window - now_seconds))
        return RateLimitDecision(allowed=False, retry_after_seconds=retry_after)
