"""Redis-backed fixed-window limiter for submissions per caller IP."""

from __future__ import annotations

import time
from typing import Callable

from redis.asyncio import Redis

from formrelay.core import constants
from formrelay.core.exceptions import RateLimitExceeded


class RateLimiter:
    """Counts submissions per IP in fixed windows stored as ``"count:bucket"``.

    The read-modify-write is not atomic; concurrent requests in the same
    window may under-count.
    """

    def __init__(
        self,
        redis: Redis,
        *,
        limit: int = 5,
        window_seconds: int = 600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._redis = redis
        self._limit = limit
        self._window = window_seconds
        self._clock = clock

    async def enforce(self, ip: str) -> int:
        """Record one submission for ``ip`` and return the count in the current window."""
        now = int(self._clock())
        bucket = now // self._window
        key = self._key(ip)

        count, stored_bucket = self._decode(await self._redis.get(key), bucket)
        if stored_bucket != bucket:
            count = 0
            stored_bucket = bucket
        count += 1

        await self._redis.set(
            key,
            f"{count}:{stored_bucket}",
            ex=self._window + constants.RATE_LIMIT_TTL_GRACE_SECONDS,
        )
        if count > self._limit:
            raise RateLimitExceeded(
                "Rate limited",
                retry_after=(bucket + 1) * self._window - now,
            )
        return count

    # Key helpers --------------------------------------------------------

    def _key(self, ip: str) -> str:
        return f"{constants.RATE_LIMIT_KEY_PREFIX}:{ip}"

    @staticmethod
    def _decode(raw: str | None, bucket: int) -> tuple[int, int]:
        if not raw:
            return 0, bucket
        count_part, _, bucket_part = raw.partition(":")
        try:
            return int(count_part or 0), int(bucket_part or 0)
        except ValueError:
            return 0, bucket


__all__ = ["RateLimiter", "RateLimitExceeded"]
