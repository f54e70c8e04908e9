"""Redis client management for the optional rate-limit counter."""

from __future__ import annotations

import redis.asyncio as redis

from formrelay.core.config import Settings, get_settings
from formrelay.core.exceptions import ConfigurationMissingError

_client: redis.Redis | None = None


def rate_limit_enabled(settings: Settings) -> bool:
    return settings.enable_rate_limit and bool(settings.redis_url)


def get_redis_client() -> redis.Redis:
    """Return a singleton Redis client."""
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.redis_url:
            raise ConfigurationMissingError("REDIS_URL environment variable is not set")
        _client = redis.from_url(settings.redis_url, decode_responses=True)
    return _client


async def init_redis() -> redis.Redis:
    client = get_redis_client()
    await client.ping()
    return client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
