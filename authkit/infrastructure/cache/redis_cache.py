import json
from datetime import timedelta
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ...application.ports.cache import CacheError, KeyNotFoundError, ShortLivedStore


class RedisCache(ShortLivedStore):
    """Values are stored as JSON with the native Redis expiry."""

    def __init__(self, url: str, prefix: str = "authkit:", client: Optional[redis.Redis] = None) -> None:
        self.client = client or redis.Redis.from_url(url)
        self.prefix = prefix

    async def set(self, key: str, value: Any, ttl: timedelta) -> None:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise CacheError(f"value for {key} is not JSON serializable") from e
        # Redis rejects a zero expiry
        ttl_ms = max(int(ttl.total_seconds() * 1000), 1)
        try:
            await self.client.set(f"{self.prefix}{key}", payload, px=ttl_ms)
        except RedisError as e:
            raise CacheError(f"unable to set {key}") from e

    async def get(self, key: str) -> Any:
        try:
            raw = await self.client.get(f"{self.prefix}{key}")
        except RedisError as e:
            raise CacheError(f"unable to get {key}") from e
        if raw is None:
            raise KeyNotFoundError(key)
        try:
            return json.loads(raw)
        except ValueError as e:
            raise CacheError(f"corrupt value for {key}") from e

    async def close(self) -> None:
        await self.client.aclose()
