from datetime import timedelta
from typing import Any, Protocol


class CacheError(Exception):
    """Backend failure of a short-lived store."""


class KeyNotFoundError(CacheError):
    """The key was never set or its TTL has elapsed."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"key not found: {key}")


class ShortLivedStore(Protocol):
    async def set(self, key: str, value: Any, ttl: timedelta) -> None:
        ...

    async def get(self, key: str) -> Any:
        ...
