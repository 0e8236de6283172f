import time
from datetime import timedelta
from typing import Any, Callable, Dict, Tuple

from ...application.ports.cache import KeyNotFoundError, ShortLivedStore


class InMemoryCache(ShortLivedStore):
    """Process-local store; expired entries are pruned lazily on read."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._store: Dict[str, Tuple[Any, float]] = {}
        self._clock = clock

    async def set(self, key: str, value: Any, ttl: timedelta) -> None:
        self._store[key] = (value, self._clock() + ttl.total_seconds())

    async def get(self, key: str) -> Any:
        rec = self._store.get(key)
        if rec is None:
            raise KeyNotFoundError(key)
        value, expires_at = rec
        if self._clock() >= expires_at:
            # prune
            self._store.pop(key, None)
            raise KeyNotFoundError(key)
        return value
