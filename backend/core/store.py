import asyncio
import time
import logging
from typing import Callable, Dict, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from backend.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    Async key-value store with per-key expiry.

    Shared by the rate limiter (windowed counters) and the result cache
    (serialized assessments). Backend failures surface as StoreUnavailable.
    """

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> bool:
        raise NotImplementedError

    async def incr_window(self, key: str, window_seconds: int) -> int:
        """
        Atomically increment the counter stored at key.

        The first increment of a window sets the key to expire after
        window_seconds; once it expires the counter restarts at 1.

        Returns:
            int: Counter value after the increment
        """
        raise NotImplementedError

    async def close(self) -> None:
        pass


class InMemoryStore(KeyValueStore):
    """Single-process store for local development and tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, Tuple[object, float]] = {}
        self._lock = asyncio.Lock()

    def _live(self, key: str):
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._data[key]
            return None
        return value

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            value = self._live(key)
            return value if isinstance(value, str) else None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        async with self._lock:
            self._data[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._data.pop(key, None) is not None

    async def incr_window(self, key: str, window_seconds: int) -> int:
        async with self._lock:
            current = self._live(key)
            if current is None:
                self._data[key] = (1, self._clock() + window_seconds)
                return 1
            _, expires_at = self._data[key]
            count = int(current) + 1
            self._data[key] = (count, expires_at)
            return count


class RedisStore(KeyValueStore):
    def __init__(self, url: str, client: Optional[redis.Redis] = None):
        self.redis = client or redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
        )

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.redis.get(key)
        except RedisError as e:
            logger.error(f"Redis get error for {key}: {e}")
            raise StoreUnavailable(str(e)) from e

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self.redis.setex(key, ttl_seconds, value)
        except RedisError as e:
            logger.error(f"Redis set error for {key}: {e}")
            raise StoreUnavailable(str(e)) from e

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self.redis.delete(key))
        except RedisError as e:
            logger.error(f"Redis delete error for {key}: {e}")
            raise StoreUnavailable(str(e)) from e

    async def incr_window(self, key: str, window_seconds: int) -> int:
        # SET NX EX opens the window, INCR counts; MULTI/EXEC keeps both atomic
        try:
            pipe = self.redis.pipeline(transaction=True)
            pipe.set(key, 0, ex=window_seconds, nx=True)
            pipe.incr(key)
            _, count = await pipe.execute()
            return int(count)
        except RedisError as e:
            logger.error(f"Redis counter error for {key}: {e}")
            raise StoreUnavailable(str(e)) from e

    async def close(self) -> None:
        await self.redis.aclose()
        logger.info("Redis connection closed")
