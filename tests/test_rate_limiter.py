"""Tests for the per-user generation rate limiter."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from backend.core.errors import RateLimiterUnavailable, StoreUnavailable
from backend.core.rate_limiter import RateLimiter


class TestRateLimiter:

    async def test_sixth_call_in_window_is_denied(self, memory_store):
        """5 requests pass, the 6th within the same minute is denied."""
        limiter = RateLimiter(memory_store, max_requests=5, window_seconds=60)

        results = [await limiter.allow("user-1") for _ in range(6)]

        assert results == [True, True, True, True, True, False]

    async def test_counter_resets_after_window(self, memory_store, clock):
        limiter = RateLimiter(memory_store, max_requests=5, window_seconds=60)
        for _ in range(6):
            await limiter.allow("user-1")

        clock.advance(60)

        assert await limiter.allow("user-1") is True

    async def test_users_are_counted_separately(self, memory_store):
        limiter = RateLimiter(memory_store, max_requests=1, window_seconds=60)

        assert await limiter.allow("user-1") is True
        assert await limiter.allow("user-2") is True
        assert await limiter.allow("user-1") is False

    async def test_concurrent_calls_lose_no_updates(self, memory_store):
        limiter = RateLimiter(memory_store, max_requests=5, window_seconds=60)

        results = await asyncio.gather(*(limiter.allow("user-1") for _ in range(12)))

        assert results.count(True) == 5
        assert results.count(False) == 7

    async def test_key_format(self, memory_store):
        limiter = RateLimiter(memory_store, namespace="learncheck")
        assert limiter.key_for("user-1") == "learncheck:ratelimit:user-1"

    async def test_store_unavailable_is_distinct_error(self):
        store = MagicMock()
        store.incr_window = AsyncMock(side_effect=StoreUnavailable("refused"))
        limiter = RateLimiter(store)

        with pytest.raises(RateLimiterUnavailable):
            await limiter.allow("user-1")
