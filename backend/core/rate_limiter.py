import logging

from backend.core.errors import RateLimiterUnavailable, StoreUnavailable, ERROR_MESSAGES
from backend.core.store import KeyValueStore

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Fixed-window request counter per user, backed by a shared key-value store.

    Args:
        store (KeyValueStore): Shared counter store
        max_requests (int): Requests allowed per window
        window_seconds (int): Window length; the counter expires with it
        namespace (str): Key prefix shared with the result cache
    """
    def __init__(self, store: KeyValueStore, max_requests: int = 5, window_seconds: int = 60, namespace: str = "learncheck"):
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.namespace = namespace

    def key_for(self, user_id: str) -> str:
        return f"{self.namespace}:ratelimit:{user_id}"

    async def allow(self, user_id: str) -> bool:
        """
        Count one request for user_id and report whether it may proceed.

        Returns:
            bool: False once the count within the current window exceeds max_requests

        Raises:
            RateLimiterUnavailable: If the counter store cannot be reached
        """
        try:
            count = await self.store.incr_window(self.key_for(user_id), self.window_seconds)
        except StoreUnavailable as e:
            logger.error(f"Rate limiter store unavailable for user {user_id}: {e}")
            raise RateLimiterUnavailable(ERROR_MESSAGES["RATE_LIMITER_UNAVAILABLE"]) from e

        if count > self.max_requests:
            logger.warning(f"Rate limit exceeded for user {user_id}: {count}/{self.max_requests}")
            return False
        return True
