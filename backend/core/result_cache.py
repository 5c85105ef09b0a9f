import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from backend.core.errors import CacheWriteFailed, StoreUnavailable
from backend.core.store import KeyValueStore
from backend.models.schemas import Assessment

logger = logging.getLogger(__name__)


class ResultCache:
    """
    TTL cache of generated assessments keyed by tutorial id.

    Reads degrade to a miss on any failure; writes raise CacheWriteFailed so
    the caller can report them out of band.
    """
    def __init__(self, store: KeyValueStore, ttl_seconds: int = 86400, namespace: str = "learncheck"):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.namespace = namespace

    def key_for(self, tutorial_id: str) -> str:
        return f"{self.namespace}:quiz:tutorial:{tutorial_id}"

    async def get(self, tutorial_id: str) -> Optional[Assessment]:
        try:
            cached = await self.store.get(self.key_for(tutorial_id))
        except StoreUnavailable as e:
            logger.error(f"Cache read failed for tutorial {tutorial_id}, treating as miss: {e}")
            return None

        if not cached:
            logger.info(f"Cache miss for tutorial {tutorial_id}")
            return None

        try:
            assessment = Assessment.model_validate_json(cached)
        except ValidationError as e:
            logger.error(f"Discarding undecodable cache entry for tutorial {tutorial_id}: {e}")
            return None

        logger.info(f"Cache hit for tutorial {tutorial_id}")
        return assessment

    async def put(self, tutorial_id: str, assessment: Assessment) -> None:
        stamped = assessment.model_copy(update={"cached_at": datetime.now(timezone.utc).isoformat()})
        payload = stamped.model_dump_json(by_alias=True)
        try:
            await self.store.set(self.key_for(tutorial_id), payload, self.ttl_seconds)
        except StoreUnavailable as e:
            raise CacheWriteFailed(f"Failed to cache quiz for tutorial {tutorial_id}: {e}") from e
        logger.info(f"Cached quiz data for tutorial {tutorial_id}")

    async def invalidate(self, tutorial_id: str) -> bool:
        """Drop the cached assessment for a tutorial (manual refresh)."""
        try:
            removed = await self.store.delete(self.key_for(tutorial_id))
        except StoreUnavailable as e:
            logger.error(f"Failed to invalidate cache for tutorial {tutorial_id}: {e}")
            return False
        logger.info(f"Invalidated cache for tutorial {tutorial_id}")
        return removed
