import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from pymongo import MongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from backend.core.errors import StoreUnavailable
from backend.core.store import KeyValueStore

logger = logging.getLogger(__name__)


class MongoStore(KeyValueStore):
    """
    MongoDB-backed key-value store.

    Each key is one document ``{_id, value, count, expires_at}``. A TTL index
    on ``expires_at`` lets MongoDB reap expired entries; reads also filter on
    ``expires_at`` because the TTL monitor only runs periodically.
    """
    def __init__(self, uri: str, database_name: str, collection_name: str, client: Optional[MongoClient] = None):
        self.client = client or MongoClient(uri, serverSelectionTimeoutMS=5000)
        self.db = self.client[database_name]
        self.collection = self.db[collection_name]
        self._ensure_ttl_index()

    def _ensure_ttl_index(self):
        """Ensure the expiry TTL index exists"""
        try:
            self.collection.create_index("expires_at", expireAfterSeconds=0)
        except PyMongoError as e:
            logger.warning(f"Could not create TTL index: {e}")

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _get(self, key: str) -> Optional[str]:
        document = self.collection.find_one(
            {"_id": key, "expires_at": {"$gt": self._now()}},
            {"value": 1}
        )
        if not document:
            return None
        return document.get("value")

    def _set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.collection.update_one(
            {"_id": key},
            {"$set": {"value": value, "expires_at": self._now() + timedelta(seconds=ttl_seconds)}},
            upsert=True
        )

    def _delete(self, key: str) -> bool:
        result = self.collection.delete_one({"_id": key})
        return result.deleted_count > 0

    def _incr_window(self, key: str, window_seconds: int) -> int:
        now = self._now()
        live = {"$gt": ["$expires_at", now]}
        # single pipeline update: increment inside a live window, otherwise restart it
        document = self.collection.find_one_and_update(
            {"_id": key},
            [{"$set": {
                "count": {"$cond": [live, {"$add": ["$count", 1]}, 1]},
                "expires_at": {"$cond": [live, "$expires_at", now + timedelta(seconds=window_seconds)]},
            }}],
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        return int(document["count"])

    async def _run(self, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except PyMongoError as e:
            logger.error(f"MongoDB store error in {func.__name__}: {e}")
            raise StoreUnavailable(str(e)) from e

    async def get(self, key: str) -> Optional[str]:
        return await self._run(self._get, key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._run(self._set, key, value, ttl_seconds)

    async def delete(self, key: str) -> bool:
        return await self._run(self._delete, key)

    async def incr_window(self, key: str, window_seconds: int) -> int:
        return await self._run(self._incr_window, key, window_seconds)

    async def close(self) -> None:
        self.client.close()
        logger.info("MongoDB connection closed")
