import logging
from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from backend.core.errors import UpstreamUnavailable
from backend.models.schemas import UserPreferences

logger = logging.getLogger(__name__)


class DicodingClient:
    """
    Client for the learning platform API.

    Provides the raw tutorial markup and the user's display preferences.
    Every failure, whether transport, HTTP status or payload shape, is raised
    as UpstreamUnavailable.
    """
    def __init__(self, base_url: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def _get_data(self, path: str) -> dict:
        try:
            response = await self.client.get(path)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Dicoding API returned {e.response.status_code} for {path}")
            raise UpstreamUnavailable(f"Dicoding API request failed: {e}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Dicoding API error for {path}: {e}")
            raise UpstreamUnavailable(f"Dicoding API request failed: {e}") from e

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise UpstreamUnavailable(f"Invalid response format from Dicoding API: missing data for {path}")
        return data

    async def get_tutorial_content(self, tutorial_id: str) -> str:
        logger.info(f"Fetching tutorial content for ID: {tutorial_id}")
        segment = quote(tutorial_id, safe="")
        data = await self._get_data(f"/tutorials/{segment}")
        content = data.get("content")
        if not content or not isinstance(content, str):
            raise UpstreamUnavailable("Invalid response format from Dicoding API: missing content field")
        return content

    async def get_user_preferences(self, user_id: str) -> UserPreferences:
        logger.info(f"Fetching user preferences for ID: {user_id}")
        segment = quote(user_id, safe="")
        data = await self._get_data(f"/users/{segment}/preferences")
        preference = data.get("preference")
        if not isinstance(preference, dict):
            raise UpstreamUnavailable("Invalid response format from Dicoding API: missing preference field")
        try:
            return UserPreferences.model_validate(preference)
        except ValidationError as e:
            raise UpstreamUnavailable(f"Invalid user preferences from Dicoding API: {e}") from e

    async def close(self):
        await self.client.aclose()
