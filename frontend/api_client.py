import time
import logging
from typing import Any, Dict, Optional

import requests

from frontend.constants import API_BASE_URL, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Failed call to the assessment API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class QuizApiClient:
    def __init__(self, base_url: str = API_BASE_URL, timeout: float = REQUEST_TIMEOUT, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str, params: Dict[str, Any], fallback_message: str) -> Dict[str, Any]:
        try:
            response = self.session.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Request to {path} failed: {e}")
            raise ApiError(f"{fallback_message}: {e}") from e

        if response.status_code != 200:
            raise ApiError(_error_message(response, fallback_message), response.status_code)
        return response.json()

    def get_preferences(self, user_id: str) -> Dict[str, Any]:
        """Fetch fresh preferences; ``_t`` defeats intermediary caches."""
        data = self._get(
            "/preferences",
            {"user_id": user_id, "_t": int(time.time() * 1000)},
            "Failed to load preferences",
        )
        return data["userPreferences"]

    def get_assessment(self, tutorial_id: str, user_id: str, fresh: bool = False) -> Dict[str, Any]:
        params = {"tutorial_id": tutorial_id, "user_id": user_id}
        if fresh:
            params["fresh"] = "true"
        return self._get("/assessment", params, "Failed to generate quiz")

    def close(self):
        self.session.close()


def _error_message(response: requests.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, dict) and detail.get("message"):
        return detail["message"]
    if isinstance(detail, str):
        return detail
    return fallback
