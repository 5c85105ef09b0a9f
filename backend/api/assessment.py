from fastapi import APIRouter, HTTPException
from typing import Optional
import logging

from backend.models.schemas import AssessmentResponse, ErrorResponse, HTTPErrorResponse, PreferencesResponse
from backend.core.assessment_orchestrator import AssessmentOrchestrator
from backend.core.errors import (
    AssessmentError,
    InvalidInput,
    RateLimiterUnavailable,
    ERROR_MESSAGES,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": HTTPErrorResponse, "description": "Missing or invalid identifiers"},
    500: {"model": HTTPErrorResponse, "description": "Rate limited, upstream or generation failure"},
    503: {"model": HTTPErrorResponse, "description": "Rate limiter unavailable"},
}

# Dependencies - set once by the application lifespan
orchestrator: AssessmentOrchestrator = None

def set_dependencies(o: AssessmentOrchestrator):
    global orchestrator
    orchestrator = o


def _error_status(error: AssessmentError) -> int:
    if isinstance(error, InvalidInput):
        return 400
    if isinstance(error, RateLimiterUnavailable):
        return 503
    return 500


def _raise_http(error: AssessmentError):
    status_code = _error_status(error)
    logger.error(f"Request failed [{error.code}] -> {status_code}: {error.message}")
    raise HTTPException(status_code=status_code, detail=ErrorResponse(error=error.code, message=error.message).model_dump())


def _require_id(value: Optional[str], message: str) -> str:
    if not value or not value.strip():
        raise InvalidInput(message)
    return value


@router.get("/preferences", response_model=PreferencesResponse, responses=ERROR_RESPONSES)
async def get_user_preferences(user_id: Optional[str] = None):
    """
    Get fresh display preferences for a user.

    Args:
        user_id (str): User identifier (query parameter)

    Returns:
        PreferencesResponse: The user's current preferences

    Raises:
        HTTPException: 400 if user_id is missing, 500 if the upstream fetch fails
    """
    try:
        user_id = _require_id(user_id, ERROR_MESSAGES["INVALID_USER_ID"])
        preferences = await orchestrator.get_preferences(user_id)
        return PreferencesResponse(user_preferences=preferences)
    except AssessmentError as e:
        _raise_http(e)


@router.get("/assessment", response_model=AssessmentResponse, responses=ERROR_RESPONSES)
async def get_assessment(tutorial_id: Optional[str] = None, user_id: Optional[str] = None, fresh: bool = False):
    """
    Generate or fetch the cached assessment for a tutorial.

    Checks the user's rate limit, serves a cached quiz when one exists and
    otherwise generates a new one. Preferences are always fetched fresh.
    ``fresh=true`` regenerates without touching the cache (retry flow).

    Raises:
        HTTPException: 400 for missing ids, 500 for rate-limit, upstream or
                       generation failures, 503 if the rate limiter is unavailable
    """
    try:
        tutorial_id = _require_id(tutorial_id, ERROR_MESSAGES["INVALID_TUTORIAL_ID"])
        user_id = _require_id(user_id, ERROR_MESSAGES["INVALID_USER_ID"])
        return await orchestrator.get_assessment(tutorial_id, user_id, skip_cache=fresh)
    except AssessmentError as e:
        _raise_http(e)
