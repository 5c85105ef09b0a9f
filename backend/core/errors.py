"""Error kinds raised by the assessment service."""


class AssessmentError(Exception):
    """Base exception for assessment orchestration errors."""
    code = "assessment_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(AssessmentError):
    """Missing or malformed identifiers."""
    code = "invalid_input"


class RateLimited(AssessmentError):
    """User exceeded the quiz generation quota."""
    code = "rate_limited"


class RateLimiterUnavailable(AssessmentError):
    """The shared counter store could not be reached."""
    code = "rate_limiter_unavailable"


class UpstreamUnavailable(AssessmentError):
    """Tutorial content or preferences could not be fetched."""
    code = "upstream_unavailable"


class GenerationFailed(AssessmentError):
    """The question generator returned empty or malformed output."""
    code = "generation_failed"


class CacheWriteFailed(AssessmentError):
    """Writing a generated assessment to the cache failed. Logged only."""
    code = "cache_write_failed"


class StoreUnavailable(Exception):
    """Key-value store backend error."""
    pass


ERROR_MESSAGES = {
    "RATE_LIMIT_EXCEEDED": "Rate limit exceeded. Please wait a moment before generating another quiz.",
    "RATE_LIMITER_UNAVAILABLE": "Quiz generation is temporarily unavailable. Please try again later.",
    "INVALID_TUTORIAL_ID": "Missing or invalid tutorial_id",
    "INVALID_USER_ID": "Missing or invalid user_id",
    "UPSTREAM_FAILED": "Failed to load tutorial data. Please try again.",
    "GEMINI_GENERATION_FAILED": "Failed to generate assessment questions.",
    "EMPTY_GEMINI_RESPONSE": "Empty response from Gemini API",
}
