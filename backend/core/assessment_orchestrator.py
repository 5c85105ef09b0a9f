# backend/core/assessment_orchestrator.py
import asyncio
import logging
from typing import Callable, Optional, Set

from backend.core.errors import RateLimited, ERROR_MESSAGES
from backend.core.rate_limiter import RateLimiter
from backend.core.result_cache import ResultCache
from backend.models.schemas import Assessment, AssessmentResponse, UserPreferences
from backend.utils.html_parser import extract_text

logger = logging.getLogger(__name__)


class AssessmentOrchestrator:
    """
    Serves quizzes for a (tutorial, user) pair using cache-aside generation.

    Every collaborator is injected:
        rate_limiter: per-user generation quota
        cache: tutorial id -> previously generated Assessment
        content_provider: ``await get_tutorial_content(tutorial_id) -> str``
        preferences_provider: ``await get_user_preferences(user_id) -> UserPreferences``
        generator: ``await generate(text) -> Assessment``
        text_extractor: raw tutorial markup -> clean text
        error_logger: sink for detached cache-write failures

    Preferences are always fetched fresh; only generated questions are cached.
    """
    def __init__(
        self,
        rate_limiter: RateLimiter,
        cache: ResultCache,
        content_provider,
        preferences_provider,
        generator,
        text_extractor: Callable[[str], str] = extract_text,
        error_logger: Optional[logging.Logger] = None,
    ):
        self.rate_limiter = rate_limiter
        self.cache = cache
        self.content_provider = content_provider
        self.preferences_provider = preferences_provider
        self.generator = generator
        self.text_extractor = text_extractor
        self.error_logger = error_logger or logger
        self._pending_writes: Set[asyncio.Task] = set()

    async def get_assessment(self, tutorial_id: str, user_id: str, skip_cache: bool = False) -> AssessmentResponse:
        """
        Fetch or generate the assessment for a tutorial.

        Args:
            tutorial_id (str): Tutorial identifier
            user_id (str): User identifier
            skip_cache (bool): Regenerate without reading or writing the cache (retry flow)

        Returns:
            AssessmentResponse: Assessment, fresh user preferences and cache status

        Raises:
            RateLimited: The user exceeded the generation quota
            RateLimiterUnavailable: The rate limit store is unreachable
            UpstreamUnavailable: Tutorial content or preferences could not be fetched
            GenerationFailed: The generator produced no usable assessment
        """
        if not await self.rate_limiter.allow(user_id):
            raise RateLimited(ERROR_MESSAGES["RATE_LIMIT_EXCEEDED"])

        if not skip_cache:
            cached = await self.cache.get(tutorial_id)
            if cached is not None:
                logger.info(f"Using cached quiz for tutorial {tutorial_id}")
                preferences = await self.preferences_provider.get_user_preferences(user_id)
                return AssessmentResponse(assessment=cached, user_preferences=preferences, from_cache=True)
        else:
            logger.info(f"Skipping cache for fresh quiz on tutorial {tutorial_id}")

        tutorial_html, preferences = await asyncio.gather(
            self.content_provider.get_tutorial_content(tutorial_id),
            self.preferences_provider.get_user_preferences(user_id),
        )

        text_content = self.text_extractor(tutorial_html)
        logger.info(f"Generating fresh quiz for tutorial {tutorial_id}")
        assessment = await self.generator.generate(text_content)

        if not skip_cache:
            self._schedule_cache_write(tutorial_id, assessment)

        return AssessmentResponse(assessment=assessment, user_preferences=preferences, from_cache=False)

    async def get_preferences(self, user_id: str) -> UserPreferences:
        """Fetch fresh user preferences (never cached)."""
        logger.info(f"Fetching fresh preferences for user {user_id}")
        return await self.preferences_provider.get_user_preferences(user_id)

    def _schedule_cache_write(self, tutorial_id: str, assessment: Assessment):
        task = asyncio.create_task(self.cache.put(tutorial_id, assessment))
        self._pending_writes.add(task)
        task.add_done_callback(self._on_cache_write_done)

    def _on_cache_write_done(self, task: asyncio.Task):
        self._pending_writes.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.error_logger.error(f"Failed to cache quiz data: {error}")

    async def drain(self):
        """Wait for outstanding cache writes to settle."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)
