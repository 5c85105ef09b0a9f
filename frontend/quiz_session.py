import asyncio
import logging
from typing import Any, Dict, Optional

from frontend.api_client import ApiError, QuizApiClient
from frontend.constants import TIMER_DURATION_SECONDS
from frontend.preference_sync import PreferenceSyncLoop
from frontend.quiz_store import QuizPhase, QuizStore, session_key_for
from frontend.quiz_timer import QuizTimer

logger = logging.getLogger(__name__)


class QuizSession:
    """
    Client-side controller for one embedded quiz view.

    Owns the countdown timer and the preference sync loop for the active
    (user, tutorial) pair, and records preference and assessment failures
    separately so one never hides the other. An assessment response is only
    applied if no newer request, key switch, reset or close happened while it
    was in flight.
    """

    def __init__(self, api: QuizApiClient, store: QuizStore, user_id: str, tutorial_id: str, scheduler, timer_duration: int = TIMER_DURATION_SECONDS):
        self.api = api
        self.store = store
        self.user_id = user_id
        self.tutorial_id = tutorial_id
        self.scheduler = scheduler

        self.preferences: Optional[Dict[str, Any]] = None
        self.assessment: Optional[Dict[str, Any]] = None
        self.from_cache = False
        self.is_generating = False
        self.preferences_error: Optional[str] = None
        self.assessment_error: Optional[str] = None

        self._assessment_token = 0

        self.timer = QuizTimer(
            on_expire=store.finish_quiz,
            is_over=lambda: store.quiz_over,
            duration=timer_duration,
        )
        self.preference_loop = PreferenceSyncLoop(
            fetch=self._fetch_preferences,
            on_update=self._on_preferences,
            scheduler=scheduler,
            is_suspended=lambda: store.phase == QuizPhase.IN_PROGRESS,
            on_error=self._on_preferences_error,
        )

    # --- preferences ---

    async def _fetch_preferences(self) -> Dict[str, Any]:
        return await asyncio.to_thread(self.api.get_preferences, self.user_id)

    def _on_preferences(self, preferences: Dict[str, Any]):
        self.preferences = preferences
        self.preferences_error = None

    def _on_preferences_error(self, error: Exception):
        self.preferences_error = getattr(error, "message", None) or str(error) or "Failed to load preferences"

    # --- lifecycle ---

    def _discard_pending_assessment(self):
        self._assessment_token += 1
        self.is_generating = False

    def open(self):
        self.store.initialize(self.user_id, self.tutorial_id)
        self.preference_loop.start()

    def switch_session(self, user_id: str, tutorial_id: str):
        """Move the view to another (user, tutorial) pair; a no-op for the current pair."""
        if session_key_for(user_id, tutorial_id, self.store.key_prefix) == self.store.session_key:
            return
        self._discard_pending_assessment()
        self.timer.stop()
        self.user_id = user_id
        self.tutorial_id = tutorial_id
        self.assessment = None
        self.assessment_error = None
        self.store.initialize(user_id, tutorial_id)
        self.preference_loop.request_refresh()

    def close(self):
        self._discard_pending_assessment()
        self.timer.stop()
        self.preference_loop.stop()

    # --- quiz flow ---

    async def start_quiz(self, fresh: bool = False) -> bool:
        """
        Load the assessment and begin the countdown.

        Returns:
            bool: False if generation failed (the reason is in assessment_error)
                  or the response was superseded before it arrived
        """
        self._assessment_token += 1
        token = self._assessment_token
        session_key = self.store.session_key
        self.is_generating = True
        self.assessment_error = None
        try:
            data = await asyncio.to_thread(self.api.get_assessment, self.tutorial_id, self.user_id, fresh)
        except ApiError as e:
            if not self._is_current(token, session_key):
                return False
            logger.error(f"Quiz generation error: {e.message}")
            self.assessment_error = e.message
            return False
        finally:
            if token == self._assessment_token:
                self.is_generating = False

        if not self._is_current(token, session_key):
            logger.info(f"Discarding assessment response for {session_key}")
            return False

        self.assessment = data["assessment"]
        self.from_cache = data.get("fromCache", False)
        if data.get("userPreferences"):
            self._on_preferences(data["userPreferences"])

        self.store.set_questions(self.assessment["questions"])
        if self.store.phase == QuizPhase.IN_PROGRESS:
            self.timer.start(self.scheduler)
        return True

    def _is_current(self, token: int, session_key: Optional[str]) -> bool:
        return token == self._assessment_token and session_key == self.store.session_key

    async def try_again(self) -> bool:
        self.timer.stop()
        self.store.reset()
        return await self.start_quiz(fresh=True)

    def go_to_intro(self):
        self._discard_pending_assessment()
        self.timer.stop()
        self.store.reset()
        self.assessment = None
