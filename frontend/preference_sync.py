import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from frontend.constants import DEBOUNCE_SECONDS, POLLING_INTERVAL_SECONDS, PREFERENCE_MESSAGE_TYPE

logger = logging.getLogger(__name__)


class PreferenceSyncLoop:
    """
    Keeps displayed preferences fresh while the quiz view is open.

    Refetch triggers: start (mount), window focus, a ``preference-updated``
    message from the embedding page, and a poll while focused. Triggers are
    trailing-debounced so a burst collapses into one fetch. Before each fetch
    ``is_suspended()`` is checked; the quiz session suspends the loop while a
    quiz is in progress. Only the newest fetch may apply its result.

    Args:
        fetch: ``async () -> preferences``
        on_update: called with each applied preferences value
        scheduler: object with ``call_later(delay, callback)`` returning a handle with ``cancel()``
        is_suspended: guard checked before every refetch
        on_error: called with the exception of a failed (current) fetch
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[Dict[str, Any]]],
        on_update: Callable[[Dict[str, Any]], None],
        scheduler,
        is_suspended: Callable[[], bool] = lambda: False,
        on_error: Optional[Callable[[Exception], None]] = None,
        debounce: float = DEBOUNCE_SECONDS,
        poll_interval: float = POLLING_INTERVAL_SECONDS,
    ):
        self.fetch = fetch
        self.on_update = on_update
        self.scheduler = scheduler
        self.is_suspended = is_suspended
        self.on_error = on_error
        self.debounce = debounce
        self.poll_interval = poll_interval

        self.running = False
        self.focused = False
        self.preferences: Optional[Dict[str, Any]] = None
        self.last_error: Optional[Exception] = None

        self._debounce_handle = None
        self._poll_handle = None
        self._latest_token = 0
        self._tasks: Set[asyncio.Task] = set()

    # --- lifecycle ---

    def start(self):
        if self.running:
            return
        self.running = True
        self.focused = True
        self.request_refresh()
        self._start_polling()

    def stop(self):
        self.running = False
        self.focused = False
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None
        self._stop_polling()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    # --- event translation ---

    def on_focus(self):
        if not self.running:
            return
        self.focused = True
        self.request_refresh()
        self._start_polling()

    def on_blur(self):
        self.focused = False
        self._stop_polling()

    def on_message(self, message: Any):
        if isinstance(message, dict) and message.get("type") == PREFERENCE_MESSAGE_TYPE:
            logger.info("Received preference update from parent")
            self.request_refresh()

    def request_refresh(self):
        if not self.running:
            return
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        self._debounce_handle = self.scheduler.call_later(self.debounce, self._fire)

    # --- polling ---

    def _start_polling(self):
        if self._poll_handle is None and self.running and self.focused:
            self._poll_handle = self.scheduler.call_later(self.poll_interval, self._poll)

    def _stop_polling(self):
        if self._poll_handle is not None:
            self._poll_handle.cancel()
            self._poll_handle = None

    def _poll(self):
        self._poll_handle = None
        self.request_refresh()
        self._start_polling()

    # --- fetching ---

    def _fire(self):
        self._debounce_handle = None
        if not self.running:
            return
        if self.is_suspended():
            logger.debug("Preference refresh suspended")
            return
        self._latest_token += 1
        task = asyncio.get_running_loop().create_task(self._refresh(self._latest_token))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _refresh(self, token: int):
        try:
            preferences = await self.fetch()
        except Exception as e:
            if token == self._latest_token:
                logger.error(f"Failed to fetch preferences: {e}")
                self.last_error = e
                if self.on_error:
                    self.on_error(e)
            return

        if token != self._latest_token or not self.running:
            logger.debug(f"Discarding stale preferences response {token}")
            return
        self.last_error = None
        self.preferences = preferences
        self.on_update(preferences)

    async def wait_idle(self):
        """Wait for in-flight fetches to complete."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
