import logging
from typing import Callable

from frontend.constants import TIMER_DURATION_SECONDS

logger = logging.getLogger(__name__)


class QuizTimer:
    """
    One-second countdown that finishes the quiz when it reaches zero.

    ``tick()`` is the unit of time; ``start(scheduler)`` drives it in real
    time through any object with ``call_later(delay, callback)`` returning a
    cancellable handle (an asyncio event loop works).
    """

    def __init__(self, on_expire: Callable[[], None], is_over: Callable[[], bool], duration: int = TIMER_DURATION_SECONDS):
        self.on_expire = on_expire
        self.is_over = is_over
        self.duration = duration
        self.remaining = duration
        self.expired = False
        self._scheduler = None
        self._handle = None

    def tick(self):
        if self.expired or self.is_over():
            return
        self.remaining = max(self.remaining - 1, 0)
        if self.remaining == 0:
            self.expired = True
            logger.info("Quiz time is up")
            self.on_expire()

    def formatted(self) -> str:
        minutes, seconds = divmod(self.remaining, 60)
        return f"{minutes:02d}:{seconds:02d}"

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self, scheduler):
        self.stop()
        self.remaining = self.duration
        self.expired = False
        self._scheduler = scheduler
        self._schedule()

    def _schedule(self):
        self._handle = self._scheduler.call_later(1.0, self._on_tick)

    def _on_tick(self):
        self._handle = None
        self.tick()
        if not self.expired and not self.is_over():
            self._schedule()

    def stop(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
