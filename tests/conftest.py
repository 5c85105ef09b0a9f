"""Shared fixtures for the LearnCheck test suite."""
import copy

import pytest

from backend.core.store import InMemoryStore
from backend.models.schemas import Assessment, UserPreferences


ASSESSMENT_DATA = {
    "questions": [
        {
            "id": "q1",
            "questionText": "Apa fungsi useState di React?",
            "options": [
                {"id": "opt1", "text": "Menyimpan state lokal komponen"},
                {"id": "opt2", "text": "Mengambil data dari server"},
                {"id": "opt3", "text": "Membuat routing"},
                {"id": "opt4", "text": "Menulis CSS"},
            ],
            "correctOptionId": "opt1",
            "explanation": "useState menyimpan state lokal. Hint: Pelajari lagi materi tentang state di React.",
        },
        {
            "id": "q2",
            "questionText": "Kapan useEffect dijalankan?",
            "options": [
                {"id": "opt1", "text": "Sebelum render"},
                {"id": "opt2", "text": "Setelah render"},
                {"id": "opt3", "text": "Hanya saat unmount"},
                {"id": "opt4", "text": "Tidak pernah"},
            ],
            "correctOptionId": "opt2",
            "explanation": "Efek berjalan setelah render. Hint: Baca lagi bagian lifecycle.",
        },
        {
            "id": "q3",
            "questionText": "Apa itu props?",
            "options": [
                {"id": "opt1", "text": "State global"},
                {"id": "opt2", "text": "Event handler"},
                {"id": "opt3", "text": "Data dari komponen induk"},
                {"id": "opt4", "text": "Hook bawaan"},
            ],
            "correctOptionId": "opt3",
            "explanation": "Props dikirim dari induk ke anak.",
        },
    ]
}

PREFERENCES_DATA = {
    "theme": "dark",
    "fontSize": "medium",
    "fontStyle": "default",
    "layoutWidth": "fullWidth",
}


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeHandle:
    def __init__(self, when: float, seq: int, callback):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Deterministic stand-in for an event loop's ``call_later``."""

    def __init__(self):
        self.now = 0.0
        self._seq = 0
        self._handles = []

    def call_later(self, delay, callback):
        self._seq += 1
        handle = FakeHandle(self.now + delay, self._seq, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self._handles if not h.cancelled]

    def advance(self, seconds: float):
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.when <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self._handles.remove(handle)
            self.now = handle.when
            handle.callback()
        self.now = target


@pytest.fixture
def assessment_data():
    """Assessment as it travels over the wire (camelCase)."""
    return copy.deepcopy(ASSESSMENT_DATA)


@pytest.fixture
def assessment(assessment_data):
    return Assessment.model_validate(assessment_data)


@pytest.fixture
def preferences_data():
    return dict(PREFERENCES_DATA)


@pytest.fixture
def preferences(preferences_data):
    return UserPreferences.model_validate(preferences_data)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    return InMemoryStore(clock=clock)


@pytest.fixture
def scheduler():
    return FakeScheduler()
