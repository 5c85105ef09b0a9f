import json
import math
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from frontend.constants import RESULT_MESSAGES, STORAGE_KEY_PREFIX

logger = logging.getLogger(__name__)

HINT_DELIMITER = "Hint:"


class QuizPhase(str, Enum):
    INTRO = "intro"
    IN_PROGRESS = "in_progress"
    OVER = "over"


def session_key_for(user_id: str, tutorial_id: str, prefix: str = STORAGE_KEY_PREFIX) -> str:
    return f"{prefix}-{user_id}-{tutorial_id}"


class QuizStore:
    """
    Quiz progress for one (user, tutorial) session at a time.

    State is only changed through the methods below; each mutation writes the
    progress fields (index, selections, submissions, quiz_over) to the slot
    of the active session key in ``storage``. Questions are not persisted.

    ``storage`` is any object with ``get_item``/``set_item``/``remove_item``
    (see frontend.storage).
    """

    def __init__(self, storage, key_prefix: str = STORAGE_KEY_PREFIX):
        self.storage = storage
        self.key_prefix = key_prefix
        self.session_key: Optional[str] = None
        self.questions: List[Dict[str, Any]] = []
        self._set_defaults()

    def _set_defaults(self):
        self.current_question_index = 0
        self.selected_answers: Dict[str, str] = {}
        self.submitted_answers: Set[str] = set()
        self.quiz_over = False

    # --- derived state ---

    @property
    def phase(self) -> QuizPhase:
        if self.quiz_over:
            return QuizPhase.OVER
        if self.questions:
            return QuizPhase.IN_PROGRESS
        return QuizPhase.INTRO

    @property
    def current_question(self) -> Optional[Dict[str, Any]]:
        if 0 <= self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.current_question_index >= len(self.questions) - 1

    def score(self) -> int:
        return calculate_score(self.questions, self.selected_answers)

    # --- persistence ---

    def _snapshot(self) -> Dict[str, Any]:
        return {
            "currentQuestionIndex": self.current_question_index,
            "selectedAnswers": dict(self.selected_answers),
            "submittedAnswers": sorted(self.submitted_answers),
            "quizOver": self.quiz_over,
        }

    def _persist(self):
        if self.session_key is None:
            return
        self.storage.set_item(self.session_key, json.dumps(self._snapshot()))

    def _load(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self.storage.get_item(key)
        if not raw:
            return None
        try:
            saved = json.loads(raw)
            return {
                "current_question_index": int(saved.get("currentQuestionIndex", 0)),
                "selected_answers": {str(q): str(o) for q, o in saved.get("selectedAnswers", {}).items()},
                "submitted_answers": set(saved.get("submittedAnswers", [])),
                "quiz_over": bool(saved.get("quizOver", False)),
            }
        except (ValueError, TypeError, AttributeError) as e:
            logger.error(f"Failed to parse saved state for {key}: {e}")
            return None

    # --- transitions ---

    def initialize(self, user_id: str, tutorial_id: str):
        """Switch to the (user, tutorial) session, restoring its saved progress."""
        key = session_key_for(user_id, tutorial_id, self.key_prefix)
        if self.session_key == key:
            return

        saved = self._load(key)
        self._set_defaults()
        if saved:
            self.current_question_index = saved["current_question_index"]
            self.selected_answers = saved["selected_answers"]
            self.submitted_answers = saved["submitted_answers"]
            self.quiz_over = saved["quiz_over"]
            logger.info(f"Restored quiz progress for {key}")
        # questions belong to the previous session
        self.questions = []
        self.session_key = key

    def set_questions(self, questions: List[Dict[str, Any]]):
        self.questions = list(questions)

    def select_answer(self, question_id: str, option_id: str):
        if question_id in self.submitted_answers:
            return
        self.selected_answers[question_id] = option_id
        self._persist()

    def submit_answer(self, question_id: str):
        self.submitted_answers.add(question_id)
        self._persist()

    def next_question(self):
        if self.quiz_over:
            return
        if self.is_last_question:
            self.quiz_over = True
        else:
            self.current_question_index += 1
        self._persist()

    def finish_quiz(self):
        self.quiz_over = True
        self._persist()

    def reset(self):
        """Clear progress and questions; the active session key is kept."""
        self._set_defaults()
        self.questions = []
        self._persist()


def calculate_score(questions: List[Dict[str, Any]], selected_answers: Dict[str, str]) -> int:
    """Percentage of questions answered correctly, rounded half up; 0 with no questions."""
    total = len(questions)
    if total == 0:
        return 0
    correct = sum(
        1 for question in questions
        if selected_answers.get(question["id"]) == question["correctOptionId"]
    )
    return int(math.floor(100 * correct / total + 0.5))


def result_message(percentage: int) -> Dict[str, str]:
    if percentage == 100:
        return RESULT_MESSAGES["PERFECT"]
    if percentage >= 80:
        return RESULT_MESSAGES["EXCELLENT"]
    if percentage >= 50:
        return RESULT_MESSAGES["GOOD"]
    return RESULT_MESSAGES["NEED_IMPROVEMENT"]


def split_explanation(explanation: str) -> Dict[str, Optional[str]]:
    """Split an explanation into its concept text and the optional hint after ``Hint:``."""
    parts = explanation.split(HINT_DELIMITER, 1)
    hint = parts[1].strip() if len(parts) > 1 else None
    return {"concept": parts[0].strip(), "hint": hint or None}
