from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional

HINT_DELIMITER = "Hint:"


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Option(CamelModel):
    id: str
    text: str


class Question(CamelModel):
    id: str
    question_text: str
    options: List[Option] = Field(min_length=4, max_length=4)
    correct_option_id: str
    explanation: str

    @model_validator(mode="after")
    def check_options(self):
        option_ids = [option.id for option in self.options]
        if len(set(option_ids)) != len(option_ids):
            raise ValueError(f"Duplicate option ids in question {self.id}")
        if option_ids.count(self.correct_option_id) != 1:
            raise ValueError(
                f"correctOptionId {self.correct_option_id!r} does not match an option of question {self.id}"
            )
        return self

    @property
    def concept(self) -> str:
        """Explanation text before the hint delimiter."""
        return self.explanation.split(HINT_DELIMITER, 1)[0].strip()

    @property
    def hint(self) -> Optional[str]:
        parts = self.explanation.split(HINT_DELIMITER, 1)
        if len(parts) < 2:
            return None
        return parts[1].strip() or None


class Assessment(CamelModel):
    questions: List[Question] = Field(min_length=3, max_length=3)
    cached_at: Optional[str] = None

    @model_validator(mode="after")
    def check_question_ids(self):
        question_ids = [question.id for question in self.questions]
        if len(set(question_ids)) != len(question_ids):
            raise ValueError("Duplicate question ids in assessment")
        return self


class UserPreferences(CamelModel):
    theme: Literal["dark", "light"]
    font_size: Literal["small", "medium", "large"]
    font_style: Literal["default", "serif", "mono"]
    layout_width: Literal["standard", "fullWidth"]


class AssessmentResponse(CamelModel):
    assessment: Assessment
    user_preferences: UserPreferences
    from_cache: bool


class PreferencesResponse(CamelModel):
    user_preferences: UserPreferences


class ErrorResponse(BaseModel):
    error: str
    message: str


class HTTPErrorResponse(BaseModel):
    """Error body as sent by the API: the error payload under ``detail``."""
    detail: ErrorResponse
