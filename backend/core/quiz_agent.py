# backend/core/quiz_agent.py
import json
import logging
import re
from typing import Any, Optional

from langchain_core.messages import HumanMessage
from pydantic import ValidationError

from backend.core.errors import GenerationFailed, ERROR_MESSAGES
from backend.models.schemas import Assessment
from backend.prompts import quiz_prompts

logger = logging.getLogger(__name__)


class QuestionGenerator:
    """
    Turns cleaned tutorial text into a validated Assessment via the LLM.

    Fails closed: provider errors, empty output, unparseable JSON and
    structurally invalid questions all raise GenerationFailed.
    """
    def __init__(self, llm, language: str = "Bahasa Indonesia", question_count: int = 3):
        self.llm = llm
        self.language = language
        self.question_count = question_count

    async def generate(self, text_content: str) -> Assessment:
        prompt = quiz_prompts.ASSESSMENT_GENERATION_TEMPLATE.format(
            n=self.question_count, language=self.language, content=text_content
        )
        try:
            raw = await self.llm.generate_response([HumanMessage(content=prompt)])
        except Exception as e:
            raise GenerationFailed(ERROR_MESSAGES["GEMINI_GENERATION_FAILED"]) from e

        if not raw or not raw.strip():
            logger.error("Empty response from question generator")
            raise GenerationFailed(ERROR_MESSAGES["EMPTY_GEMINI_RESPONSE"])

        data = parse_assessment_json(raw)
        if data is None:
            logger.error(f"Could not parse generator output as JSON: {raw[:200]}")
            raise GenerationFailed(ERROR_MESSAGES["GEMINI_GENERATION_FAILED"])

        try:
            return Assessment.model_validate(data)
        except ValidationError as e:
            logger.error(f"Generator output failed validation: {e}")
            raise GenerationFailed(ERROR_MESSAGES["GEMINI_GENERATION_FAILED"]) from e


def parse_assessment_json(raw_text: str) -> Optional[dict]:
    """Extract the assessment object from LLM output. Returns None on failure."""
    data = _try_parse_json(raw_text)

    # Try extracting from markdown code block
    if data is None:
        match = re.search(r"```(?:json)?\s*(\{.+?})\s*```", raw_text, re.DOTALL)
        if match:
            data = _try_parse_json(match.group(1))

    # Try finding an object in the text
    if data is None:
        match = re.search(r"(\{.+})", raw_text, re.DOTALL)
        if match:
            data = _try_parse_json(match.group(1))

    # Bare list of questions
    if isinstance(data, list):
        data = {"questions": data}

    return data if isinstance(data, dict) else None


def _try_parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
