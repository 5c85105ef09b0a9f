from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.messages import BaseMessage
from typing import List
import logging

logger = logging.getLogger(__name__)

class GeminiLLMWrapper:
    def __init__(self, api_key: str, model: str, temperature: float = 0.3, max_output_tokens: int = 4096):
        """Initialize with explicit credentials; key validation happens at startup"""
        self.model = model
        self.llm = ChatGoogleGenerativeAI(
            google_api_key=api_key,
            model=model,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_mime_type="application/json",
        )

    async def generate_response(
        self,
        messages: List[BaseMessage],
        **kwargs
    ) -> str:
        try:
            response = await self.llm.ainvoke(messages, **kwargs)
        except Exception as e:
            logger.error(f"LLM generation error ({self.model}): {e}")
            raise
        content = response.content
        if isinstance(content, list):
            content = "".join(part if isinstance(part, str) else part.get("text", "") for part in content)
        return content
