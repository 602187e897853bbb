import os
from typing import Optional

from langchain_openai import ChatOpenAI
from pydantic import SecretStr

from medlearn.core.config import settings


def _enable_langsmith(project: Optional[str]) -> None:
    os.environ["LANGCHAIN_TRACING_V2"] = "true"
    os.environ["LANGCHAIN_ENDPOINT"] = settings.LANGSMITH_ENDPOINT
    os.environ["LANGCHAIN_API_KEY"] = settings.LANGSMITH_API_KEY
    os.environ["LANGCHAIN_PROJECT"] = project or settings.LANGSMITH_PROJECT


class LLMFactory:
    """Builds the chat model used by the medical assistant."""

    @staticmethod
    def create_llm(
        temperature: Optional[float] = None,
        tracing_project: Optional[str] = None,
    ) -> ChatOpenAI:
        """
        Create a ChatOpenAI client from the configured model and key.

        Args:
            temperature: Sampling temperature (defaults to settings.LLM_TEMPERATURE)
            tracing_project: LangSmith project to report runs under

        Returns:
            ChatOpenAI instance; ``invoke`` and ``stream`` both work on it
        """
        if settings.LANGSMITH_TRACING:
            _enable_langsmith(tracing_project)

        return ChatOpenAI(
            model=settings.LLM_MODEL,
            api_key=SecretStr(settings.OPENAI_API_KEY),
            temperature=settings.LLM_TEMPERATURE if temperature is None else temperature,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )
