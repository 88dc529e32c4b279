"""Chat-model initialisation — single place to swap providers."""

from __future__ import annotations

import logging

from langchain_openai import ChatOpenAI

from oral_history_rag.config import settings

logger = logging.getLogger(__name__)


def get_llm(
    temperature: float = settings.llm_temperature,
    max_tokens: int = settings.llm_max_tokens,
) -> ChatOpenAI:
    """Return the configured chat model."""
    logger.info("Using chat model %s", settings.llm_model_name)
    return ChatOpenAI(
        model=settings.llm_model_name,
        temperature=temperature,
        max_tokens=max_tokens,
        api_key=settings.openai_api_key,
    )
