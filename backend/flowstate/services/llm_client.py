"""OpenAI client construction."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

import openai

from flowstate.core.config import settings

logger = logging.getLogger(__name__)


@lru_cache
def get_llm_client() -> Optional[openai.OpenAI]:
    """Return a shared OpenAI client, or None when no API key is configured."""
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY missing; plan generation and extraction are unavailable.")
        return None
    return openai.OpenAI(api_key=settings.openai_api_key)
