"""Shared OpenAI client for every language-model call in the service."""
from functools import lru_cache
from openai import AsyncOpenAI
from app.core.config import settings


@lru_cache(maxsize=1)
def get_openai_client() -> AsyncOpenAI:
    """Create the process-wide async client on first use."""
    return AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
