"""Reasoning gateway factory."""
from __future__ import annotations

from adaptwell.core.config import settings
from adaptwell.services.reasoning.base import ReasoningError, ReasoningGateway
from adaptwell.services.reasoning.openai_gateway import OpenAIReasoningGateway

PLACEHOLDER_KEYS = {"", "your-openai-api-key", "sk-your-openai-api-key-here"}


def has_reasoning_credentials() -> bool:
    """True when a real (non-placeholder) API key is configured."""
    key = (settings.openai_api_key or "").strip()
    return key not in PLACEHOLDER_KEYS


def get_reasoning_gateway() -> ReasoningGateway:
    if not has_reasoning_credentials():
        raise ReasoningError("OPENAI_API_KEY is not configured")
    return OpenAIReasoningGateway(
        api_key=settings.openai_api_key or "",
        model=settings.openai_model,
        timeout_seconds=settings.reasoning_timeout_seconds,
    )
