"""OpenAI chat-completions reasoning provider."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict

import openai

from adaptwell.services.reasoning.base import ReasoningError, ReasoningGateway


logger = logging.getLogger(__name__)


class OpenAIReasoningGateway(ReasoningGateway):
    def __init__(self, *, api_key: str, model: str, timeout_seconds: float) -> None:
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._client = openai.OpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=0)

    def complete(self, system_prompt: str, user_prompt: str, temperature: float) -> Dict[str, Any]:
        try:
            completion = self._client.chat.completions.create(
                model=self.model,
                response_format={"type": "json_object"},
                temperature=temperature,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except openai.APITimeoutError as exc:
            raise ReasoningError(f"reasoning call timed out after {self.timeout_seconds}s") from exc
        except openai.OpenAIError as exc:
            raise ReasoningError(str(exc)) from exc

        content = completion.choices[0].message.content or "{}"
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.debug("Non-JSON reasoning response: %s", content[:200])
            raise ReasoningError(f"malformed JSON response: {exc}") from exc
        if not isinstance(payload, dict):
            raise ReasoningError(f"expected a JSON object, got {type(payload).__name__}")
        return payload
