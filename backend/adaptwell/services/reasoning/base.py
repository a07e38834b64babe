"""Reasoning gateway interface."""
from __future__ import annotations

from typing import Any, Dict


class ReasoningError(RuntimeError):
    """Raised when the reasoning model cannot produce a JSON object."""


class ReasoningGateway:
    """Base interface for structured-JSON reasoning providers."""

    def complete(self, system_prompt: str, user_prompt: str, temperature: float) -> Dict[str, Any]:
        """Return the model's reply parsed as a JSON object or raise ReasoningError."""
        raise NotImplementedError
