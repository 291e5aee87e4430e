# src/llm/base_client.py — v1
"""Abstract text-generator interface.

The single capability flag ``supports_parallel_requests`` tells the
orchestrator whether several calls may be in flight at once.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from designscan.llm.models import TextGenerationRequest, TextGenerationResponse


class BaseTextGenerator(ABC):
    """Unified interface for all text-generation backends."""

    @abstractmethod
    async def generate(self, request: TextGenerationRequest) -> TextGenerationResponse:
        """Run one generation call."""

    @property
    def supports_parallel_requests(self) -> bool:
        """Whether concurrent ``generate`` calls are safe. Off unless declared."""
        return False

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (anthropic, openai, callable)."""
