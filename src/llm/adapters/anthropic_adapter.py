# src/llm/adapters/anthropic_adapter.py — v1
"""Anthropic Claude adapter implementing BaseTextGenerator.

Uses the official anthropic SDK. Images are sent as base64 content blocks
ahead of the prompt text.
"""

from __future__ import annotations

import base64
import logging
import time
from typing import Any

from designscan.llm.base_client import BaseTextGenerator
from designscan.llm.models import TextGenerationRequest, TextGenerationResponse

logger = logging.getLogger(__name__)


class AnthropicAdapter(BaseTextGenerator):
    """Adapter for Anthropic Claude models."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        api_key: str | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-init Anthropic client (only on first API call)."""
        if self.__client is None:
            try:
                import anthropic
            except ImportError as e:
                raise ImportError(
                    "anthropic package required: pip install anthropic"
                ) from e
            self.__client = anthropic.AsyncAnthropic(api_key=self._api_key or "")
        return self.__client

    async def generate(self, request: TextGenerationRequest) -> TextGenerationResponse:
        """Single-turn completion via the Messages API."""
        params: dict[str, Any] = {
            "model": self._model,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": [{"role": "user", "content": self._content_blocks(request)}],
        }
        if request.system:
            params["system"] = request.system

        start = time.monotonic()
        response = await self._client.messages.create(**params)
        latency_ms = int((time.monotonic() - start) * 1000)

        logger.debug(
            "anthropic call: %d in / %d out tokens, %d ms",
            response.usage.input_tokens, response.usage.output_tokens, latency_ms,
        )
        return TextGenerationResponse(
            text=self._extract_text(response),
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=response.model,
            provider="anthropic",
            latency_ms=latency_ms,
            raw_response=response,
        )

    @property
    def supports_parallel_requests(self) -> bool:
        return True

    @property
    def provider_name(self) -> str:
        return "anthropic"

    # --- Internal helpers ---

    @staticmethod
    def _content_blocks(request: TextGenerationRequest) -> list[dict[str, Any]]:
        blocks: list[dict[str, Any]] = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": img.media_type,
                    "data": base64.b64encode(img.data).decode("ascii"),
                },
            }
            for img in request.images
        ]
        blocks.append({"type": "text", "text": request.prompt})
        return blocks

    @staticmethod
    def _extract_text(response: Any) -> str:
        """Concatenate text blocks of the response."""
        return "".join(
            block.text
            for block in response.content
            if getattr(block, "type", None) == "text"
        )
