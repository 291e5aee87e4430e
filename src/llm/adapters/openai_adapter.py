# src/llm/adapters/openai_adapter.py — v1
"""OpenAI GPT adapter implementing BaseTextGenerator.

Uses the official openai SDK (chat completions with image_url data URIs).
"""

from __future__ import annotations

import base64
import time
from typing import Any

from designscan.llm.base_client import BaseTextGenerator
from designscan.llm.models import TextGenerationRequest, TextGenerationResponse


class OpenAIAdapter(BaseTextGenerator):
    """OpenAI GPT adapter."""

    def __init__(self, model: str = "gpt-4o", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key
        self._client = None

    async def generate(self, request: TextGenerationRequest) -> TextGenerationResponse:
        import openai

        if self._client is None:
            self._client = openai.AsyncOpenAI(api_key=self._api_key)

        oai_messages: list[dict[str, Any]] = []
        if request.system:
            oai_messages.append({"role": "system", "content": request.system})

        content_parts: list[dict[str, Any]] = [{"type": "text", "text": request.prompt}]
        for img in request.images:
            b64 = base64.b64encode(img.data).decode()
            content_parts.append({
                "type": "image_url",
                "image_url": {"url": f"data:{img.media_type};base64,{b64}"},
            })
        oai_messages.append({"role": "user", "content": content_parts})

        t0 = time.monotonic()
        resp = await self._client.chat.completions.create(
            model=self._model,
            messages=oai_messages,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )
        latency = int((time.monotonic() - t0) * 1000)

        choice = resp.choices[0]
        usage = resp.usage
        return TextGenerationResponse(
            text=choice.message.content or "",
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=self._model,
            provider="openai",
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def supports_parallel_requests(self) -> bool:
        return True

    @property
    def provider_name(self) -> str:
        return "openai"
