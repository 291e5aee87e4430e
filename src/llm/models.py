# src/llm/models.py — v1
"""Text-generation types: ImageInput, TextGenerationRequest, TextGenerationResponse."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ImageInput(BaseModel):
    """Image payload sent alongside the prompt."""

    data: bytes
    media_type: str
    source_id: str | None = None


class TextGenerationRequest(BaseModel):
    """One self-contained generation call: system prompt, user prompt, images."""

    prompt: str
    system: str | None = None
    images: list[ImageInput] = Field(default_factory=list)
    max_tokens: int = 2000
    temperature: float = 0.2


class TextGenerationResponse(BaseModel):
    """Normalized response from any text generator."""

    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""
    provider: str = ""
    latency_ms: int = 0
    raw_response: Any = None
