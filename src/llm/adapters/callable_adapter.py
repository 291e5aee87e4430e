# src/llm/adapters/callable_adapter.py — v1
"""Wrap a plain function as a BaseTextGenerator.

For callers that own their generation channel (an MCP sampling session, a
test double). When the channel does not tolerate concurrent calls, calls are
queued behind a lock so even concurrent callers reach it one at a time.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Union

from designscan.llm.base_client import BaseTextGenerator
from designscan.llm.models import TextGenerationRequest, TextGenerationResponse

logger = logging.getLogger(__name__)

GenerateResult = Union[str, TextGenerationResponse]
GenerateFn = Callable[
    [TextGenerationRequest], Union[GenerateResult, Awaitable[GenerateResult]]
]


class CallableTextGenerator(BaseTextGenerator):
    """Adapter around ``fn(request) -> str | TextGenerationResponse``.

    Args:
        fn: Sync or async generation function.
        supports_parallel_requests: Whether ``fn`` may run concurrently.
        name: Provider label used in responses.
    """

    def __init__(
        self,
        fn: GenerateFn,
        supports_parallel_requests: bool = False,
        name: str = "callable",
    ) -> None:
        self._fn = fn
        self._parallel = supports_parallel_requests
        self._name = name
        self._lock = asyncio.Lock()

    async def generate(self, request: TextGenerationRequest) -> TextGenerationResponse:
        if self._parallel:
            return await self._call(request)
        async with self._lock:
            return await self._call(request)

    async def _call(self, request: TextGenerationRequest) -> TextGenerationResponse:
        result: Any = self._fn(request)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, TextGenerationResponse):
            return result
        return TextGenerationResponse(text=str(result), provider=self._name)

    @property
    def supports_parallel_requests(self) -> bool:
        return self._parallel

    @property
    def provider_name(self) -> str:
        return self._name
