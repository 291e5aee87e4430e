# src/api/facade.py — v1
"""Public API facade — single entry point for screen analysis.

Usage:
    from designscan.api.facade import analyze_screens
    result = await analyze_screens(["https://www.figma.com/design/KEY/x?node-id=1-2"])

Collaborators default to the Figma REST client, the configured cache backend
and the configured text generator; each can be injected instead.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from designscan.cache.cache_factory import create_cache_store
from designscan.config.settings import Settings, load_settings
from designscan.llm.client_factory import create_text_generator
from designscan.logging.logger import setup_logging_from_settings
from designscan.pipeline.orchestrator import Notifier, ScreenAnalysisOrchestrator
from designscan.upstream.figma_client import FigmaClient

if TYPE_CHECKING:
    from designscan.cache.base_cache_store import BaseCacheStore
    from designscan.core.models import VisualArtifact
    from designscan.llm.base_client import BaseTextGenerator
    from designscan.pipeline.state import WorkflowResult

logger = logging.getLogger(__name__)


async def analyze_screens(
    references: list[str] | None = None,
    artifacts: list[VisualArtifact] | None = None,
    context: str | None = None,
    settings: Settings | None = None,
    generator: BaseTextGenerator | None = None,
    cache_store: BaseCacheStore | None = None,
    figma_client: FigmaClient | None = None,
    notifier: Notifier | None = None,
    configure_logging: bool = False,
) -> WorkflowResult:
    """Analyze design screens end-to-end.

    Args:
        references: Raw document references (URLs or ``KEY:NODE``).
        artifacts: Pre-resolved artifacts (instead of references).
        context: Free-text context added to every analysis prompt.
        settings: Global settings. Loaded from .env if None.
        generator: Text generator. Built from settings if None.
        cache_store: Cache backend. Built from settings if None.
        figma_client: Figma client. Built from settings (and closed) if None.
        notifier: Optional async progress callback.
        configure_logging: Apply the logging section of ``settings`` first.

    Returns:
        WorkflowResult with analyses and per-document cache outcomes.
    """
    settings = settings or load_settings()
    if configure_logging:
        setup_logging_from_settings(settings)

    generator = generator or create_text_generator(settings=settings)
    cache_store = cache_store or create_cache_store(settings)

    owns_client = figma_client is None
    client = figma_client or FigmaClient.from_settings(settings)

    orchestrator = ScreenAnalysisOrchestrator(
        content_service=client,
        comment_service=client,
        image_service=client,
        generator=generator,
        cache_store=cache_store,
        settings=settings,
        notifier=notifier,
    )
    try:
        return await orchestrator.run(
            references=references, artifacts=artifacts, context=context
        )
    finally:
        if owns_client:
            await client.aclose()
