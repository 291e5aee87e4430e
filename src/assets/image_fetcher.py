# src/assets/image_fetcher.py — v1
"""Batch retrieval of rendered artifact images with per-slug caching.

One render call per document covers every artifact missing from the cache.
Artifacts the service cannot render are reported in ``failed``; analysis
proceeds for them without an image.
"""

from __future__ import annotations

import logging

from designscan.cache.base_cache_store import BaseCacheStore
from designscan.core.models import VisualArtifact
from designscan.upstream.base_services import BaseImageService
from designscan.upstream.models import ImageBatchResult, RenderedImage

logger = logging.getLogger(__name__)

MEDIA_TYPES = {"png": "image/png", "jpg": "image/jpeg"}


async def fetch_images(
    document_id: str,
    artifacts: list[VisualArtifact],
    image_service: BaseImageService,
    cache_store: BaseCacheStore | None = None,
    fmt: str = "png",
    scale: float = 1.0,
) -> ImageBatchResult:
    """Return images for ``artifacts``, loading cached ones from the store.

    Raises:
        UpstreamError: The batched render call itself failed.
    """
    result = ImageBatchResult()
    if not artifacts:
        return result

    media_type = MEDIA_TYPES.get(fmt, f"image/{fmt}")
    missing: list[VisualArtifact] = []
    for artifact in artifacts:
        data = None
        if cache_store is not None:
            data = await cache_store.load_image(document_id, artifact.filename_slug, fmt)
        if data is None:
            missing.append(artifact)
            continue
        result.images[artifact.artifact_id] = RenderedImage(
            artifact_id=artifact.artifact_id, data=data, media_type=media_type
        )

    if not missing:
        logger.info("All %d images loaded from cache", len(artifacts))
        return result

    logger.info(
        "Rendering %d images (%d cached)", len(missing), len(result.images)
    )
    rendered = await image_service.render_images(
        document_id, [a.artifact_id for a in missing], fmt=fmt, scale=scale
    )

    for artifact in missing:
        image = rendered.images.get(artifact.artifact_id)
        if image is None:
            logger.warning("No image for artifact %s", artifact.artifact_id)
            result.failed.append(artifact.artifact_id)
            continue
        result.images[artifact.artifact_id] = image
        if cache_store is not None:
            await cache_store.save_image(
                document_id, artifact.filename_slug, fmt, image.data
            )

    return result
