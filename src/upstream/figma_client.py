# src/upstream/figma_client.py — v1
"""Figma REST API implementation of the content, comment and image services.

Endpoints used (all relative to ``FIGMA_API_BASE_URL``):
    GET /files/:key/meta        -> probe_metadata
    GET /files/:key/nodes?ids=  -> fetch_nodes
    GET /files/:key/comments    -> fetch_comments
    GET /images/:key?ids=       -> render_images (then CDN downloads)

HTTP failures are mapped onto the workflow error taxonomy; nothing here
retries.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from designscan.config.settings import Settings
from designscan.core.errors import (
    RateLimitedError,
    TransientUpstreamError,
    UpstreamAccessError,
    UpstreamError,
)
from designscan.upstream.base_services import (
    BaseCommentService,
    BaseContentService,
    BaseImageService,
)
from designscan.upstream.models import (
    FileMetadata,
    ImageBatchResult,
    RawComment,
    RenderedImage,
)

logger = logging.getLogger(__name__)

OAUTH_TOKEN_PREFIX = "figu_"

_MEDIA_TYPES = {"png": "image/png", "jpg": "image/jpeg", "svg": "image/svg+xml"}


def auth_headers(token: str) -> dict[str, str]:
    """OAuth tokens go in ``Authorization``, personal tokens in ``X-Figma-Token``."""
    if token.startswith(OAUTH_TOKEN_PREFIX):
        return {"Authorization": f"Bearer {token}"}
    return {"X-Figma-Token": token}


def raise_for_upstream_status(response: httpx.Response, operation: str) -> None:
    """Translate a non-success response into the error taxonomy."""
    status = response.status_code
    if status < 400:
        return

    if status == 429:
        retry_after = _parse_retry_after(response.headers.get("Retry-After"))
        raise RateLimitedError(
            f"{operation}: rate limited by upstream",
            retry_after=retry_after,
            operation=operation,
        )
    if status >= 500:
        raise TransientUpstreamError(
            f"{operation}: upstream server error {status}",
            status_code=status,
            operation=operation,
        )
    if status in (401, 403, 404):
        raise UpstreamAccessError(
            f"{operation}: access denied or not found ({status})",
            status_code=status,
            operation=operation,
        )
    raise UpstreamError(
        f"{operation}: unexpected status {status}",
        status_code=status,
        operation=operation,
    )


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class FigmaClient(BaseContentService, BaseCommentService, BaseImageService):
    """Async Figma REST client built on ``httpx.AsyncClient``.

    Args:
        token: Personal access token or OAuth token.
        base_url: API root, e.g. ``https://api.figma.com/v1``.
        timeout_s: Per-request timeout in seconds.
        http_client: Pre-configured client (tests inject a MockTransport).
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.figma.com/v1",
        timeout_s: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)

    @classmethod
    def from_settings(cls, settings: Settings) -> FigmaClient:
        return cls(
            token=settings.figma_api_token,
            base_url=settings.figma_api_base_url,
            timeout_s=settings.figma_request_timeout_s,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> FigmaClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- Content service ---

    async def probe_metadata(self, document_id: str) -> FileMetadata:
        data = await self._get_json(f"/files/{document_id}/meta", operation="probe_metadata")
        try:
            file_info = data.get("file", data)
            last_touched_by = file_info.get("last_touched_by") or {}
            return FileMetadata(
                document_id=document_id,
                upstream_timestamp=file_info["last_touched_at"],
                name=file_info.get("name"),
                version=file_info.get("version"),
                last_editor=last_touched_by.get("handle"),
            )
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise UpstreamError(
                f"probe_metadata: malformed metadata for {document_id}: {e}",
                operation="probe_metadata",
            ) from e

    async def fetch_nodes(
        self, document_id: str, node_ids: list[str]
    ) -> dict[str, dict[str, Any]]:
        if not node_ids:
            return {}
        data = await self._get_json(
            f"/files/{document_id}/nodes",
            params={"ids": ",".join(node_ids)},
            operation="fetch_nodes",
        )
        nodes: dict[str, dict[str, Any]] = {}
        for node_id, entry in (data.get("nodes") or {}).items():
            document = (entry or {}).get("document")
            if document is None:
                logger.warning("Node %s not found in document %s", node_id, document_id)
                continue
            nodes[node_id] = document
        return nodes

    # --- Comment service ---

    async def fetch_comments(self, document_id: str) -> list[RawComment]:
        data = await self._get_json(
            f"/files/{document_id}/comments", operation="fetch_comments"
        )
        return [parse_comment(raw) for raw in data.get("comments", [])]

    # --- Image service ---

    async def render_images(
        self,
        document_id: str,
        node_ids: list[str],
        fmt: str = "png",
        scale: float = 1.0,
    ) -> ImageBatchResult:
        result = ImageBatchResult()
        if not node_ids:
            return result

        data = await self._get_json(
            f"/images/{document_id}",
            params={"ids": ",".join(node_ids), "format": fmt, "scale": str(scale)},
            operation="render_images",
        )
        if data.get("err"):
            raise UpstreamError(
                f"render_images: {data['err']}", operation="render_images"
            )

        urls: dict[str, str | None] = data.get("images") or {}
        media_type = _MEDIA_TYPES.get(fmt, f"image/{fmt}")

        to_download: list[tuple[str, str]] = []
        for node_id in node_ids:
            url = urls.get(node_id)
            if url:
                to_download.append((node_id, url))
            else:
                logger.warning("No render URL for node %s", node_id)
                result.failed.append(node_id)

        downloads = await asyncio.gather(
            *(self._download(url) for _, url in to_download)
        )
        for (node_id, _), payload in zip(to_download, downloads):
            if payload is None:
                result.failed.append(node_id)
                continue
            result.images[node_id] = RenderedImage(
                artifact_id=node_id, data=payload, media_type=media_type
            )
        return result

    # --- Internals ---

    async def _get_json(
        self,
        path: str,
        params: dict[str, str] | None = None,
        operation: str = "request",
    ) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.get(
                url, params=params, headers=auth_headers(self._token)
            )
        except httpx.TransportError as e:
            raise TransientUpstreamError(
                f"{operation}: network error: {e}", operation=operation
            ) from e

        raise_for_upstream_status(response, operation)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"{operation}: invalid JSON payload",
                status_code=response.status_code,
                operation=operation,
            ) from e

    async def _download(self, url: str) -> bytes | None:
        """Fetch a rendered image from the CDN; failures are reported, not raised."""
        try:
            response = await self._client.get(url)
        except httpx.TransportError as e:
            logger.warning("Image download failed: %s", e)
            return None
        if response.status_code != 200:
            logger.warning("Image download returned %d", response.status_code)
            return None
        return response.content


def parse_comment(raw: dict[str, Any]) -> RawComment:
    """Convert one Figma comment payload into a RawComment.

    Raises:
        UpstreamError: If the payload lacks ``id`` or ``created_at`` or
            carries values of the wrong shape.
    """
    try:
        return _parse_comment(raw)
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise UpstreamError(
            f"fetch_comments: malformed comment payload: {e}",
            operation="fetch_comments",
        ) from e


def _parse_comment(raw: dict[str, Any]) -> RawComment:
    anchor_node_id: str | None = None
    anchor_offset: tuple[float, float] | None = None
    anchor_point: tuple[float, float] | None = None

    client_meta = raw.get("client_meta") or {}
    if client_meta.get("node_id"):
        anchor_node_id = client_meta["node_id"]
        offset = client_meta.get("node_offset")
        if offset:
            anchor_offset = (offset.get("x", 0.0), offset.get("y", 0.0))
    elif "x" in client_meta and "y" in client_meta:
        anchor_point = (client_meta["x"], client_meta["y"])

    user = raw.get("user") or {}
    return RawComment(
        id=str(raw["id"]),
        message=raw.get("message", ""),
        created_at=raw["created_at"],
        resolved_at=raw.get("resolved_at") or None,
        author=user.get("handle"),
        parent_id=raw.get("parent_id") or None,
        anchor_node_id=anchor_node_id,
        anchor_offset=anchor_offset,
        anchor_point=anchor_point,
    )
