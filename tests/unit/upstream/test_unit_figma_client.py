# tests/unit/upstream/test_figma_client.py — v1
"""Tests for upstream/figma_client.py over an httpx.MockTransport."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from designscan.core.errors import (
    RateLimitedError,
    TransientUpstreamError,
    UpstreamAccessError,
    UpstreamError,
)
from designscan.upstream.figma_client import FigmaClient, auth_headers, parse_comment

BASE = "https://api.figma.com/v1"


def _client(handler, token: str = "pat-token") -> FigmaClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FigmaClient(token=token, base_url=BASE, http_client=http)


class TestAuthHeaders:
    def test_personal_token(self):
        assert auth_headers("abc") == {"X-Figma-Token": "abc"}

    def test_oauth_token(self):
        assert auth_headers("figu_xyz") == {"Authorization": "Bearer figu_xyz"}


class TestProbeMetadata:
    @pytest.mark.asyncio
    async def test_parses_meta(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"file": {
                "name": "Checkout",
                "last_touched_at": "2026-01-10T09:00:00Z",
                "version": "123",
                "last_touched_by": {"handle": "ana"},
            }})

        client = _client(handler)
        meta = await client.probe_metadata("KEY")
        assert meta.document_id == "KEY"
        assert meta.upstream_timestamp == datetime(2026, 1, 10, 9, tzinfo=timezone.utc)
        assert meta.name == "Checkout"
        assert meta.last_editor == "ana"
        assert seen[0].url.path == "/v1/files/KEY/meta"
        assert seen[0].headers["X-Figma-Token"] == "pat-token"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"file": {"name": "x"}},
        {"file": {"last_touched_at": "yesterday"}},
        {"file": "not-an-object"},
    ])
    async def test_malformed_meta_is_upstream_error(self, payload):
        client = _client(lambda r: httpx.Response(200, json=payload))
        with pytest.raises(UpstreamError) as exc:
            await client.probe_metadata("KEY")
        assert exc.value.operation == "probe_metadata"
        assert not isinstance(exc.value, TransientUpstreamError)


class TestStatusMapping:
    @pytest.mark.asyncio
    async def test_rate_limited(self):
        client = _client(lambda r: httpx.Response(429, headers={"Retry-After": "30"}))
        with pytest.raises(RateLimitedError) as exc:
            await client.probe_metadata("KEY")
        assert exc.value.retry_after == 30.0
        assert exc.value.retry_recommended is True

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self):
        client = _client(lambda r: httpx.Response(502))
        with pytest.raises(TransientUpstreamError) as exc:
            await client.probe_metadata("KEY")
        assert exc.value.status_code == 502

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403, 404])
    async def test_access_errors(self, status):
        client = _client(lambda r: httpx.Response(status))
        with pytest.raises(UpstreamAccessError) as exc:
            await client.probe_metadata("KEY")
        assert exc.value.retry_recommended is False

    @pytest.mark.asyncio
    async def test_other_client_error(self):
        client = _client(lambda r: httpx.Response(400))
        with pytest.raises(UpstreamError) as exc:
            await client.probe_metadata("KEY")
        assert not isinstance(exc.value, (TransientUpstreamError, UpstreamAccessError))

    @pytest.mark.asyncio
    async def test_network_error_is_transient(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(TransientUpstreamError):
            await _client(handler).probe_metadata("KEY")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client = _client(lambda r: httpx.Response(200, content=b"<html>"))
        with pytest.raises(UpstreamError, match="invalid JSON"):
            await client.probe_metadata("KEY")


class TestFetchNodes:
    @pytest.mark.asyncio
    async def test_one_call_missing_ids_skipped(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"nodes": {
                "1:2": {"document": {"id": "1:2", "type": "FRAME"}},
                "9:9": None,
            }})

        nodes = await _client(handler).fetch_nodes("KEY", ["1:2", "9:9"])
        assert nodes == {"1:2": {"id": "1:2", "type": "FRAME"}}
        assert len(seen) == 1
        assert seen[0].url.params["ids"] == "1:2,9:9"

    @pytest.mark.asyncio
    async def test_no_ids_no_call(self):
        def handler(request):
            raise AssertionError("unexpected request")

        assert await _client(handler).fetch_nodes("KEY", []) == {}


class TestComments:
    @pytest.mark.asyncio
    async def test_fetch_comments(self):
        payload = {"comments": [
            {
                "id": "c1", "message": "Fix padding",
                "created_at": "2026-01-10T09:00:00Z",
                "user": {"handle": "ana"},
                "client_meta": {"node_id": "1:2", "node_offset": {"x": 4, "y": 8}},
                "parent_id": "",
            },
            {
                "id": "c2", "message": "Agreed",
                "created_at": "2026-01-10T10:00:00Z",
                "user": {"handle": "bo"},
                "parent_id": "c1",
            },
        ]}
        comments = await _client(lambda r: httpx.Response(200, json=payload)).fetch_comments("KEY")
        assert [c.id for c in comments] == ["c1", "c2"]
        assert comments[0].parent_id is None
        assert comments[0].anchor_node_id == "1:2"
        assert comments[0].anchor_offset == (4, 8)
        assert comments[1].parent_id == "c1"

    def test_parse_point_anchor(self):
        c = parse_comment({
            "id": 7, "message": "here", "created_at": "2026-01-10T09:00:00Z",
            "client_meta": {"x": 120.5, "y": 40},
            "resolved_at": "2026-01-11T09:00:00Z",
        })
        assert c.id == "7"
        assert c.anchor_point == (120.5, 40)
        assert c.anchor_node_id is None
        assert c.resolved_at is not None
        assert c.author is None

    @pytest.mark.parametrize("raw", [
        {"message": "no id", "created_at": "2026-01-10T09:00:00Z"},
        {"id": "c1", "message": "no timestamp"},
        {"id": "c1", "message": "bad", "created_at": "soon"},
    ])
    def test_malformed_comment_is_upstream_error(self, raw):
        with pytest.raises(UpstreamError) as exc:
            parse_comment(raw)
        assert exc.value.operation == "fetch_comments"

    @pytest.mark.asyncio
    async def test_malformed_comment_fails_fetch(self):
        payload = {"comments": [{"id": "c1", "message": "x"}]}
        client = _client(lambda r: httpx.Response(200, json=payload))
        with pytest.raises(UpstreamError):
            await client.fetch_comments("KEY")


class TestRenderImages:
    @pytest.mark.asyncio
    async def test_render_and_download(self):
        seen: list[str] = []

        def handler(request):
            seen.append(str(request.url))
            if request.url.host == "api.figma.com":
                assert request.url.params["format"] == "png"
                return httpx.Response(200, json={"err": None, "images": {
                    "1:2": "https://cdn.example/1-2.png",
                    "3:4": None,
                }})
            return httpx.Response(200, content=b"PNGDATA")

        result = await _client(handler).render_images("KEY", ["1:2", "3:4"])
        assert set(result.images) == {"1:2"}
        assert result.images["1:2"].data == b"PNGDATA"
        assert result.images["1:2"].media_type == "image/png"
        assert result.failed == ["3:4"]
        assert len(seen) == 2

    @pytest.mark.asyncio
    async def test_failed_download_is_reported(self):
        def handler(request):
            if request.url.host == "api.figma.com":
                return httpx.Response(200, json={"images": {"1:2": "https://cdn.example/x"}})
            return httpx.Response(403)

        result = await _client(handler).render_images("KEY", ["1:2"], fmt="jpg")
        assert result.images == {}
        assert result.failed == ["1:2"]

    @pytest.mark.asyncio
    async def test_batch_error(self):
        client = _client(lambda r: httpx.Response(200, json={"err": "Invalid ids"}))
        with pytest.raises(UpstreamError, match="Invalid ids"):
            await client.render_images("KEY", ["x"])


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        async with FigmaClient(token="t", http_client=http):
            pass
        assert not http.is_closed
        await http.aclose()
