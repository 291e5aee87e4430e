# tests/unit/core/test_errors.py — v1
"""Tests for core/errors.py — error taxonomy."""

from __future__ import annotations

from designscan.core.errors import (
    DesignScanError,
    MalformedReferenceError,
    RateLimitedError,
    TextGenerationError,
    TransientUpstreamError,
    UpstreamAccessError,
    UpstreamError,
)


class TestErrorTaxonomy:
    def test_malformed_reference_names_input(self):
        err = MalformedReferenceError("bad-ref", "expected <document>:<node>")
        assert "bad-ref" in str(err)
        assert isinstance(err, ValueError)
        assert isinstance(err, DesignScanError)

    def test_transient_recommends_retry(self):
        assert TransientUpstreamError("x").retry_recommended is True
        assert UpstreamAccessError("x").retry_recommended is False
        assert UpstreamError("x").retry_recommended is False

    def test_rate_limited(self):
        err = RateLimitedError("slow down", retry_after=30.0, operation="probe")
        assert isinstance(err, TransientUpstreamError)
        assert err.status_code == 429
        assert err.retry_after == 30.0
        assert err.operation == "probe"

    def test_text_generation_error_keeps_cause(self):
        cause = RuntimeError("boom")
        err = TextGenerationError("1:2", cause)
        assert err.artifact_id == "1:2"
        assert err.cause is cause
        assert "1:2" in str(err)
