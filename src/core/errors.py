# src/core/errors.py — v1
"""Error taxonomy shared by every workflow component.

Transient upstream failures are surfaced with ``retry_recommended`` so the
caller can apply its own backoff policy. Nothing inside the workflow retries.
"""

from __future__ import annotations


class DesignScanError(Exception):
    """Base class for all workflow errors."""


class MalformedReferenceError(DesignScanError, ValueError):
    """A raw document reference could not be parsed."""

    def __init__(self, reference: str, reason: str) -> None:
        self.reference = reference
        self.reason = reason
        super().__init__(f"Malformed reference {reference!r}: {reason}")


class UpstreamError(DesignScanError):
    """An upstream collaborator call failed."""

    retry_recommended: bool = False

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        operation: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.operation = operation
        super().__init__(message)


class TransientUpstreamError(UpstreamError):
    """Network failure, server error or throttling. Safe to retry later."""

    retry_recommended = True


class RateLimitedError(TransientUpstreamError):
    """Upstream returned HTTP 429."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        operation: str | None = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(message, status_code=429, operation=operation)


class UpstreamAccessError(UpstreamError):
    """Forbidden or missing document. Retrying will not help."""


class TextGenerationError(DesignScanError):
    """The text generator failed for an artifact."""

    def __init__(self, artifact_id: str, cause: Exception) -> None:
        self.artifact_id = artifact_id
        self.cause = cause
        super().__init__(f"Text generation failed for artifact {artifact_id}: {cause}")
