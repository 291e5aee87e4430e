# src/references/resolver.py — v1
"""Parse raw document references into (document, node) pairs.

Accepted forms:
    https://www.figma.com/design/<KEY>/<title>?node-id=12-34
    https://www.figma.com/file/<KEY>?node-id=12%3A34
    <KEY>:<NODE>                 e.g. ``abc123:12:34`` or ``D1:sectionA``

One malformed reference fails the whole batch.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import parse_qs, quote, urlparse

from designscan.core.errors import MalformedReferenceError
from designscan.core.models import DocumentReference

logger = logging.getLogger(__name__)

FIGMA_HOSTS = ("figma.com", "www.figma.com")
_PATH_PATTERN = re.compile(r"^/(file|design|proto|board)/([A-Za-z0-9]+)")
_DOCUMENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def resolve_references(raw: list[str]) -> dict[str, list[DocumentReference]]:
    """Group parsed references by document id.

    Duplicate (document, node) pairs collapse to one entry. Documents and
    their references keep first-appearance order.

    Raises:
        MalformedReferenceError: On the first reference that cannot be parsed.
    """
    grouped: dict[str, list[DocumentReference]] = {}
    seen: set[tuple[str, str]] = set()

    for reference in raw:
        parsed = parse_reference(reference)
        key = (parsed.document_id, parsed.node_id)
        if key in seen:
            logger.debug("Skipping duplicate reference %s", reference)
            continue
        seen.add(key)
        grouped.setdefault(parsed.document_id, []).append(parsed)

    logger.info(
        "Resolved %d references into %d documents",
        len(seen), len(grouped),
    )
    return grouped


def parse_reference(reference: str) -> DocumentReference:
    """Parse one raw reference string."""
    text = reference.strip() if isinstance(reference, str) else ""
    if not text:
        raise MalformedReferenceError(str(reference), "empty reference")

    if "://" in text or text.startswith(FIGMA_HOSTS):
        return _parse_url(reference, text)
    return _parse_compact(reference, text)


def node_id_from_url_format(url_node_id: str) -> str:
    """``12-34`` -> ``12:34``; ids already in API form pass through."""
    return url_node_id.replace("-", ":")


def build_node_url(document_id: str, node_id: str) -> str:
    """Canonical design URL pointing at one node."""
    url_node_id = node_id.replace(":", "-")
    return f"https://www.figma.com/design/{document_id}?node-id={quote(url_node_id)}"


def _parse_url(reference: str, text: str) -> DocumentReference:
    if "://" not in text:
        text = f"https://{text}"
    parsed = urlparse(text)

    host = (parsed.hostname or "").lower()
    if host not in FIGMA_HOSTS:
        raise MalformedReferenceError(reference, f"unsupported host {host!r}")

    match = _PATH_PATTERN.match(parsed.path)
    if not match:
        raise MalformedReferenceError(reference, "no document key in URL path")

    node_values = parse_qs(parsed.query).get("node-id")
    if not node_values or not node_values[0].strip():
        raise MalformedReferenceError(reference, "URL missing node-id parameter")

    return DocumentReference(
        document_id=match.group(2),
        node_id=node_id_from_url_format(node_values[0].strip()),
        url=reference,
    )


def _parse_compact(reference: str, text: str) -> DocumentReference:
    document_id, sep, node_id = text.partition(":")
    if not sep or not node_id.strip():
        raise MalformedReferenceError(reference, "expected <document>:<node>")
    if not _DOCUMENT_ID_PATTERN.match(document_id):
        raise MalformedReferenceError(reference, f"invalid document id {document_id!r}")
    return DocumentReference(document_id=document_id, node_id=node_id.strip())
