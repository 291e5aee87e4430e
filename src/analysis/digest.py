# src/analysis/digest.py — v1
"""Compact semantic XML digest of an artifact's node tree.

Keeps what describes behaviour (component names, variant properties,
interactivity, visible text) and drops rendering detail (vectors, invisible
and decorative layers, auto-named layout wrappers, node ids). Typical
reduction is two orders of magnitude over the raw JSON tree.
"""

from __future__ import annotations

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_DIGEST_MAX_BYTES = 200_000
TRUNCATION_MARKER = "<!-- digest truncated: {omitted} bytes omitted -->"

_DECORATIVE_NAME = re.compile(r"^(background|pixel|divider)$", re.IGNORECASE)
_WRAPPER_SUFFIX = re.compile(r"-wrapper$", re.IGNORECASE)
_AUTO_WRAPPER_NAME = re.compile(r"^(Frame|Group)\s+\d+$")
_AUTO_LAYER_NAME = re.compile(r"^(Rectangle|Ellipse|Vector|Frame|Group)\s+\d+$")
_GENERIC_TEXT_TAG = re.compile(r"^(_\d+|Text\d*)$")
_INTERACTIVE_NAME = re.compile(r"button|btn|click|action", re.IGNORECASE)

_COMPONENT_TYPES = ("INSTANCE", "COMPONENT", "COMPONENT_SET")
_TYPE_TAGS = {
    "FRAME": "Frame",
    "GROUP": "Group",
    "TEXT": "Text",
    "RECTANGLE": "Rectangle",
    "ELLIPSE": "Ellipse",
    "VECTOR": "Icon",
    "INSTANCE": "Component",
    "COMPONENT": "Component",
}


class DigestError(ValueError):
    """Raised when a node tree cannot be digested."""


def generate_digest(
    node: dict[str, Any], max_bytes: int = DEFAULT_DIGEST_MAX_BYTES
) -> str:
    """Render ``node`` (the artifact root) as a semantic XML document.

    Output longer than ``max_bytes`` (UTF-8) is cut and ends with a
    truncation marker.

    Raises:
        DigestError: If ``node`` is not a node mapping.
    """
    if not isinstance(node, dict):
        raise DigestError("expected a node mapping")

    name = str(node.get("name", ""))
    body = [
        part
        for part in (node_to_xml(child, 1) for child in node.get("children") or [])
        if part
    ]
    xml = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f"<!-- Semantic structure for Figma screen: {name} -->\n"
        f'<Screen name="{escape_xml(name)}" type="{node.get("type", "")}">\n'
        + "\n".join(body)
        + "\n</Screen>"
    )
    return truncate_digest(xml, max_bytes)


def truncate_digest(xml: str, max_bytes: int) -> str:
    """Cut ``xml`` so the result, marker included, fits in ``max_bytes``.

    A cap too small to hold the marker yields the marker alone.
    """
    encoded = xml.encode("utf-8")
    if len(encoded) <= max_bytes:
        return xml
    # omitted <= len(encoded), so this marker is the longest one we can emit
    reserve = len(TRUNCATION_MARKER.format(omitted=len(encoded)).encode("utf-8")) + 1
    kept = encoded[: max(max_bytes - reserve, 0)].decode("utf-8", errors="ignore")
    omitted = len(encoded) - len(kept.encode("utf-8"))
    logger.warning("Digest truncated, %d bytes omitted", omitted)
    marker = TRUNCATION_MARKER.format(omitted=omitted)
    if not kept:
        return marker
    return f"{kept}\n{marker}"


def node_to_xml(node: dict[str, Any], depth: int = 0) -> str | None:
    """Render one node, or None if it contributes nothing."""
    indent = "  " * depth

    if node.get("visible") is False or should_skip(node):
        return None

    tag = semantic_tag_name(node)
    attrs = semantic_attributes(node)
    attr_str = f" {' '.join(attrs)}" if attrs else ""

    if node.get("type") == "TEXT" and node.get("characters"):
        text = escape_xml(node["characters"]).strip()
        if tag.replace("-", " ").lower() == text.lower() or _GENERIC_TEXT_TAG.match(tag):
            return f"{indent}{text}"
        return f"{indent}<{tag}{attr_str}>{text}</{tag}>"

    if is_icon(node):
        return f"{indent}<{tag}{attr_str} />"

    children = node.get("children") or []
    if not children:
        return f"{indent}<{tag}{attr_str} />"

    if is_generic_wrapper(node):
        hoisted = [r for r in (node_to_xml(c, depth) for c in children) if r]
        return "\n".join(hoisted) if hoisted else None

    rendered = [r for r in (node_to_xml(c, depth + 1) for c in children) if r]
    if not rendered:
        return f"{indent}<{tag}{attr_str} />"
    if len(rendered) == 1 and "<" not in rendered[0]:
        return f"{indent}<{tag}{attr_str}>{rendered[0].strip()}</{tag}>"
    inner = "\n".join(rendered)
    return f"{indent}<{tag}{attr_str}>\n{inner}\n{indent}</{tag}>"


# --- Classification ---


def should_skip(node: dict[str, Any]) -> bool:
    return node.get("type") == "VECTOR" or is_decorative(node)


def is_decorative(node: dict[str, Any]) -> bool:
    name = node.get("name")
    if not name:
        return False
    opacity = node.get("opacity")
    if opacity is not None and opacity < 0.1:
        return True
    box = node.get("absoluteBoundingBox")
    if box:
        width, height = box.get("width", 0), box.get("height", 0)
        if (width <= 2 and height <= 2) or width == 0 or height == 0:
            return True
    return bool(_WRAPPER_SUFFIX.search(name) or _DECORATIVE_NAME.match(name))


def is_generic_wrapper(node: dict[str, Any]) -> bool:
    node_type, name = node.get("type"), node.get("name")
    if node_type in ("FRAME", "GROUP") and (not name or _AUTO_WRAPPER_NAME.match(name)):
        return True
    return node_type == "FRAME" and name == "Text"


def is_icon(node: dict[str, Any]) -> bool:
    name = node.get("name")
    if not name:
        return False
    box = node.get("absoluteBoundingBox")
    children = node.get("children") or []
    if box and children and box.get("width", 0) <= 48 and box.get("height", 0) <= 48:
        vectors = sum(1 for c in children if c.get("type") == "VECTOR")
        if vectors and vectors / len(children) > 0.5:
            return True
    return "icon" in name.lower()


def is_interactive(node: dict[str, Any]) -> bool:
    name = node.get("name")
    if name and _INTERACTIVE_NAME.search(name):
        return True
    return bool(node.get("reactions"))


# --- Naming ---


def semantic_tag_name(node: dict[str, Any]) -> str:
    node_type, name = node.get("type", ""), node.get("name")
    if node_type in _COMPONENT_TYPES and name:
        return to_xml_tag_name(name)
    if name and not _AUTO_LAYER_NAME.match(name):
        return to_xml_tag_name(name)
    return _TYPE_TAGS.get(node_type, node_type or "Element")


def semantic_attributes(node: dict[str, Any]) -> list[str]:
    attrs: list[str] = []
    if node.get("type") in ("INSTANCE", "COMPONENT"):
        attrs.append(f'type="{node["type"].lower()}"')
    if is_interactive(node):
        attrs.append('interactive="true"')
    for key, prop in (node.get("componentProperties") or {}).items():
        if isinstance(prop, dict) and prop.get("value") is not None:
            attrs.append(f'{to_xml_attr_name(key)}="{escape_xml(str(prop["value"]))}"')
    return attrs


def to_xml_tag_name(text: str) -> str:
    tag = re.sub(r"[^a-zA-Z0-9\-_ ]", "", text)
    tag = re.sub(r"\s+", "-", tag)
    tag = re.sub(r"^(\d)", r"_\1", tag)
    return tag or "Element"


def to_xml_attr_name(text: str) -> str:
    attr = re.sub(r"[^a-zA-Z0-9\-_]", "", text)
    attr = re.sub(r"^(\d)", r"_\1", attr)
    return attr or "attr"


def escape_xml(text: str) -> str:
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )
