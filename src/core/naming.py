# src/core/naming.py — v1
"""Deterministic filename slugs for artifacts.

A slug combines the kebab-cased display name with the artifact id so two
artifacts sharing a display name never collide on disk.
"""

from __future__ import annotations

import re

_INVALID_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_DASH_RUNS = re.compile(r"-+")


def to_kebab_case(text: str) -> str:
    """Lower-case, strip punctuation, and join words with single dashes.

    >>> to_kebab_case("User Profile (Editing)")
    'user-profile-editing'
    """
    slug = _INVALID_CHARS.sub("", text.lower()).strip()
    slug = _WHITESPACE.sub("-", slug)
    slug = _DASH_RUNS.sub("-", slug)
    return slug.strip("-")


def safe_node_id(node_id: str) -> str:
    """Node ids use ``:`` which is not portable in filenames."""
    return node_id.replace(":", "-")


def filename_slug(display_name: str, artifact_id: str) -> str:
    """Return ``<kebab-name>_<node-id>``, e.g. ``login-1024px_12-34``."""
    return f"{to_kebab_case(display_name)}_{safe_node_id(artifact_id)}"
