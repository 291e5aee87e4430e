# tests/unit/references/test_resolver.py — v1
"""Tests for references/resolver.py — URL and compact reference parsing."""

from __future__ import annotations

import pytest

from designscan.core.errors import MalformedReferenceError
from designscan.references.resolver import (
    build_node_url,
    node_id_from_url_format,
    parse_reference,
    resolve_references,
)


class TestParseReference:
    def test_design_url(self):
        ref = parse_reference("https://www.figma.com/design/AbC123/Checkout-Flow?node-id=12-34&t=x")
        assert ref.document_id == "AbC123"
        assert ref.node_id == "12:34"
        assert ref.url is not None

    def test_file_url_with_encoded_colon(self):
        ref = parse_reference("https://figma.com/file/KEY9?node-id=12%3A34")
        assert (ref.document_id, ref.node_id) == ("KEY9", "12:34")

    def test_url_without_scheme(self):
        ref = parse_reference("www.figma.com/proto/KEY9/Flow?node-id=1-2")
        assert (ref.document_id, ref.node_id) == ("KEY9", "1:2")

    def test_compact_form(self):
        ref = parse_reference("abc123:12:34")
        assert (ref.document_id, ref.node_id) == ("abc123", "12:34")
        assert ref.url is None

    def test_compact_named_node(self):
        ref = parse_reference("D1:sectionA")
        assert (ref.document_id, ref.node_id) == ("D1", "sectionA")

    def test_whitespace_trimmed(self):
        assert parse_reference("  D1:1:2 ").node_id == "1:2"

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   ",
            "no-separator",
            "D1:",
            "bad id!:1:2",
            "https://example.com/design/KEY?node-id=1-2",
            "https://www.figma.com/community/KEY?node-id=1-2",
            "https://www.figma.com/design/KEY/Title",
            "https://www.figma.com/design/KEY/Title?node-id=",
        ],
    )
    def test_malformed(self, raw):
        with pytest.raises(MalformedReferenceError) as exc:
            parse_reference(raw)
        assert exc.value.reference == raw

    def test_malformed_is_value_error(self):
        with pytest.raises(ValueError):
            parse_reference("nope")


class TestResolveReferences:
    def test_groups_by_document_in_order(self):
        grouped = resolve_references(["D2:1:1", "D1:2:2", "D2:3:3"])
        assert list(grouped) == ["D2", "D1"]
        assert [r.node_id for r in grouped["D2"]] == ["1:1", "3:3"]

    def test_duplicates_collapse(self):
        grouped = resolve_references([
            "D1:1:2",
            "https://www.figma.com/design/D1/x?node-id=1-2",
        ])
        assert len(grouped["D1"]) == 1

    def test_one_bad_reference_fails_batch(self):
        with pytest.raises(MalformedReferenceError):
            resolve_references(["D1:1:2", "garbage"])

    def test_empty_input(self):
        assert resolve_references([]) == {}


class TestUrlHelpers:
    def test_node_id_from_url_format(self):
        assert node_id_from_url_format("12-34") == "12:34"
        assert node_id_from_url_format("12:34") == "12:34"

    def test_build_node_url(self):
        assert build_node_url("KEY", "12:34") == "https://www.figma.com/design/KEY?node-id=12-34"

    def test_build_then_parse(self):
        ref = parse_reference(build_node_url("KEY", "5:6"))
        assert (ref.document_id, ref.node_id) == ("KEY", "5:6")
