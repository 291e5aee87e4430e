# tests/unit/expansion/test_container_expander.py — v1
"""Tests for expansion/container_expander.py."""

from __future__ import annotations

from designscan.expansion.container_expander import (
    expand_node,
    expand_nodes,
    extract_note_text,
    is_note_marker,
)

from tests.factories import make_node, make_note


class TestExpandNode:
    def test_standalone_frame(self):
        frame = make_node("1:2", "Checkout")
        result = expand_node(frame, "1:2", "D1")
        assert len(result.artifacts) == 1
        artifact = result.artifacts[0]
        assert artifact.document_id == "D1"
        assert artifact.container_name is None
        assert artifact.container_id is None
        assert artifact.filename_slug == "checkout_1-2"
        assert artifact.url == "https://www.figma.com/design/D1?node-id=1-2"
        assert result.node_trees == {"1:2": frame}

    def test_page_with_frames_and_note(self):
        page = make_node(
            "0:1", "Page 1", "CANVAS", None,
            children=[
                make_node("1:1", "Home"),
                make_node("1:2", "Settings", box=(200, 0, 100, 100)),
                make_note("1:3", "Remember dark mode", (0, 150, 50, 50)),
            ],
        )
        result = expand_node(page, "0:1", "D1")
        assert [a.artifact_id for a in result.artifacts] == ["1:1", "1:2"]
        assert all(a.container_name is None for a in result.artifacts)
        assert len(result.notes) == 1
        assert result.notes[0].text == "Remember dark mode"

    def test_section_tags_container(self, section_document):
        result = expand_node(section_document[0], "sectionA", "D1")
        assert [a.filename_slug for a in result.artifacts] == [
            "login-1024px_F1", "login-320px_F2",
        ]
        assert {a.container_name for a in result.artifacts} == {"sectionA"}
        assert {a.container_id for a in result.artifacts} == {"sectionA"}

    def test_unnamed_section(self):
        section = make_node("s:1", "", "SECTION", children=[make_node("1:1", "A")])
        result = expand_node(section, "s:1", "D1")
        assert result.artifacts[0].container_name == "Unnamed Section"

    def test_page_skips_nested_section(self, section_document):
        page = make_node("0:1", "Page", "CANVAS", None, children=section_document)
        assert expand_node(page, "0:1", "D1").artifacts == []

    def test_standalone_note(self):
        result = expand_node(make_note("n:1", "hello", (0, 0, 10, 10)), "n:1", "D1")
        assert result.artifacts == []
        assert result.notes[0].node_id == "n:1"

    def test_unknown_type_is_empty(self):
        result = expand_node(make_node("g:1", "Group", "GROUP"), "g:1", "D1")
        assert result.artifacts == []
        assert result.notes == []

    def test_missing_node_is_empty(self):
        assert expand_node(None, "x", "D1").artifacts == []

    def test_unnamed_frame(self):
        artifact = expand_node(make_node("1:9", ""), "1:9", "D1").artifacts[0]
        assert artifact.display_name == "Unnamed"
        assert artifact.filename_slug == "unnamed_1-9"


class TestExpandNodes:
    def test_dedup_across_requests(self, section_document):
        frame = section_document[0]["children"][0]
        nodes = {"sectionA": section_document[0], "F1": frame}
        result = expand_nodes(nodes, "D1", ["sectionA", "F1"])
        assert [a.artifact_id for a in result.artifacts] == ["F1", "F2"]
        assert result.artifacts[0].container_name == "sectionA"
        assert set(result.node_trees) == {"F1", "F2"}

    def test_requested_order(self):
        nodes = {"1:1": make_node("1:1", "A"), "1:2": make_node("1:2", "B")}
        result = expand_nodes(nodes, "D1", ["1:2", "1:1"])
        assert [a.artifact_id for a in result.artifacts] == ["1:2", "1:1"]

    def test_missing_requested_id_skipped(self):
        result = expand_nodes({"1:1": make_node("1:1", "A")}, "D1", ["1:1", "9:9"])
        assert len(result.artifacts) == 1

    def test_note_dedup(self):
        note = make_note("n:1", "x", (0, 0, 1, 1))
        page = make_node("0:1", "P", "CANVAS", None, children=[note])
        result = expand_nodes({"0:1": page, "n:1": note}, "D1")
        assert len(result.notes) == 1


class TestNoteHelpers:
    def test_is_note_marker(self):
        assert is_note_marker(make_note("n", "t", (0, 0, 1, 1)))
        assert not is_note_marker(make_node("i", "Button", "INSTANCE"))

    def test_text_falls_back_to_name(self):
        node = make_node("n", "Note", "INSTANCE", children=[])
        assert extract_note_text(node) == "Note"

    def test_first_text_depth_first(self):
        node = make_node(
            "n", "Note", "INSTANCE",
            children=[
                make_node("g", "G", "GROUP", children=[
                    make_node("t1", "T", "TEXT", characters="deep"),
                ]),
                make_node("t2", "T", "TEXT", characters="shallow"),
            ],
        )
        assert extract_note_text(node) == "deep"
