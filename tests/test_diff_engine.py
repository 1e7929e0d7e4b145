"""Tests for flattening and snapshot diffing."""

from __future__ import annotations

import logging

from designdiff.diff import diff_snapshots, flatten_tree
from designdiff.models import (
    DocumentNode,
    DocumentSnapshot,
    LibraryComponent,
    LibraryStyle,
    VersionInfo,
)

V1 = VersionInfo(id="v1", created_at="2024-03-01T10:00:00Z", label="Before")
V2 = VersionInfo(id="v2", created_at="2024-03-02T10:00:00Z")


def _node(node_id: str, name: str, node_type: str = "FRAME", children=None, **extra) -> DocumentNode:
    return DocumentNode(id=node_id, name=name, type=node_type, children=children, **extra)


def _doc(*children: DocumentNode) -> DocumentNode:
    return _node("0:0", "Document", "DOCUMENT", list(children))


def _snapshot(document: DocumentNode, components=None, styles=None) -> DocumentSnapshot:
    return DocumentSnapshot(
        name="Design System",
        document=document,
        components=components or {},
        styles=styles or {},
    )


def _diff(old: DocumentSnapshot, new: DocumentSnapshot):
    return diff_snapshots(old, new, V1, V2)


class TestFlatten:
    def test_pre_order_name_paths(self):
        tree = _doc(_node("1", "Page", "CANVAS", [_node("2", "Card", children=[_node("3", "Title", "TEXT")])]))
        table = flatten_tree(tree)
        assert list(table) == ["0:0", "1", "2", "3"]
        assert table["3"].path == ["Document", "Page", "Card", "Title"]

    def test_leaf_root(self):
        table = flatten_tree(_node("9", "Lonely"))
        assert table["9"].path == ["Lonely"]


class TestNodeChanges:
    def test_self_diff_is_empty(self):
        snap = _snapshot(
            _doc(_node("1", "Card", children=[_node("2", "Title", "TEXT", characters="Hi")])),
            components={"c1": LibraryComponent(key="c1", name="Card")},
            styles={"s1": LibraryStyle(key="s1", name="Primary", style_type="FILL")},
        )
        result = _diff(snap, snap)
        assert result.node_changes == []
        assert result.component_changes == []
        assert result.style_changes == []
        assert result.summary.total_changes == 0

    def test_added_and_removed_are_disjoint(self):
        old = _snapshot(_doc(_node("1", "Card"), _node("2", "Old Banner")))
        new = _snapshot(_doc(_node("1", "Card"), _node("3", "New Banner"), _node("4", "Footer")))
        result = _diff(old, new)

        added = [c.node_id for c in result.node_changes if c.kind == "added"]
        removed = [c.node_id for c in result.node_changes if c.kind == "removed"]
        assert sorted(added) == ["3", "4"]
        assert removed == ["2"]
        assert not set(added) & set(removed)
        assert result.summary.nodes_added == 2
        assert result.summary.nodes_removed == 1

    def test_change_order_added_removed_compared(self):
        old = _snapshot(_doc(_node("1", "Card"), _node("2", "Gone")))
        new = _snapshot(_doc(_node("1", "Card 2"), _node("3", "Fresh")))
        kinds = [c.kind for c in _diff(old, new).node_changes]
        assert kinds == ["added", "removed", "renamed"]

    def test_containers_are_not_reported(self):
        old = _snapshot(_doc())
        new = _snapshot(_doc(_node("p", "Page 2", "CANVAS")))
        assert _diff(old, new).node_changes == []

    def test_rename_only(self):
        old = _snapshot(_doc(_node("1", "Card")))
        new = _snapshot(_doc(_node("1", "Product Card")))
        [change] = _diff(old, new).node_changes
        assert change.kind == "renamed"
        assert change.name == "Product Card"
        assert change.detail == 'renamed from "Card" to "Product Card"'
        assert change.before["name"] == "Card"
        assert change.after["name"] == "Product Card"

    def test_rename_with_other_changes_is_modified(self):
        old = _snapshot(_doc(_node("1", "Card", item_spacing=8)))
        new = _snapshot(_doc(_node("1", "Product Card", item_spacing=16)))
        [change] = _diff(old, new).node_changes
        assert change.kind == "modified"
        assert "spacing changed from 8 to 16" in change.detail

    def test_moved_without_property_changes(self):
        old = _snapshot(_doc(_node("a", "Header", children=[_node("x", "Logo")]), _node("b", "Footer")))
        new = _snapshot(_doc(_node("a", "Header"), _node("b", "Footer", children=[_node("x", "Logo")])))
        result = _diff(old, new)
        [change] = result.node_changes
        assert change.kind == "moved"
        assert change.detail == "moved from Document / Header to Document / Footer"
        assert change.path == ["Document", "Footer", "Logo"]
        assert result.summary.nodes_moved == 1

    def test_renamed_and_moved_is_modified(self):
        old = _snapshot(_doc(_node("a", "Header", children=[_node("x", "Logo")]), _node("b", "Footer")))
        new = _snapshot(_doc(_node("a", "Header"), _node("b", "Footer", children=[_node("x", "Brand")])))
        [change] = _diff(old, new).node_changes
        assert change.kind == "modified"
        assert change.detail == (
            'renamed from "Logo" to "Brand", moved from Document / Header to Document / Footer'
        )

    def test_children_of_renamed_parent_are_moved(self):
        old = _snapshot(_doc(_node("a", "Header", children=[_node("x", "Logo")])))
        new = _snapshot(_doc(_node("a", "Top Bar", children=[_node("x", "Logo")])))
        changes = _diff(old, new).node_changes
        assert [(c.node_id, c.kind) for c in changes] == [("a", "renamed"), ("x", "moved")]
        assert changes[1].detail == "moved from Document / Header to Document / Top Bar"

    def test_reparent_under_same_name_path_is_unchanged(self):
        old = _snapshot(_doc(_node("a", "Card", children=[_node("x", "Logo")]), _node("b", "Card")))
        new = _snapshot(_doc(_node("a", "Card"), _node("b", "Card", children=[_node("x", "Logo")])))
        assert _diff(old, new).node_changes == []

    def test_modified_detail(self):
        old = _snapshot(_doc(_node("1", "Badge", visible=True)))
        new = _snapshot(_doc(_node("1", "Badge", visible=False)))
        [change] = _diff(old, new).node_changes
        assert change.kind == "modified"
        assert change.detail == "hidden"

    def test_unrelated_documents_warn(self, caplog):
        old = _snapshot(_doc(_node("1", "Card")))
        new = _snapshot(DocumentNode(id="9:9", name="Other", type="DOCUMENT", children=[_node("2", "Card")]))
        with caplog.at_level(logging.WARNING, logger="designdiff.diff.engine"):
            result = _diff(old, new)
        assert result.summary.nodes_added == 1
        assert result.summary.nodes_removed == 1
        assert "share no node ids" in caplog.text


class TestLibraryChanges:
    def test_component_lifecycle(self):
        old = _snapshot(_doc(), components={
            "k1": LibraryComponent(key="k1", name="Button/State=Default"),
            "k2": LibraryComponent(key="k2", name="Chip"),
            "k3": LibraryComponent(key="k3", name="Tag", description="old"),
        })
        new = _snapshot(_doc(), components={
            "k1": LibraryComponent(key="k1", name="Button/State=Default"),
            "k3": LibraryComponent(key="k3", name="Label", description="new"),
            "k4": LibraryComponent(key="k4", name="Button/State=Hover"),
        })
        changes = {c.key: c for c in _diff(old, new).component_changes}
        assert set(changes) == {"k2", "k3", "k4"}
        assert changes["k4"].kind == "added"
        assert changes["k4"].detail == "New component created"
        assert changes["k2"].kind == "removed"
        assert changes["k2"].detail == "Component deleted"
        assert changes["k3"].kind == "modified"
        assert changes["k3"].detail == "name changed, description updated"

    def test_component_updated_fallback(self):
        old = _snapshot(_doc(), components={"k": LibraryComponent(key="k", name="Tab")})
        new = _snapshot(_doc(), components={
            "k": LibraryComponent(key="k", name="Tab", documentation_links=["https://docs"]),
        })
        [change] = _diff(old, new).component_changes
        assert change.detail == "Component updated"

    def test_style_changes(self):
        old = _snapshot(_doc(), styles={
            "s1": LibraryStyle(key="s1", name="Brand/Primary", style_type="FILL"),
            "s2": LibraryStyle(key="s2", name="Heading", style_type="TEXT"),
        })
        new = _snapshot(_doc(), styles={
            "s1": LibraryStyle(key="s1", name="Brand/Primary", style_type="FILL", description="Main"),
            "s3": LibraryStyle(key="s3", name="Shadow/Lg", style_type="EFFECT"),
        })
        result = _diff(old, new)
        details = {c.key: (c.kind, c.detail) for c in result.style_changes}
        assert details == {
            "s3": ("added", "New effect style"),
            "s2": ("removed", "Style deleted"),
            "s1": ("modified", "Style updated"),
        }
        assert result.summary.styles_changed == 3

    def test_versions_and_file_name(self):
        result = _diff(_snapshot(_doc()), _snapshot(_doc()))
        assert result.from_version.id == "v1"
        assert result.from_version.label == "Before"
        assert result.to_version.created_at == "2024-03-02T10:00:00Z"
        assert result.file_name == "Design System"
