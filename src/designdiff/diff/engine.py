"""Snapshot comparison and diff computation.

Compares two captures of the same design document and reports node-level
additions, removals, modifications, renames and moves, plus changes to the
component and style libraries.
"""

from __future__ import annotations

import logging
from typing import Any

from ..models import (
    ChangeKind,
    ComponentChange,
    DiffResult,
    DiffSummary,
    DocumentSnapshot,
    FlattenedEntry,
    LibraryComponent,
    LibraryStyle,
    NodeChange,
    StyleChange,
    VersionInfo,
    VersionRef,
)
from .flatten import flatten_tree
from .properties import compare_nodes, describe, project, values_equal

logger = logging.getLogger(__name__)

# Container types that hold content but are never content themselves.
SKIPPED_NODE_TYPES = frozenset({"DOCUMENT", "CANVAS"})


def diff_snapshots(
    old: DocumentSnapshot,
    new: DocumentSnapshot,
    old_version: VersionInfo,
    new_version: VersionInfo,
) -> DiffResult:
    """Compare two snapshots and produce a :class:`DiffResult`.

    Args:
        old: The earlier snapshot (baseline).
        new: The later snapshot.
        old_version: Version metadata for *old*.
        new_version: Version metadata for *new*.

    Returns:
        DiffResult with node, component and style changes plus summary counts.
    """
    old_nodes = flatten_tree(old.document)
    new_nodes = flatten_tree(new.document)

    shared = old_nodes.keys() & new_nodes.keys()
    if not shared and old_nodes and new_nodes:
        logger.warning(
            "Snapshots share no node ids; reporting everything as added and removed",
        )

    node_changes = _diff_nodes(old_nodes, new_nodes)
    component_changes = _diff_components(old.components, new.components)
    style_changes = _diff_styles(old.styles, new.styles)

    logger.debug(
        "Diffed %d -> %d nodes: %d node, %d component, %d style changes",
        len(old_nodes), len(new_nodes),
        len(node_changes), len(component_changes), len(style_changes),
    )

    return DiffResult(
        summary=_summarize(node_changes, component_changes, style_changes),
        node_changes=node_changes,
        component_changes=component_changes,
        style_changes=style_changes,
        from_version=_version_ref(old_version),
        to_version=_version_ref(new_version),
        file_name=new.name,
    )


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------

def _diff_nodes(
    old_nodes: dict[str, FlattenedEntry],
    new_nodes: dict[str, FlattenedEntry],
) -> list[NodeChange]:
    changes: list[NodeChange] = []

    for node_id, entry in new_nodes.items():
        if node_id in old_nodes or entry.node.type in SKIPPED_NODE_TYPES:
            continue
        changes.append(_presence_change("added", entry))

    for node_id, entry in old_nodes.items():
        if node_id in new_nodes or entry.node.type in SKIPPED_NODE_TYPES:
            continue
        changes.append(_presence_change("removed", entry))

    for node_id, old_entry in old_nodes.items():
        new_entry = new_nodes.get(node_id)
        if new_entry is None or old_entry.node.type in SKIPPED_NODE_TYPES:
            continue
        change = _compare_entries(node_id, old_entry, new_entry)
        if change is not None:
            changes.append(change)

    return changes


def _presence_change(kind: ChangeKind, entry: FlattenedEntry) -> NodeChange:
    node = entry.node
    verb = "Added" if kind == "added" else "Removed"
    return NodeChange(
        kind=kind,
        node_id=node.id,
        name=node.name,
        node_type=node.type,
        path=entry.path,
        detail=f"{verb} {node.type.lower()}",
    )


def _compare_entries(
    node_id: str,
    old_entry: FlattenedEntry,
    new_entry: FlattenedEntry,
) -> NodeChange | None:
    prop_changes = compare_nodes(old_entry.node, new_entry.node)
    # Ancestor names only; a renamed frame moves all of its descendants.
    moved = old_entry.path[:-1] != new_entry.path[:-1]
    if not prop_changes and not moved:
        return None

    phrases: list[str] = []
    if prop_changes:
        phrases.append(describe(prop_changes))
    if moved:
        old_parent = " / ".join(old_entry.path[:-1])
        new_parent = " / ".join(new_entry.path[:-1])
        phrases.append(f"moved from {old_parent} to {new_parent}")

    kind: ChangeKind
    if not prop_changes:
        kind = "moved"
    elif not moved and len(prop_changes) == 1 and prop_changes[0].property == "name":
        kind = "renamed"
    else:
        kind = "modified"

    return NodeChange(
        kind=kind,
        node_id=node_id,
        name=new_entry.node.name,
        node_type=new_entry.node.type,
        path=new_entry.path,
        detail=", ".join(phrases),
        before=project(old_entry.node),
        after=project(new_entry.node),
    )


# ---------------------------------------------------------------------------
# Libraries
# ---------------------------------------------------------------------------

def _record(item: LibraryComponent | LibraryStyle) -> dict[str, Any]:
    return item.model_dump(mode="json")


def _diff_components(
    old: dict[str, LibraryComponent],
    new: dict[str, LibraryComponent],
) -> list[ComponentChange]:
    changes: list[ComponentChange] = []

    for key, comp in new.items():
        if key not in old:
            changes.append(ComponentChange(
                kind="added",
                key=key,
                name=comp.name,
                detail="New component created",
                after=_record(comp),
            ))

    for key, old_comp in old.items():
        new_comp = new.get(key)
        if new_comp is None:
            changes.append(ComponentChange(
                kind="removed",
                key=key,
                name=old_comp.name,
                detail="Component deleted",
                before=_record(old_comp),
            ))
            continue
        before, after = _record(old_comp), _record(new_comp)
        if values_equal(before, after):
            continue
        notes: list[str] = []
        if old_comp.name != new_comp.name:
            notes.append("name changed")
        if old_comp.description != new_comp.description:
            notes.append("description updated")
        changes.append(ComponentChange(
            kind="modified",
            key=key,
            name=new_comp.name,
            detail=", ".join(notes) or "Component updated",
            before=before,
            after=after,
        ))

    return changes


def _diff_styles(
    old: dict[str, LibraryStyle],
    new: dict[str, LibraryStyle],
) -> list[StyleChange]:
    changes: list[StyleChange] = []

    for key, style in new.items():
        if key not in old:
            changes.append(StyleChange(
                kind="added",
                key=key,
                name=style.name,
                style_type=style.style_type,
                detail=f"New {style.style_type.lower()} style",
                after=_record(style),
            ))

    for key, old_style in old.items():
        new_style = new.get(key)
        if new_style is None:
            changes.append(StyleChange(
                kind="removed",
                key=key,
                name=old_style.name,
                style_type=old_style.style_type,
                detail="Style deleted",
                before=_record(old_style),
            ))
            continue
        before, after = _record(old_style), _record(new_style)
        if not values_equal(before, after):
            changes.append(StyleChange(
                kind="modified",
                key=key,
                name=new_style.name,
                style_type=new_style.style_type,
                detail="Style updated",
                before=before,
                after=after,
            ))

    return changes


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

def _summarize(
    node_changes: list[NodeChange],
    component_changes: list[ComponentChange],
    style_changes: list[StyleChange],
) -> DiffSummary:
    def count(kind: str) -> int:
        return sum(1 for c in node_changes if c.kind == kind)

    return DiffSummary(
        total_changes=len(node_changes) + len(component_changes) + len(style_changes),
        nodes_added=count("added"),
        nodes_removed=count("removed"),
        nodes_modified=count("modified"),
        nodes_renamed=count("renamed"),
        nodes_moved=count("moved"),
        components_changed=len(component_changes),
        styles_changed=len(style_changes),
    )


def _version_ref(version: VersionInfo) -> VersionRef:
    return VersionRef(id=version.id, created_at=version.created_at, label=version.label)
