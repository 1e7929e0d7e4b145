"""Structural views of a diff: a page/section change tree and component sets."""

from __future__ import annotations

from ..models import (
    ChangeCounts,
    ComponentSetGroup,
    ComponentVariant,
    DiffResult,
    FileTreeNode,
    NodeChange,
    PageStat,
    StructuredDiff,
)
from ..names import is_variant_name, parse_variant_properties


def _bucket(change: NodeChange) -> str:
    """Collapse renamed/moved into ``modified`` for tallying."""
    return change.kind if change.kind in ("added", "removed") else "modified"


def _tally(stats: object, bucket: str) -> None:
    setattr(stats, bucket, getattr(stats, bucket) + 1)


def _segment_type(index: int, segment: str, change: NodeChange) -> str:
    if index == 0:
        return "page"
    if index == 1:
        return "section"
    if change.node_type == "COMPONENT_SET":
        return "component-set"
    if change.node_type == "COMPONENT" or is_variant_name(segment):
        return "component"
    return "element"


def build_file_tree(diff: DiffResult) -> FileTreeNode:
    """Arrange node changes under their page and section ancestors.

    Each tree node counts the changes at or beneath it; the change itself is
    stored on the node its path ends at.
    """
    root = FileTreeNode(name="Document", path="Document", type="root")

    for change in diff.node_changes:
        segments = [s for s in change.path[1:] if s]
        bucket = _bucket(change)
        current = root
        for index, segment in enumerate(segments):
            node = current.children.get(segment)
            if node is None:
                node = FileTreeNode(
                    name=segment,
                    path=" / ".join(segments[: index + 1]),
                    type=_segment_type(index, segment, change),
                )
                current.children[segment] = node

            if index == len(segments) - 1:
                node.changes[bucket].append(change)
                _tally(node.stats, bucket)
                node.stats.total_changes += 1

            _tally(current.stats, bucket)
            current.stats.total_changes += 1
            current = node

    return root


def page_stats(tree: FileTreeNode) -> list[PageStat]:
    """Sections (second tree level) ordered by change volume."""
    stats: list[PageStat] = []
    for page in tree.children.values():
        for section in page.children.values():
            stats.append(PageStat(
                name=section.name,
                path=section.path,
                changes=section.stats.total_changes,
                breakdown=ChangeCounts(
                    added=section.stats.added,
                    modified=section.stats.modified,
                    removed=section.stats.removed,
                ),
            ))
    stats.sort(key=lambda s: -s.changes)
    return stats


def _component_set(segments: list[str]) -> tuple[str, str]:
    """Find the component set a variant belongs to from its ancestors.

    A parent that repeats its own parent's name wins outright; otherwise the
    nearest capitalised ancestor that is not itself a variant, so sets
    sharing an outer folder stay apart; otherwise the direct parent.
    """
    candidate: tuple[str, str] | None = None
    for index in range(len(segments) - 2, -1, -1):
        segment = segments[index]
        if index > 0 and segments[index - 1] == segment:
            return segment, " / ".join(segments[: index + 1])
        if candidate is None and segment[:1].isupper() and not is_variant_name(segment):
            candidate = segment, " / ".join(segments[: index + 1])
    if candidate is not None:
        return candidate
    parent = segments[-2] if len(segments) > 1 else segments[0]
    return parent, " / ".join(segments[:-1])


def group_by_components(diff: DiffResult) -> list[ComponentSetGroup]:
    """Cluster COMPONENT node changes into the component sets they belong to."""
    groups: dict[str, ComponentSetGroup] = {}

    for change in diff.node_changes:
        if change.node_type != "COMPONENT":
            continue
        segments = [s for s in change.path[1:] if s]
        if len(segments) < 2:
            continue

        set_name, set_path = _component_set(segments)
        group = groups.get(set_path)
        if group is None:
            group = groups[set_path] = ComponentSetGroup(name=set_name, set_path=set_path)

        group.variants.append(ComponentVariant(
            name=change.name,
            kind=change.kind,
            properties=parse_variant_properties(change.name),
        ))
        _tally(group.stats, _bucket(change))

    return sorted(
        (g for g in groups.values() if g.variants),
        key=lambda g: -g.stats.total,
    )


def create_structured_diff(diff: DiffResult) -> StructuredDiff:
    tree = build_file_tree(diff)
    return StructuredDiff(
        file_tree=tree,
        component_groups=group_by_components(diff),
        page_stats=page_stats(tree),
    )
