"""Tree flattening -- linearise a document tree into an id-keyed table."""

from __future__ import annotations

from ..models import DocumentNode, FlattenedEntry


def flatten_tree(root: DocumentNode) -> dict[str, FlattenedEntry]:
    """Walk *root* in pre-order and map each node id to its entry.

    Paths are built from node names, not ids, so they read the way the
    document's layers panel does.  Trees are assumed acyclic.
    """
    table: dict[str, FlattenedEntry] = {}
    _visit(root, [], table)
    return table


def _visit(node: DocumentNode, parent_path: list[str], table: dict[str, FlattenedEntry]) -> None:
    path = [*parent_path, node.name]
    table[node.id] = FlattenedEntry(node=node, path=path)
    for child in node.children or ():
        _visit(child, path, table)
