"""Structural diffing of design-document snapshots."""

from .engine import diff_snapshots
from .flatten import flatten_tree
from .properties import compare_nodes, describe, diff_projections, project, values_equal

__all__ = [
    "diff_snapshots",
    "flatten_tree",
    "compare_nodes",
    "describe",
    "diff_projections",
    "project",
    "values_equal",
]
