"""Analysis stages that run on top of a structural diff."""

from .grouper import group_changes, simple_summary
from .readiness import assess_all, assess_readiness, readiness_status, readiness_summary
from .structure import build_file_tree, create_structured_diff, group_by_components, page_stats
from .tickets import (
    extract_design_links,
    extract_file_key,
    find_tickets_for_file,
    match_tickets,
    similarity,
)

__all__ = [
    "group_changes",
    "simple_summary",
    "assess_all",
    "assess_readiness",
    "readiness_status",
    "readiness_summary",
    "build_file_tree",
    "create_structured_diff",
    "group_by_components",
    "page_stats",
    "extract_design_links",
    "extract_file_key",
    "find_tickets_for_file",
    "match_tickets",
    "similarity",
]
