"""designdiff - Turn two versions of a design document into a work summary."""

from .models import (  # noqa: F401 -- public re-exports
    DiffResult,
    DocumentNode,
    DocumentSnapshot,
    FeatureGroup,
    MatchResult,
    PipelineReport,
    ReadinessAssessment,
    SemanticDiffResult,
    Ticket,
    VersionInfo,
)
from .analysis import assess_all, assess_readiness, create_structured_diff, group_changes, match_tickets
from .diff import diff_snapshots, flatten_tree
from .library import LibraryIndexCache, index_library
from .pipeline import run_pipeline

__version__ = "0.1.0"

__all__ = [
    "diff_snapshots",
    "flatten_tree",
    "group_changes",
    "assess_readiness",
    "assess_all",
    "match_tickets",
    "create_structured_diff",
    "index_library",
    "LibraryIndexCache",
    "run_pipeline",
    "DiffResult",
    "DocumentNode",
    "DocumentSnapshot",
    "FeatureGroup",
    "MatchResult",
    "PipelineReport",
    "ReadinessAssessment",
    "SemanticDiffResult",
    "Ticket",
    "VersionInfo",
]
