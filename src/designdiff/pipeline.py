"""End-to-end run: diff, grouping, readiness, ticket matching and structure."""

from __future__ import annotations

import logging

from .analysis import (
    assess_all,
    create_structured_diff,
    group_changes,
    match_tickets,
    readiness_summary,
)
from .diff import diff_snapshots
from .library import LibraryIndexCache
from .models import (
    DocumentSnapshot,
    PipelineReport,
    ReadinessRules,
    Ticket,
    VersionInfo,
)

logger = logging.getLogger(__name__)


def run_pipeline(
    old: DocumentSnapshot,
    new: DocumentSnapshot,
    old_version: VersionInfo,
    new_version: VersionInfo,
    tickets: list[Ticket] | None = None,
    file_key: str | None = None,
    rules: ReadinessRules | None = None,
    library_cache: LibraryIndexCache | None = None,
) -> PipelineReport:
    """Run every analysis stage over one snapshot pair.

    Ticket matching runs only when *tickets* is given (an empty list still
    produces a result with every feature unmatched).  The library index of
    the newer snapshot is attached when a *library_cache* is supplied.
    """
    logger.info(
        "Comparing %s (%s) -> %s (%s)",
        old.name or "<unnamed>", old_version.id, new.name or "<unnamed>", new_version.id,
    )

    diff = diff_snapshots(old, new, old_version, new_version)
    semantic = group_changes(diff)
    readiness = assess_all(semantic.features, rules)

    matches = None
    if tickets is not None:
        matches = match_tickets(semantic, tickets, file_key)
        logger.info(
            "Linked %d/%d features to tickets",
            matches.summary.matched_features, matches.summary.total_features,
        )

    library = None
    if library_cache is not None:
        library = library_cache.get_or_build(new, file_key or new.name, new_version.id)

    logger.info(
        "Found %d changes across %d features",
        diff.summary.total_changes, len(semantic.features),
    )

    return PipelineReport(
        diff=diff,
        semantic=semantic,
        readiness=readiness,
        readiness_summary=readiness_summary(readiness),
        matches=matches,
        structure=create_structured_diff(diff),
        library=library,
    )
