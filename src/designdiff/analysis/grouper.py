"""Semantic grouping -- partition a raw diff into feature-level groups."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..models import (
    ChangeCounts,
    ComponentChange,
    DiffResult,
    FeatureCategory,
    FeatureChangeType,
    FeatureGroup,
    NodeChange,
    SemanticDiffResult,
    SemanticSummary,
)
from ..names import (
    UNGROUPED,
    base_name,
    feature_name,
    is_noise,
    is_noise_name,
    is_variant_name,
    variant_tokens,
    variant_value,
)

logger = logging.getLogger(__name__)

MAX_HIGHLIGHTS = 5


@dataclass
class _Bucket:
    node_changes: list[NodeChange] = field(default_factory=list)
    component_changes: list[ComponentChange] = field(default_factory=list)
    paths: list[str] = field(default_factory=list)


def group_changes(diff: DiffResult) -> SemanticDiffResult:
    """Group the changes in *diff* into named features."""
    buckets: dict[str, _Bucket] = {}
    ungrouped: list[NodeChange] = []
    noise = 0

    for change in diff.node_changes:
        if is_noise(change.name, change.node_type):
            noise += 1
            continue

        name, display_path = feature_name(change.path)
        if name == UNGROUPED or is_noise_name(name):
            ungrouped.append(change)
            continue

        bucket = buckets.setdefault(name, _Bucket())
        bucket.node_changes.append(change)
        if display_path not in bucket.paths:
            bucket.paths.append(display_path)

    for change in diff.component_changes:
        target = _match_feature(base_name(change.name) or change.name, buckets)
        buckets.setdefault(target, _Bucket()).component_changes.append(change)

    features = [
        _build_feature(name, bucket)
        for name, bucket in buckets.items()
        if bucket.node_changes or bucket.component_changes
    ]
    features.sort(key=lambda f: (f.change_type != "new", -f.changes.total))

    logger.debug(
        "Grouped %d node changes into %d features (%d noise, %d ungrouped)",
        len(diff.node_changes), len(features), noise, len(ungrouped),
    )

    return SemanticDiffResult(
        features=features,
        summary=SemanticSummary(
            features_worked_on=len(features),
            new_features=sum(1 for f in features if f.change_type == "new"),
            updated_features=sum(1 for f in features if f.change_type == "updated"),
            removed_features=sum(1 for f in features if f.change_type == "removed"),
            total_changes=diff.summary.total_changes,
        ),
        ungrouped_changes=ungrouped,
        style_changes=diff.style_changes,
        original_diff=diff,
    )


def _match_feature(candidate: str, buckets: dict[str, _Bucket]) -> str:
    """Existing feature whose name overlaps *candidate*, else *candidate*."""
    lowered = candidate.lower()
    for name in buckets:
        other = name.lower()
        if other in lowered or lowered in other:
            return name
    return candidate


def _build_feature(name: str, bucket: _Bucket) -> FeatureGroup:
    nodes, comps = bucket.node_changes, bucket.component_changes
    counts = ChangeCounts(
        added=_count(nodes, "added") + _count(comps, "added"),
        modified=_count(nodes, "modified", "renamed", "moved") + _count(comps, "modified"),
        removed=_count(nodes, "removed") + _count(comps, "removed"),
    )
    change_type = _change_type(counts, comps)
    variants = [c.name for c in comps if is_variant_name(c.name)]

    return FeatureGroup(
        name=name,
        description=_describe(name, change_type, counts, variants, comps),
        category=_categorize(name, nodes, comps),
        change_type=change_type,
        changes=counts,
        variants=variants,
        highlights=_highlights(comps),
        node_changes=nodes,
        component_changes=comps,
        path=bucket.paths[0] if bucket.paths else name,
    )


def _count(changes: list[NodeChange] | list[ComponentChange], *kinds: str) -> int:
    return sum(1 for c in changes if c.kind in kinds)


def _change_type(counts: ChangeCounts, comps: list[ComponentChange]) -> FeatureChangeType:
    if counts.removed > counts.added and counts.removed > counts.modified:
        return "removed"
    if counts.added > counts.modified and counts.added > 0:
        added_comps = _count(comps, "added")
        return "new" if added_comps > len(comps) / 2 else "updated"
    return "updated"


def _categorize(
    name: str,
    nodes: list[NodeChange],
    comps: list[ComponentChange],
) -> FeatureCategory:
    lowered = name.lower()
    if any(c.node_type == "COMPONENT_SET" for c in nodes) or len(comps) > 5:
        return "component-set"
    if "icon" in lowered:
        return "icon"
    if comps or any(c.node_type == "COMPONENT" for c in nodes):
        return "component"
    if "style" in lowered or "color" in lowered:
        return "style"
    return "page-section" if len(nodes) > 10 else "misc"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count > 1 else ''}"


def _describe(
    name: str,
    change_type: FeatureChangeType,
    counts: ChangeCounts,
    variants: list[str],
    comps: list[ComponentChange],
) -> str:
    parts: list[str] = []

    if change_type == "new":
        if comps:
            parts.append(f"New component with {_plural(len(comps), 'variant')}")
        else:
            parts.append(f"New {name.lower()} added")
    elif change_type == "removed":
        parts.append(f"{name} removed")
    elif counts.added > 0 and counts.modified > 0:
        parts.append(f"Added {counts.added} elements, modified {counts.modified}")
    elif counts.added > 0:
        parts.append(f"Added {_plural(counts.added, 'element')}")
    elif counts.modified > 0:
        parts.append(f"Modified {_plural(counts.modified, 'element')}")

    if len(variants) > 3:
        props: list[str] = []
        for variant in variants:
            for token in variant_tokens(variant):
                prop = token.split("=", 1)[0]
                if prop not in props:
                    props.append(prop)
        if props:
            parts.append(f"Variants: {', '.join(props)}")

    return ". ".join(parts) or "Changes made"


def _added_values(comps: list[ComponentChange], prop: str) -> list[str]:
    """Distinct values of variant property *prop* among added components."""
    values: list[str] = []
    for change in comps:
        if change.kind != "added":
            continue
        value = variant_value(change.name, prop)
        if value and value not in values:
            values.append(value)
    return values


def _highlights(comps: list[ComponentChange]) -> list[str]:
    highlights: list[str] = []

    states = _added_values(comps, "State")
    if states:
        if len(states) <= 5:
            highlights.append(f"States: {', '.join(states)}")
        else:
            highlights.append(f"{len(states)} state variants")

    sizes = _added_values(comps, "Size")
    if sizes:
        highlights.append(f"Sizes: {', '.join(sizes)}")

    types = _added_values(comps, "Type")
    if types:
        if len(types) <= 5:
            highlights.append(f"Types: {', '.join(types)}")
        else:
            highlights.append(f"{len(types)} type variants")

    return highlights[:MAX_HIGHLIGHTS]


def simple_summary(result: SemanticDiffResult) -> list[str]:
    """A handful of short lines describing what was worked on."""
    summary = result.summary
    lines = [f"{summary.features_worked_on} features worked on"]
    if summary.new_features > 0:
        lines.append(f"{_plural(summary.new_features, 'new feature')}")
    if summary.updated_features > 0:
        lines.append(f"{summary.updated_features} updated")
    for feature in result.features[:3]:
        lines.append(f"• {feature.name}: {feature.description}")
    if len(result.features) > 3:
        lines.append(f"...and {len(result.features) - 3} more")
    return lines
