"""Readiness scoring -- how implementation-ready a feature's design looks.

Each feature is scored 0-100 from five additive signals:

==================  ======  ==================================================
Signal              Points  Evidence
==================  ======  ==================================================
Required states     30 +10  ``State=`` variants covering Default/Hover/Disabled,
                            plus 2 per recommended state found
Responsive          20      breakpoint words in variant names or node paths
Design tokens       20      always credited (needs full paint data to verify)
Annotations         15      TEXT changes whose names carry handoff keywords
Prototype proxy     8       more than three component changes
==================  ======  ==================================================
"""

from __future__ import annotations

import logging
import math
from collections import Counter

from ..models import (
    FeatureGroup,
    ReadinessAssessment,
    ReadinessRules,
    ReadinessStatus,
    ReadinessSummary,
)
from ..names import parse_variant_properties

logger = logging.getLogger(__name__)

STATE_POINTS = 30
STATE_BONUS_PER_STATE = 2
STATE_BONUS_CAP = 10
RESPONSIVE_POINTS = 20
RESPONSIVE_PARTIAL_POINTS = 10
TOKEN_POINTS = 20
ANNOTATION_POINTS = 15
ANNOTATION_PARTIAL_POINTS = 5
PROTOTYPE_POINTS = 8
PROTOTYPE_COMPONENT_THRESHOLD = 3
LARGE_SET_THRESHOLD = 5

_DEFAULT_RULES = ReadinessRules()


def extract_states(variants: list[str]) -> list[str]:
    """Distinct ``State=`` values across *variants*, in first-seen order."""
    states: list[str] = []
    for variant in variants:
        for prop, value in parse_variant_properties(variant).items():
            if prop.lower() == "state" and value not in states:
                states.append(value)
    return states


def _has_state(states: list[str], wanted: str) -> bool:
    return any(s.lower() == wanted.lower() for s in states)


def has_responsive_variants(
    variants: list[str],
    node_paths: list[str],
    indicators: list[str],
) -> bool:
    text = " ".join([*variants, *node_paths]).lower()
    return any(indicator.lower() in text for indicator in indicators)


def assess_readiness(
    feature: FeatureGroup,
    rules: ReadinessRules | None = None,
) -> ReadinessAssessment:
    """Score one feature group.  Pure: identical input gives identical output."""
    rules = rules or _DEFAULT_RULES
    issues: list[str] = []
    score = 0.0

    # 1. Interaction states
    states = extract_states(feature.variants)
    missing = [s for s in rules.required_states if not _has_state(states, s)]
    has_all_states = not missing
    if missing:
        issues.append(f"Missing required states: {', '.join(missing)}")
    if rules.required_states:
        found = len(rules.required_states) - len(missing)
        score += found / len(rules.required_states) * STATE_POINTS
    else:
        score += STATE_POINTS

    recommended = [s for s in rules.recommended_states if _has_state(states, s)]
    score += min(len(recommended) * STATE_BONUS_PER_STATE, STATE_BONUS_CAP)

    # 2. Responsive variants
    node_paths = [" ".join(c.path) for c in feature.node_changes]
    has_responsive = has_responsive_variants(
        feature.variants, node_paths, rules.responsive_indicators,
    )
    is_set = feature.category == "component-set"
    if has_responsive:
        score += RESPONSIVE_POINTS
    else:
        if is_set or len(feature.component_changes) > LARGE_SET_THRESHOLD:
            issues.append("No responsive variants detected")
        if not is_set:
            score += RESPONSIVE_PARTIAL_POINTS

    # 3. Design tokens
    uses_tokens = True
    score += TOKEN_POINTS

    # 4. Annotations
    keywords = [k.lower() for k in rules.annotation_keywords]
    has_annotations = any(
        c.node_type == "TEXT" and any(k in c.name.lower() for k in keywords)
        for c in feature.node_changes
    )
    if has_annotations:
        score += ANNOTATION_POINTS
    else:
        if is_set:
            issues.append("Consider adding developer annotations")
        score += ANNOTATION_PARTIAL_POINTS

    # 5. Prototype connections
    has_prototype = len(feature.component_changes) > PROTOTYPE_COMPONENT_THRESHOLD
    if has_prototype:
        score += PROTOTYPE_POINTS

    recommendations: list[str] = []
    if not has_all_states:
        recommendations.append("Add missing interaction states for complete component coverage")
    if not has_responsive and is_set:
        recommendations.append("Consider adding responsive variants for different screen sizes")
    if not has_annotations:
        recommendations.append("Add developer annotations to clarify implementation details")
    if not has_prototype and len(feature.variants) > 5:
        recommendations.append("Create a prototype to demonstrate interaction flows")

    final = min(max(math.floor(score + 0.5), 0), 100)
    logger.debug("Readiness for %r: %d", feature.name, final)

    return ReadinessAssessment(
        feature_name=feature.name,
        score=final,
        has_all_states=has_all_states,
        has_responsive=has_responsive,
        uses_tokens=uses_tokens,
        has_annotations=has_annotations,
        has_prototype=has_prototype,
        issues=issues,
        recommendations=recommendations,
    )


def assess_all(
    features: list[FeatureGroup],
    rules: ReadinessRules | None = None,
) -> dict[str, ReadinessAssessment]:
    """Assess every feature, keyed by feature name."""
    return {feature.name: assess_readiness(feature, rules) for feature in features}


def readiness_summary(assessments: dict[str, ReadinessAssessment]) -> ReadinessSummary:
    values = list(assessments.values())
    if not values:
        return ReadinessSummary()

    average = math.floor(sum(a.score for a in values) / len(values) + 0.5)
    issue_counts = Counter(issue for a in values for issue in a.issues)

    return ReadinessSummary(
        average_readiness=average,
        ready_count=sum(1 for a in values if a.score >= 80),
        in_progress_count=sum(1 for a in values if 50 <= a.score < 80),
        needs_work_count=sum(1 for a in values if a.score < 50),
        top_issues=[
            f"{issue} ({count} components)"
            for issue, count in issue_counts.most_common(5)
        ],
    )


def readiness_status(score: int) -> ReadinessStatus:
    if score >= 90:
        return ReadinessStatus(status="ready", label="Ready for Dev")
    if score >= 75:
        return ReadinessStatus(status="almost", label="Almost Ready")
    if score >= 50:
        return ReadinessStatus(status="in-progress", label="In Progress")
    return ReadinessStatus(status="needs-work", label="Needs Work")
