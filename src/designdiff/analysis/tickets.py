"""Ticket matching -- link feature groups to work-tracking tickets.

Matching is greedy in feature order: once a ticket is assigned it leaves
the candidate pool, so the first feature to claim a contested ticket
keeps it.
"""

from __future__ import annotations

import logging
import math
import re
from collections import defaultdict
from urllib.parse import urlparse

from ..models import (
    Confidence,
    FeatureGroup,
    MatchResult,
    MatchSummary,
    SemanticDiffResult,
    Ticket,
    TicketMatch,
)

logger = logging.getLogger(__name__)

LINK_WEIGHT = 0.5
TITLE_WEIGHT = 0.3
TITLE_THRESHOLD = 0.5
DESCRIPTION_WEIGHT = 0.2
DESCRIPTION_THRESHOLD = 0.3
LABEL_BONUS = 0.2
LABEL_THRESHOLD = 0.6

_DESIGN_HOSTS = ("figma.com", "www.figma.com")
_DESIGN_LINK_KINDS = frozenset({"file", "design", "proto"})
_DESIGN_LINK = re.compile(
    r"https://(?:www\.)?figma\.com/(?:file|design|proto)/[a-zA-Z0-9]+(?:/[^\s)]*)?",
)
_KEY = re.compile(r"^[a-zA-Z0-9]+$")
_NON_WORD = re.compile(r"[^a-z0-9\s]")
_SPACES = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Text similarity
# ---------------------------------------------------------------------------

def normalize(text: str) -> str:
    return _SPACES.sub(" ", _NON_WORD.sub("", text.lower())).strip()


def similarity(a: str, b: str) -> float:
    """Fuzzy similarity in [0, 1] between two short texts.

    1.0 for equal text, 0.8 when one contains the other, otherwise the share
    of tokens longer than two characters that both sides have in common.
    Blank text never matches, even though it is contained in everything.
    """
    a_norm, b_norm = normalize(a), normalize(b)
    if not a_norm or not b_norm:
        return 0.0
    if a_norm == b_norm:
        return 1.0
    if a_norm in b_norm or b_norm in a_norm:
        return 0.8

    a_words, b_words = set(a_norm.split(" ")), set(b_norm.split(" "))
    overlap = sum(1 for word in a_words if word in b_words and len(word) > 2)
    return overlap / max(len(a_words), len(b_words))


# ---------------------------------------------------------------------------
# Design-file links
# ---------------------------------------------------------------------------

def extract_design_links(text: str | None) -> list[str]:
    """Design-file URLs mentioned in free text, deduplicated in order."""
    if not text:
        return []
    links: list[str] = []
    for match in _DESIGN_LINK.finditer(text):
        if match.group(0) not in links:
            links.append(match.group(0))
    return links


def extract_file_key(url: str) -> str | None:
    """The file key of a design-file URL, or None when *url* is not one."""
    parsed = urlparse(url if "//" in url else f"https://{url}")
    if parsed.hostname not in _DESIGN_HOSTS:
        return None
    segments = [s for s in parsed.path.split("/") if s]
    if len(segments) < 2 or segments[0] not in _DESIGN_LINK_KINDS:
        return None
    return segments[1] if _KEY.match(segments[1]) else None


def ticket_links_file(ticket: Ticket, file_key: str) -> bool:
    """True when a linked or description-embedded URL points at *file_key*."""
    links = [*ticket.design_links, *extract_design_links(ticket.description)]
    return any(extract_file_key(link) == file_key for link in links)


def find_tickets_for_file(tickets: list[Ticket], file_key: str) -> list[Ticket]:
    return [t for t in tickets if ticket_links_file(t, file_key)]


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

def confidence_for(score: float) -> Confidence:
    if score >= 0.7:
        return "high"
    if score >= 0.4:
        return "medium"
    if score > 0.1:
        return "low"
    return "none"


def score_ticket(
    feature: FeatureGroup,
    ticket: Ticket,
    file_key: str | None = None,
) -> tuple[float, str]:
    """Score one (feature, ticket) pair and explain the strongest signal."""
    score = 0.0
    reason = ""

    if file_key and ticket_links_file(ticket, file_key):
        score += LINK_WEIGHT
        reason = "Design file linked in ticket"

    title_sim = similarity(feature.name, ticket.title)
    if title_sim > TITLE_THRESHOLD:
        score += title_sim * TITLE_WEIGHT
        reason = reason or f'Title match: "{ticket.title}"'

    if ticket.description:
        desc_sim = similarity(feature.name, ticket.description)
        if desc_sim > DESCRIPTION_THRESHOLD:
            score += desc_sim * DESCRIPTION_WEIGHT
            reason = reason or "Mentioned in description"

    for label in ticket.labels:
        if similarity(feature.name, label.name) > LABEL_THRESHOLD:
            score += LABEL_BONUS
            reason = reason or f'Label match: "{label.name}"'
            break

    return score, reason


def find_best_ticket(
    feature: FeatureGroup,
    tickets: list[Ticket],
    file_key: str | None = None,
) -> TicketMatch:
    if not tickets:
        return TicketMatch(feature=feature, confidence="none", reason="No tickets available")

    best: Ticket | None = None
    best_score = 0.0
    best_reason = ""
    for ticket in tickets:
        score, reason = score_ticket(feature, ticket, file_key)
        if score > best_score:
            best, best_score, best_reason = ticket, score, reason

    confidence = confidence_for(best_score)
    if confidence == "none":
        return TicketMatch(
            feature=feature,
            confidence="none",
            reason="No matching ticket found",
            score=best_score,
        )
    return TicketMatch(
        feature=feature,
        ticket=best,
        confidence=confidence,
        reason=best_reason,
        score=best_score,
    )


def match_tickets(
    semantic: SemanticDiffResult,
    tickets: list[Ticket],
    file_key: str | None = None,
) -> MatchResult:
    """Assign at most one ticket to each feature, never reusing a ticket."""
    matches: list[TicketMatch] = []
    assigned: set[str] = set()

    for feature in semantic.features:
        available = [t for t in tickets if t.id not in assigned]
        match = find_best_ticket(feature, available, file_key)
        if match.ticket is not None:
            assigned.add(match.ticket.id)
            logger.debug(
                "Matched %r -> %s (%s, %.2f)",
                feature.name, match.ticket.id, match.confidence, match.score,
            )
        matches.append(match)

    matched = [m for m in matches if m.confidence != "none"]
    total = len(semantic.features)

    return MatchResult(
        matches=matches,
        unmatched_features=[m.feature for m in matches if m.confidence == "none"],
        unmatched_tickets=[t for t in tickets if t.id not in assigned],
        summary=MatchSummary(
            total_features=total,
            matched_features=len(matched),
            match_percentage=math.floor(len(matched) / total * 100 + 0.5) if total else 0,
        ),
    )


# ---------------------------------------------------------------------------
# Reporting helpers
# ---------------------------------------------------------------------------

def ticket_status_summary(matches: list[TicketMatch]) -> dict[str, dict[str, int]]:
    by_status: dict[str, int] = {}
    by_confidence: dict[str, int] = {"high": 0, "medium": 0, "low": 0, "none": 0}
    for match in matches:
        by_confidence[match.confidence] += 1
        if match.ticket is not None:
            status = match.ticket.state.name
            by_status[status] = by_status.get(status, 0) + 1
    return {"by_status": by_status, "by_confidence": by_confidence}


def group_matches_by_status(matches: list[TicketMatch]) -> dict[str, list[TicketMatch]]:
    groups: dict[str, list[TicketMatch]] = defaultdict(list)
    for match in matches:
        status = match.ticket.state.name if match.ticket is not None else "Unlinked"
        groups[status].append(match)
    return dict(groups)


def match_summary_lines(result: MatchResult) -> list[str]:
    summary = result.summary
    lines = [f"{summary.matched_features}/{summary.total_features} features linked to tickets"]
    unmatched = result.unmatched_features
    if unmatched:
        lines.append(f"{len(unmatched)} features without tickets:")
        lines.extend(f"  • {f.name}" for f in unmatched[:3])
        if len(unmatched) > 3:
            lines.append(f"  ...and {len(unmatched) - 3} more")
    if result.unmatched_tickets:
        lines.append(f"{len(result.unmatched_tickets)} tickets without design changes")
    return lines
