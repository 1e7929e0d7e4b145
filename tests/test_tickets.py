"""Tests for ticket matching and design-link helpers."""

from __future__ import annotations

import pytest

from designdiff.analysis import extract_design_links, extract_file_key, find_tickets_for_file, match_tickets, similarity
from designdiff.analysis.tickets import (
    confidence_for,
    find_best_ticket,
    group_matches_by_status,
    match_summary_lines,
    score_ticket,
    ticket_status_summary,
)
from designdiff.models import (
    ChangeCounts,
    DiffResult,
    FeatureGroup,
    SemanticDiffResult,
    Ticket,
    TicketLabel,
    TicketState,
    VersionRef,
)

FILE_URL = "https://www.figma.com/file/AbC123/Design-System?node-id=1-2"


def _feature(name: str) -> FeatureGroup:
    return FeatureGroup(
        name=name,
        description="",
        category="component",
        change_type="updated",
        changes=ChangeCounts(modified=1),
    )


def _ticket(ticket_id: str, title: str, **extra) -> Ticket:
    return Ticket(id=ticket_id, identifier=f"ENG-{ticket_id}", title=title, **extra)


def _semantic(*names: str) -> SemanticDiffResult:
    return SemanticDiffResult(
        features=[_feature(n) for n in names],
        original_diff=DiffResult(from_version=VersionRef(id="a"), to_version=VersionRef(id="b")),
    )


class TestSimilarity:
    def test_equal_after_normalising(self):
        assert similarity("Primary Button!", "primary   button") == 1.0

    def test_containment(self):
        assert similarity("Button", "Primary Button redesign") == 0.8

    def test_token_overlap(self):
        assert similarity("Checkout flow", "Checkout summary page") == pytest.approx(1 / 3)

    def test_short_tokens_ignored(self):
        assert similarity("ui kit", "ui set") == 0.0

    def test_empty_side(self):
        assert similarity("", "Button") == 0.0
        assert similarity("!!!", "Button") == 0.0


class TestDesignLinks:
    def test_extract_links(self):
        text = f"See {FILE_URL} and https://figma.com/design/XyZ9 and again {FILE_URL} today"
        links = extract_design_links(text)
        assert links == [FILE_URL, "https://figma.com/design/XyZ9"]

    def test_no_text(self):
        assert extract_design_links(None) == []

    @pytest.mark.parametrize("url, key", [
        (FILE_URL, "AbC123"),
        ("https://figma.com/proto/K1/Flow", "K1"),
        ("figma.com/design/K2", "K2"),
        ("https://example.com/file/K3", None),
        ("https://www.figma.com/community/K4", None),
        ("https://www.figma.com/file", None),
    ])
    def test_extract_file_key(self, url, key):
        assert extract_file_key(url) == key

    def test_find_tickets_for_file(self):
        linked = _ticket("1", "Nav", design_links=[FILE_URL])
        in_text = _ticket("2", "Footer", description=f"Designs: {FILE_URL}")
        other = _ticket("3", "Other", design_links=["https://www.figma.com/file/Zzz/x"])
        assert find_tickets_for_file([linked, in_text, other], "AbC123") == [linked, in_text]

    def test_camel_case_aliases(self):
        ticket = Ticket.model_validate({
            "id": "9", "title": "Nav", "figmaLinks": [FILE_URL], "createdAt": "2024-01-01",
        })
        assert ticket.design_links == [FILE_URL]
        assert ticket.created_at == "2024-01-01"


class TestScoring:
    def test_primary_button_redesign_is_low(self):
        ticket = _ticket("1", "Primary Button redesign")
        match = find_best_ticket(_feature("Button"), [ticket])
        assert match.ticket == ticket
        assert match.confidence == "low"
        assert match.reason == 'Title match: "Primary Button redesign"'
        assert match.score == pytest.approx(0.24)

    def test_file_link_boost(self):
        ticket = _ticket("1", "Primary Button redesign", design_links=[FILE_URL])
        score, reason = score_ticket(_feature("Button"), ticket, "AbC123")
        assert score == pytest.approx(0.74)
        assert reason == "Design file linked in ticket"
        assert confidence_for(score) == "high"

    def test_description_and_label(self):
        ticket = _ticket(
            "1", "Sprint work",
            description="Polish the checkout",
            labels=[TicketLabel(name="Checkout")],
        )
        score, reason = score_ticket(_feature("Checkout"), ticket)
        assert score == pytest.approx(0.8 * 0.2 + 0.2)
        assert reason == "Mentioned in description"

    def test_label_only(self):
        ticket = _ticket("1", "Sprint work", labels=[TicketLabel(name="checkout")])
        score, reason = score_ticket(_feature("Checkout"), ticket)
        assert score == pytest.approx(0.2)
        assert reason == 'Label match: "checkout"'

    def test_confidence_tiers(self):
        assert confidence_for(0.7) == "high"
        assert confidence_for(0.4) == "medium"
        assert confidence_for(0.11) == "low"
        assert confidence_for(0.1) == "none"

    def test_no_tickets(self):
        match = find_best_ticket(_feature("Button"), [])
        assert match.confidence == "none"
        assert match.reason == "No tickets available"

    def test_nothing_relevant(self):
        match = find_best_ticket(_feature("Button"), [_ticket("1", "Database migration")])
        assert match.ticket is None
        assert match.confidence == "none"
        assert match.reason == "No matching ticket found"


class TestMatchTickets:
    def test_ticket_used_once(self):
        tickets = [_ticket("1", "Button")]
        result = match_tickets(_semantic("Button", "Buttons"), tickets)

        assigned = [m.ticket.id for m in result.matches if m.ticket is not None]
        assert assigned == ["1"]
        assert result.matches[1].confidence == "none"
        assert [f.name for f in result.unmatched_features] == ["Buttons"]
        assert result.unmatched_tickets == []
        assert result.summary.match_percentage == 50

    def test_unmatched_tickets(self):
        tickets = [_ticket("1", "Card"), _ticket("2", "Billing export")]
        result = match_tickets(_semantic("Card"), tickets)
        assert [t.id for t in result.unmatched_tickets] == ["2"]
        assert result.summary.matched_features == 1
        assert result.summary.match_percentage == 100

    def test_empty_pool(self):
        result = match_tickets(_semantic("Card", "Nav"), [])
        assert all(m.reason == "No tickets available" for m in result.matches)
        assert result.summary.match_percentage == 0

    def test_no_features(self):
        result = match_tickets(_semantic(), [_ticket("1", "Card")])
        assert result.summary.total_features == 0
        assert result.summary.match_percentage == 0


class TestReporting:
    def test_status_helpers(self):
        done = _ticket("1", "Card", state=TicketState(name="Done"))
        todo = _ticket("2", "Nav", state=TicketState(name="Todo"))
        result = match_tickets(_semantic("Card", "Nav", "Footer"), [done, todo])

        summary = ticket_status_summary(result.matches)
        assert summary["by_status"] == {"Done": 1, "Todo": 1}
        assert summary["by_confidence"]["low"] == 2
        assert summary["by_confidence"]["none"] == 1

        groups = group_matches_by_status(result.matches)
        assert set(groups) == {"Done", "Todo", "Unlinked"}
        assert groups["Unlinked"][0].feature.name == "Footer"

        lines = match_summary_lines(result)
        assert lines[0] == "2/3 features linked to tickets"
        assert lines[1] == "1 features without tickets:"
        assert lines[2] == "  • Footer"
