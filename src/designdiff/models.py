"""Pydantic models for designdiff's analysis pipeline."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


ChangeKind = Literal["added", "removed", "modified", "renamed", "moved"]
FeatureCategory = Literal[
    "component", "component-set", "page-section", "style", "icon", "layout", "misc",
]
FeatureChangeType = Literal["new", "updated", "removed"]
Confidence = Literal["high", "medium", "low", "none"]


class _DocumentModel(BaseModel):
    """Base for records that arrive in the design tool's camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


# ---------------------------------------------------------------------------
# Snapshot inputs
# ---------------------------------------------------------------------------

class BoundingBox(_DocumentModel):
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class DocumentNode(_DocumentModel):
    """One element of a design-document tree."""

    id: str
    name: str
    type: str
    visible: bool | None = None
    children: list[DocumentNode] | None = None

    # Paint
    fills: list[dict[str, Any]] | None = None
    strokes: list[dict[str, Any]] | None = None
    stroke_weight: float | None = None
    corner_radius: float | None = None
    effects: list[dict[str, Any]] | None = None
    absolute_bounding_box: BoundingBox | None = None

    # Auto-layout
    layout_mode: str | None = None
    primary_axis_sizing_mode: str | None = None
    counter_axis_sizing_mode: str | None = None
    padding_left: float | None = None
    padding_right: float | None = None
    padding_top: float | None = None
    padding_bottom: float | None = None
    item_spacing: float | None = None

    # Text
    characters: str | None = None
    style: dict[str, Any] | None = None

    # Component linkage
    component_id: str | None = None
    component_property_definitions: dict[str, Any] | None = None


class LibraryComponent(_DocumentModel):
    key: str
    name: str
    description: str = ""
    documentation_links: list[str] = Field(default_factory=list)


class LibraryStyle(_DocumentModel):
    key: str
    name: str
    style_type: str
    description: str = ""


class DocumentSnapshot(_DocumentModel):
    """A full capture of one design document at a specific version."""

    name: str = ""
    last_modified: str | None = None
    version: str | None = None
    document: DocumentNode
    components: dict[str, LibraryComponent] = Field(default_factory=dict)
    styles: dict[str, LibraryStyle] = Field(default_factory=dict)


class VersionInfo(_DocumentModel):
    """Version metadata supplied alongside a snapshot."""

    id: str
    created_at: str = ""
    label: str | None = None
    description: str | None = None


class FlattenedEntry(BaseModel):
    """A node plus the names of its ancestors, ending with its own name."""

    node: DocumentNode
    path: list[str]


# ---------------------------------------------------------------------------
# Diff output
# ---------------------------------------------------------------------------

class PropertyChange(BaseModel):
    property: str
    before: Any = None
    after: Any = None


class NodeChange(BaseModel):
    kind: ChangeKind
    node_id: str
    name: str
    node_type: str
    path: list[str]
    detail: str = ""
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None


class ComponentChange(BaseModel):
    kind: ChangeKind
    key: str
    name: str
    detail: str = ""
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None


class StyleChange(BaseModel):
    kind: ChangeKind
    key: str
    name: str
    style_type: str
    detail: str = ""
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None


class DiffSummary(BaseModel):
    total_changes: int = 0
    nodes_added: int = 0
    nodes_removed: int = 0
    nodes_modified: int = 0
    nodes_renamed: int = 0
    nodes_moved: int = 0
    components_changed: int = 0
    styles_changed: int = 0


class VersionRef(BaseModel):
    id: str
    created_at: str = ""
    label: str | None = None


class DiffResult(BaseModel):
    """Top-level result of comparing two snapshots."""

    summary: DiffSummary = Field(default_factory=DiffSummary)
    node_changes: list[NodeChange] = Field(default_factory=list)
    component_changes: list[ComponentChange] = Field(default_factory=list)
    style_changes: list[StyleChange] = Field(default_factory=list)
    from_version: VersionRef
    to_version: VersionRef
    file_name: str = ""


# ---------------------------------------------------------------------------
# Semantic grouping
# ---------------------------------------------------------------------------

class ChangeCounts(BaseModel):
    added: int = 0
    modified: int = 0
    removed: int = 0

    @property
    def total(self) -> int:
        return self.added + self.modified + self.removed


class FeatureGroup(BaseModel):
    """A cluster of changes judged to be one unit of work."""

    name: str
    description: str
    category: FeatureCategory
    change_type: FeatureChangeType
    changes: ChangeCounts
    variants: list[str] = Field(default_factory=list)
    highlights: list[str] = Field(default_factory=list)
    node_changes: list[NodeChange] = Field(default_factory=list)
    component_changes: list[ComponentChange] = Field(default_factory=list)
    path: str = ""


class SemanticSummary(BaseModel):
    features_worked_on: int = 0
    new_features: int = 0
    updated_features: int = 0
    removed_features: int = 0
    total_changes: int = 0


class SemanticDiffResult(BaseModel):
    features: list[FeatureGroup] = Field(default_factory=list)
    summary: SemanticSummary = Field(default_factory=SemanticSummary)
    ungrouped_changes: list[NodeChange] = Field(default_factory=list)
    style_changes: list[StyleChange] = Field(default_factory=list)
    original_diff: DiffResult


# ---------------------------------------------------------------------------
# Readiness
# ---------------------------------------------------------------------------

class ReadinessRules(BaseModel):
    """Vocabularies the readiness scorer looks for in names and paths."""

    required_states: list[str] = Field(
        default_factory=lambda: ["Default", "Hover", "Disabled"],
    )
    recommended_states: list[str] = Field(
        default_factory=lambda: ["Active", "Focus", "Loading", "Error", "Selected"],
    )
    responsive_indicators: list[str] = Field(
        default_factory=lambda: [
            "mobile", "tablet", "desktop",
            "sm", "md", "lg", "xl",
            "small", "medium", "large",
            "320", "768", "1024", "1440",
        ],
    )
    annotation_keywords: list[str] = Field(
        default_factory=lambda: ["note:", "spec:", "dev:", "handoff:", "todo", "implementation"],
    )


class ReadinessAssessment(BaseModel):
    feature_name: str
    score: int
    has_all_states: bool
    has_responsive: bool
    uses_tokens: bool
    has_annotations: bool
    has_prototype: bool
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class ReadinessSummary(BaseModel):
    average_readiness: int = 0
    ready_count: int = 0
    in_progress_count: int = 0
    needs_work_count: int = 0
    top_issues: list[str] = Field(default_factory=list)


class ReadinessStatus(BaseModel):
    status: Literal["ready", "almost", "in-progress", "needs-work"]
    label: str


# ---------------------------------------------------------------------------
# Tickets
# ---------------------------------------------------------------------------

class TicketState(_DocumentModel):
    name: str
    type: str = ""


class TicketLabel(_DocumentModel):
    name: str
    color: str = ""


class TicketAssignee(_DocumentModel):
    name: str
    email: str = ""


class Ticket(_DocumentModel):
    """An externally supplied work-tracking ticket."""

    id: str
    identifier: str = ""
    title: str
    description: str | None = None
    state: TicketState = Field(default_factory=lambda: TicketState(name="Unknown"))
    assignee: TicketAssignee | None = None
    labels: list[TicketLabel] = Field(default_factory=list)
    url: str = ""
    created_at: str | None = None
    updated_at: str | None = None
    design_links: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("design_links", "designLinks", "figmaLinks"),
    )


class TicketMatch(BaseModel):
    feature: FeatureGroup
    ticket: Ticket | None = None
    confidence: Confidence
    reason: str
    score: float = 0.0


class MatchSummary(BaseModel):
    total_features: int = 0
    matched_features: int = 0
    match_percentage: int = 0


class MatchResult(BaseModel):
    matches: list[TicketMatch] = Field(default_factory=list)
    unmatched_features: list[FeatureGroup] = Field(default_factory=list)
    unmatched_tickets: list[Ticket] = Field(default_factory=list)
    summary: MatchSummary = Field(default_factory=MatchSummary)


# ---------------------------------------------------------------------------
# Structured diff views
# ---------------------------------------------------------------------------

class TreeStats(BaseModel):
    total_changes: int = 0
    added: int = 0
    removed: int = 0
    modified: int = 0


class FileTreeNode(BaseModel):
    """One segment of the change tree built from node-change paths."""

    name: str
    path: str
    type: Literal["root", "page", "section", "component-set", "component", "element"]
    changes: dict[str, list[NodeChange]] = Field(
        default_factory=lambda: {"added": [], "removed": [], "modified": []},
    )
    children: dict[str, FileTreeNode] = Field(default_factory=dict)
    stats: TreeStats = Field(default_factory=TreeStats)


class ComponentVariant(BaseModel):
    name: str
    kind: ChangeKind
    properties: dict[str, str] = Field(default_factory=dict)


class ComponentSetGroup(BaseModel):
    name: str
    set_path: str
    variants: list[ComponentVariant] = Field(default_factory=list)
    stats: ChangeCounts = Field(default_factory=ChangeCounts)


class PageStat(BaseModel):
    name: str
    path: str
    changes: int
    breakdown: ChangeCounts


class StructuredDiff(BaseModel):
    file_tree: FileTreeNode
    component_groups: list[ComponentSetGroup] = Field(default_factory=list)
    page_stats: list[PageStat] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Library index
# ---------------------------------------------------------------------------

class IndexedComponent(BaseModel):
    key: str
    name: str
    description: str = ""
    variants: dict[str, list[str]] = Field(default_factory=dict)
    default_variant: dict[str, str] | None = None


class LibraryIndex(BaseModel):
    """Catalog of a document's component and style libraries."""

    file_key: str
    file_name: str
    version_id: str | None = None
    components: list[IndexedComponent] = Field(default_factory=list)
    styles: dict[str, list[str]] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Pipeline report & configuration
# ---------------------------------------------------------------------------

class PipelineReport(BaseModel):
    """Everything one run derives from a pair of snapshots."""

    diff: DiffResult
    semantic: SemanticDiffResult
    readiness: dict[str, ReadinessAssessment] = Field(default_factory=dict)
    readiness_summary: ReadinessSummary = Field(default_factory=ReadinessSummary)
    matches: MatchResult | None = None
    structure: StructuredDiff | None = None
    library: LibraryIndex | None = None


class DesignDiffConfig(BaseModel):
    """User configuration stored in ``.designdiff/config.toml``.

    CLI flags override these values for a single invocation.
    Precedence: CLI flag > config.toml > default.
    """

    file_key: str | None = None
    """Design file the tickets are expected to link to."""

    indent: int = 2
    """Indentation used for JSON written by the CLI."""

    readiness: ReadinessRules = Field(default_factory=ReadinessRules)
    """State, breakpoint and annotation vocabularies for readiness scoring."""
