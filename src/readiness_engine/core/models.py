"""Output records produced by the engine.

All records are plain frozen pydantic models with no behaviour, created
fresh on every computation pass. ``model_dump(by_alias=True)`` yields the
camelCase shape used in API response bodies.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from readiness_engine.core.definitions import RecommendationCategory

RiskLevel = Literal["high", "medium", "low"]
Trend = Literal["positive", "negative", "neutral"]
MaturityStageId = Literal["explorer", "structured", "integrated", "optimized"]
MaturityConfidence = Literal["Low", "Medium", "High"]
Timeframe = Literal["immediate", "short", "medium", "long"]


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------


class DimensionSummary(_Record):
    """Averages over the answered topics of one dimension.

    Attributes:
        current_avg: Mean current rating on the 0.5 grid (0 when nothing answered).
        target_avg: Mean target rating on the 0.5 grid (0 when nothing answered).
        gap_avg: Clamped gap between the two averages.
        answered_count: Topics that are touched and scored.
        total_count: All topics in the dimension.
        progress: Percentage of topics answered (0-100).
        current_sum: Raw sum of current ratings, for weighted aggregation.
        target_sum: Raw sum of target ratings, for weighted aggregation.
    """

    current_avg: float = 0.0
    target_avg: float = 0.0
    gap_avg: float = 0.0
    answered_count: int = 0
    total_count: int = 0
    progress: int = 0
    current_sum: float = 0.0
    target_sum: float = 0.0


class OverallSummary(_Record):
    """Response-weighted averages across every dimension.

    Attributes:
        current_avg: Overall current average.
        target_avg: Overall target average.
        gap_avg: Clamped overall gap.
        answered_count: Answered topics across all dimensions.
        total_count: Topics across all dimensions.
        progress: Percentage answered (0-100).
        completed_dimensions: Dimensions marked complete.
        total_dimensions: Dimensions in the definition.
        confidence_ratio: answered / total, rounded to two decimals.
    """

    current_avg: float = 0.0
    target_avg: float = 0.0
    gap_avg: float = 0.0
    answered_count: int = 0
    total_count: int = 0
    progress: int = 0
    completed_dimensions: int = 0
    total_dimensions: int = 0
    confidence_ratio: float = 0.0


class DimensionResult(_Record):
    """A dimension summary labelled with its definition."""

    id: str
    key: str
    title: str
    current_avg: float
    target_avg: float
    gap_avg: float
    answered_count: int
    total_count: int
    progress: int
    is_complete: bool


class TopGap(_Record):
    """An answered topic with a positive gap."""

    dimension_id: str
    dimension_title: str
    topic_id: str
    topic_label: str
    current: float
    target: float
    gap: float
    priority_score: float
    risk_level: RiskLevel


class TopTopic(_Record):
    """An answered topic ranked by multi-factor priority."""

    id: str
    label: str
    dimension_id: str
    dimension_name: str
    current: float
    target: float
    gap: float
    priority_score: float
    risk_level: RiskLevel
    impact_area: str


class DimensionComparison(_Record):
    """Dimension-level gap analysis for trend display.

    ``gap`` keeps its sign here, unlike the clamped gaps used for scoring.
    """

    id: str
    name: str
    current: float
    target: float
    gap: float
    gap_percentage: float
    variance: float
    trend: Trend


class MissingItem(_Record):
    """A topic the participant has not rated yet."""

    dimension_id: str
    dimension_title: str
    topic_id: str
    topic_label: str


class ResultsModel(_Record):
    """Everything the aggregator derives from one ratings snapshot."""

    overall: OverallSummary
    dimensions: list[DimensionResult]
    top_gaps: list[TopGap]
    dimension_comparisons: list[DimensionComparison]
    top_topics: list[TopTopic]
    overall_gap: float
    maturity_trend: Literal["improving", "stable", "declining"] = "stable"


# ---------------------------------------------------------------------------
# Maturity
# ---------------------------------------------------------------------------


class MaturityStage(_Record):
    """One of the four ordered maturity stages."""

    id: MaturityStageId
    label: str
    description: str
    min_score: float


class DimensionMaturity(_Record):
    stage: MaturityStage
    downgrade_reason: str | None = None


class OrganizationMaturity(_Record):
    stage: MaturityStage
    confidence_label: MaturityConfidence
    confidence_ratio: float
    downgrade_reason: str | None = None


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------


class RecommendationMetrics(_Record):
    """0-10 scores describing how a recommendation should be scheduled."""

    urgency: float
    importance: float
    resource_need: float
    complexity: float
    timeframe: Timeframe


class EnhancedRecommendation(_Record):
    """A matched rule bound to a dimension's live scores.

    Attributes:
        id: Rule id.
        rank: 1-based position by descending priority.
        title: Rule title.
        description: Rule description.
        dimension: Dimension key the rule matched on.
        dimension_title: Display title of that dimension.
        category: Quick Win, Project or Big Bet.
        metrics: Computed scheduling metrics.
        color: Dimension display colour.
        tags: Rule tags.
        actions: Action item texts.
        gap: The dimension gap the rule matched on.
        priority: Declared or computed priority.
        why: Narrative "why" text.
        what: Narrative "what" text.
        how: Narrative "how" text.
    """

    id: str
    rank: int = 0
    title: str
    description: str = ""
    dimension: str
    dimension_title: str = ""
    category: RecommendationCategory
    metrics: RecommendationMetrics
    color: str
    tags: list[str] = Field(default_factory=list)
    actions: list[str] = Field(default_factory=list)
    gap: float
    priority: float
    why: str | None = None
    what: str | None = None
    how: str | None = None


class RecommendationBubble(_Record):
    """Bubble chart point: x = urgency, y = importance, size from resource need.

    ``offset_x``/``offset_y`` spread bubbles that share a point; they are a
    rendering aid only.
    """

    id: str
    rank: int
    x: float
    y: float
    size: int
    color: str
    label: str
    offset_x: float = 0.0
    offset_y: float = 0.0


# ---------------------------------------------------------------------------
# Narrative
# ---------------------------------------------------------------------------


class NarrativePriority(_Record):
    title: str
    why: str


class NarrativeModel(_Record):
    """Fully rendered narrative; no templating left for downstream."""

    headline: str
    executive_summary: str
    stage_rationale: str
    priorities: list[NarrativePriority]
    quick_wins: list[str]
    notes: list[str]


class AssessmentReport(_Record):
    """Output of one full engine pass."""

    results: ResultsModel
    organization_maturity: OrganizationMaturity
    dimension_maturity: dict[str, DimensionMaturity]
    recommendations: list[EnhancedRecommendation]
    bubbles: list[RecommendationBubble]
    narrative: NarrativeModel
    missing_items: list[MissingItem]
