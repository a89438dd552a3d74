"""Maturity stage classification for dimensions and the organisation.

Four ordered stages, base stage from the current average:

    Stage       Index  Min score
    ----------  -----  ---------
    Explorer    0      0
    Structured  1      2
    Integrated  2      3
    Optimized   3      4

Downgrades never stack and never go below Explorer:
- Dimension: gap_avg > 1.5 drops exactly one stage.
- Organisation: confidence < 0.2 drops two stages, else confidence < 0.4
  drops one.
"""

from readiness_engine.core.models import (
    DimensionMaturity,
    MaturityConfidence,
    MaturityStage,
    MaturityStageId,
    OrganizationMaturity,
)

STAGES: dict[MaturityStageId, MaturityStage] = {
    "explorer": MaturityStage(
        id="explorer",
        label="Explorer",
        description=(
            "Initial experimentation with AI. Ad-hoc initiatives with limited "
            "strategy or governance."
        ),
        min_score=0,
    ),
    "structured": MaturityStage(
        id="structured",
        label="Structured",
        description=(
            "Formalized AI programs emerging. Defined roles and basic "
            "infrastructure in place."
        ),
        min_score=2,
    ),
    "integrated": MaturityStage(
        id="integrated",
        label="Integrated",
        description=(
            "AI embedded in core workflows. Scalable platforms and "
            "cross-functional alignment."
        ),
        min_score=3,
    ),
    "optimized": MaturityStage(
        id="optimized",
        label="Optimized",
        description=(
            "AI drives strategic advantage. Continuous innovation and automated "
            "value realization."
        ),
        min_score=4,
    ),
}

ORDERED_STAGES: list[MaturityStage] = [
    STAGES["explorer"],
    STAGES["structured"],
    STAGES["integrated"],
    STAGES["optimized"],
]

DIMENSION_GAP_DOWNGRADE_THRESHOLD: float = 1.5
VERY_LOW_CONFIDENCE_THRESHOLD: float = 0.2
LOW_CONFIDENCE_THRESHOLD: float = 0.4
MEDIUM_CONFIDENCE_THRESHOLD: float = 0.7

_GAP_DOWNGRADE_REASON = "Large gap between current and target capabilities."
_VERY_LOW_CONFIDENCE_REASON = "Very low assessment confidence."
_LOW_CONFIDENCE_REASON = "Low assessment confidence."


def get_stage(stage_id: MaturityStageId) -> MaturityStage:
    """Look up a stage by id."""
    return STAGES[stage_id]


def base_stage_index(score: float) -> int:
    """Stage index for a score, evaluated from the highest threshold down."""
    if score >= 4:
        return 3
    if score >= 3:
        return 2
    if score >= 2:
        return 1
    return 0


def confidence_label(confidence_ratio: float) -> MaturityConfidence:
    """Low below 0.4, Medium below 0.7, otherwise High."""
    if confidence_ratio < LOW_CONFIDENCE_THRESHOLD:
        return "Low"
    if confidence_ratio < MEDIUM_CONFIDENCE_THRESHOLD:
        return "Medium"
    return "High"


def get_dimension_maturity(current_avg: float, gap_avg: float) -> DimensionMaturity:
    """Classify one dimension.

    Args:
        current_avg: The dimension's current average.
        gap_avg: The dimension's clamped gap average.

    Returns:
        The stage, downgraded by one level when the gap exceeds 1.5 and the
        base stage is above Explorer.
    """
    index = base_stage_index(current_avg)
    downgrade_reason: str | None = None

    if gap_avg > DIMENSION_GAP_DOWNGRADE_THRESHOLD and index > 0:
        index -= 1
        downgrade_reason = _GAP_DOWNGRADE_REASON

    return DimensionMaturity(stage=ORDERED_STAGES[index], downgrade_reason=downgrade_reason)


def get_organization_maturity(
    overall_current_avg: float,
    confidence_ratio: float,
) -> OrganizationMaturity:
    """Classify the organisation.

    At most one confidence downgrade applies: the very-low rule is checked
    first and excludes the low rule. The confidence label is computed from
    the ratio alone, whether or not a downgrade happened.

    Args:
        overall_current_avg: Overall current average.
        confidence_ratio: Share of topics answered (0-1).

    Returns:
        The organisation's maturity with stage, confidence and any
        downgrade reason.
    """
    index = base_stage_index(overall_current_avg)
    downgrade_reason: str | None = None

    if confidence_ratio < VERY_LOW_CONFIDENCE_THRESHOLD:
        if index >= 2:
            index -= 2
            downgrade_reason = _VERY_LOW_CONFIDENCE_REASON
        elif index == 1:
            index = 0
            downgrade_reason = _VERY_LOW_CONFIDENCE_REASON
    elif confidence_ratio < LOW_CONFIDENCE_THRESHOLD:
        if index > 0:
            index -= 1
            downgrade_reason = _LOW_CONFIDENCE_REASON

    return OrganizationMaturity(
        stage=ORDERED_STAGES[index],
        confidence_label=confidence_label(confidence_ratio),
        confidence_ratio=confidence_ratio,
        downgrade_reason=downgrade_reason,
    )
