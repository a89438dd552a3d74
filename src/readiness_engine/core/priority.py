"""Topic priority, risk classification and dimension gap comparisons.

Priority is a fixed linear blend: 40% gap size, 30% ambition (target/5)
and 30% current weakness ((5 - current)/5). Dimension comparisons use the
signed gap so that overperformance shows up as a negative trend input.
"""

import math
from collections.abc import Mapping, Sequence

from readiness_engine.core.answers import iter_answered_topics
from readiness_engine.core.definitions import AssessmentDefinition, RatingsSnapshot
from readiness_engine.core.models import DimensionComparison, DimensionResult, RiskLevel, TopTopic, Trend
from readiness_engine.core.number import round_to_step, signed_gap

_GAP_WEIGHT: float = 0.40
_TARGET_WEIGHT: float = 0.30
_WEAKNESS_WEIGHT: float = 0.30


def calculate_priority_score(current: float, target: float, gap: float) -> float:
    """Multi-factor priority for one topic.

    Args:
        current: Current rating (1-5).
        target: Target rating (1-5).
        gap: Clamped gap (0-4).

    Returns:
        Non-negative priority rounded to 0.1.
    """
    gap_component = gap * _GAP_WEIGHT
    target_component = (target / 5) * _TARGET_WEIGHT
    weakness_component = ((5 - current) / 5) * _WEAKNESS_WEIGHT
    return round_to_step(max(0.0, gap_component + target_component + weakness_component), 0.1)


def determine_risk_level(current: float, gap: float) -> RiskLevel:
    """Classify risk; the first matching rule wins.

    high:   current <= 2.0 or gap >= 2.0
    medium: current <= 3.5 or gap >= 1.0
    low:    otherwise
    """
    if current <= 2.0 or gap >= 2.0:
        return "high"
    if current <= 3.5 or gap >= 1.0:
        return "medium"
    return "low"


def compute_top_topics(
    definition: AssessmentDefinition,
    snapshot: RatingsSnapshot,
    limit: int = 10,
) -> list[TopTopic]:
    """Rank every answered topic by descending priority score.

    Ties keep definition order.

    Args:
        definition: Assessment definition.
        snapshot: Ratings snapshot.
        limit: Maximum number of topics returned.

    Returns:
        At most ``limit`` TopTopic records.
    """
    topics = [
        TopTopic(
            id=answered.topic.id,
            label=answered.topic.label,
            dimension_id=answered.dimension.id,
            dimension_name=answered.dimension.title,
            current=answered.current,
            target=answered.target,
            gap=answered.gap,
            priority_score=calculate_priority_score(answered.current, answered.target, answered.gap),
            risk_level=determine_risk_level(answered.current, answered.gap),
            impact_area=answered.dimension.title,
        )
        for answered in iter_answered_topics(definition, snapshot)
    ]
    topics.sort(key=lambda topic: topic.priority_score, reverse=True)
    return topics[:limit]


def calculate_variance(values: Sequence[float]) -> float:
    """Population standard deviation of ``values`` (0.0 for an empty sequence)."""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return math.sqrt(sum((value - mean) ** 2 for value in values) / len(values))


def determine_trend(gap: float, variance: float) -> Trend:
    """Trend from a signed gap and the spread of topic ratings."""
    if gap > 0.5 and variance < 0.5:
        return "positive"
    if gap < -0.5 or variance > 1.0:
        return "negative"
    return "neutral"


def compute_dimension_comparisons(
    dimensions: Sequence[DimensionResult],
    topic_currents: Mapping[str, Sequence[float]] | None = None,
) -> list[DimensionComparison]:
    """Build dimension-level gap analysis sorted by descending signed gap.

    Args:
        dimensions: Dimension results from the aggregator.
        topic_currents: Optional dimension id -> current ratings of its
            answered topics. Drives the variance; variance is 0 without it.

    Returns:
        One DimensionComparison per dimension.
    """
    topic_currents = topic_currents or {}
    comparisons: list[DimensionComparison] = []
    for dimension in dimensions:
        gap = signed_gap(dimension.target_avg, dimension.current_avg)
        variance = round_to_step(calculate_variance(topic_currents.get(dimension.id, ())), 0.01)
        comparisons.append(
            DimensionComparison(
                id=dimension.id,
                name=dimension.title,
                current=dimension.current_avg,
                target=dimension.target_avg,
                gap=gap,
                gap_percentage=round_to_step(abs(gap) / 5 * 100, 0.1),
                variance=variance,
                trend=determine_trend(gap, variance),
            )
        )
    comparisons.sort(key=lambda comparison: comparison.gap, reverse=True)
    return comparisons
