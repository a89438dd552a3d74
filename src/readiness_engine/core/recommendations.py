"""Recommendation rule matching, metrics and ranking.

Each rule carries optional inclusive bounds on three axes: the dimension's
current score, its target (score + gap) and its gap. A rule matches when
all three axes pass. Matched rules get 0-10 urgency / importance /
complexity / resource-need metrics, a category and a priority, and are then
ranked across all dimensions by descending priority.

Metrics:
    urgency       = gap size (60%) + low current maturity (40%)
    importance    = target ambition x dimension weight
    complexity    = step function of (current, gap)
    resource_need = gap size + complexity
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from readiness_engine.core.definitions import (
    DimensionScore,
    RecommendationCategory,
    RecommendationRule,
    RecommendationRuleSet,
)
from readiness_engine.core.models import (
    EnhancedRecommendation,
    RecommendationBubble,
    RecommendationMetrics,
    Timeframe,
)
from readiness_engine.core.number import GAP_MAX, clamp, round_to_step
from readiness_engine.observability import get_logger

logger = get_logger(__name__)

DEFAULT_DIMENSION_WEIGHT: float = 0.5
DEFAULT_DIMENSION_COLOR: str = "#64748b"
DEFAULT_BUBBLE_LIMIT: int = 12

_BUBBLE_MIN_SIZE: int = 30
_BUBBLE_MAX_SIZE: int = 70
_BUBBLE_MIN_SPREAD: float = 10.0
_BUBBLE_SPREAD_FACTOR: float = 0.35

# Tags that force a category regardless of metrics, checked in order
_CATEGORY_TAGS: tuple[RecommendationCategory, ...] = ("Quick Win", "Big Bet")


@dataclass(frozen=True)
class ScoreRange:
    """Optional inclusive bounds on one axis.

    Attributes:
        minimum: Lower bound, or None for unbounded.
        maximum: Upper bound, or None for unbounded.
    """

    minimum: float | None = None
    maximum: float | None = None

    def contains(self, value: float) -> bool:
        """True when ``value`` lies within every bound that is set."""
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True


@dataclass(frozen=True)
class RuleConditions:
    """The three axis ranges of a rule."""

    score: ScoreRange
    target: ScoreRange
    gap: ScoreRange

    @classmethod
    def from_rule(cls, rule: RecommendationRule) -> "RuleConditions":
        return cls(
            score=ScoreRange(rule.score_min, rule.score_max),
            target=ScoreRange(rule.target_min, rule.target_max),
            gap=ScoreRange(rule.gap_min, rule.gap_max),
        )

    def matches(self, score: float, target: float, gap: float) -> bool:
        return self.score.contains(score) and self.target.contains(target) and self.gap.contains(gap)


def rule_matches(rule: RecommendationRule, score: float, gap: float) -> bool:
    """Test a rule against a dimension's score and gap.

    Args:
        rule: Recommendation rule.
        score: Current average.
        gap: Clamped gap; the target is derived as ``score + gap``.

    Returns:
        True when the score, target and gap ranges all pass.
    """
    return RuleConditions.from_rule(rule).matches(score, score + gap, gap)


def _clamp10(value: float) -> float:
    return clamp(value, 0.0, 10.0)


def _round1(value: float) -> float:
    return round_to_step(value, 0.1)


def _complexity_base(current: float, gap: float) -> float:
    if current < 2.0 and gap > 2.0:
        return 0.9
    if current < 3.0 and gap > 1.5:
        return 0.7
    if gap > 1.0:
        return 0.5
    return 0.3


def _timeframe(urgency: float, resource_need: float) -> Timeframe:
    if urgency > 8 and resource_need < 6:
        return "immediate"
    if urgency > 6:
        return "short"
    if resource_need > 7:
        return "long"
    return "medium"


def calculate_metrics(
    current: float,
    target: float,
    gap: float,
    dimension_weight: float = DEFAULT_DIMENSION_WEIGHT,
) -> RecommendationMetrics:
    """Compute the 0-10 scheduling metrics for a matched rule.

    Args:
        current: Dimension current average.
        target: Dimension target (score + gap).
        gap: Dimension clamped gap.
        dimension_weight: Importance weight of the dimension (0-1).

    Returns:
        RecommendationMetrics with every score clamped to 0-10.
    """
    gap_ratio = gap / GAP_MAX
    gap_urgency = gap_ratio * 10
    maturity_urgency = ((5 - current) / 4) * 10
    urgency = _clamp10(_round1(gap_urgency * 0.6 + maturity_urgency * 0.4))

    target_ambition = (target / 5) * 10
    importance = _clamp10(_round1(target_ambition * dimension_weight))

    complexity_base = _complexity_base(current, gap)
    complexity = _clamp10(_round1(complexity_base * 10))

    resource_need = _clamp10(_round1((gap * 0.5 + complexity_base * 0.5) * 2.5))

    return RecommendationMetrics(
        urgency=urgency,
        importance=importance,
        resource_need=resource_need,
        complexity=complexity,
        timeframe=_timeframe(urgency, resource_need),
    )


def determine_category(metrics: RecommendationMetrics) -> RecommendationCategory:
    """Derive a category from metrics alone."""
    if metrics.importance > 8 and metrics.resource_need > 7:
        return "Big Bet"
    if metrics.urgency > 7 and metrics.resource_need < 5:
        return "Quick Win"
    return "Project"


def resolve_category(
    rule: RecommendationRule,
    metrics: RecommendationMetrics,
) -> RecommendationCategory:
    """Category for a matched rule.

    A ``Quick Win`` or ``Big Bet`` tag wins, then the rule's explicit
    category, then the metrics-derived category.
    """
    for tag in _CATEGORY_TAGS:
        if tag in rule.tags:
            return tag
    if rule.category is not None:
        return rule.category
    return determine_category(metrics)


def compute_ranking_priority(metrics: RecommendationMetrics) -> float:
    """Priority from metrics: 50% urgency, 30% importance, 20% inverse resource need."""
    return _round1(
        metrics.urgency * 0.50
        + metrics.importance * 0.30
        + (10 - metrics.resource_need) * 0.20
    )


def generate_recommendations(
    dimensions: Sequence[DimensionScore],
    rule_set: RecommendationRuleSet,
    default_weight: float = DEFAULT_DIMENSION_WEIGHT,
    default_color: str = DEFAULT_DIMENSION_COLOR,
) -> list[EnhancedRecommendation]:
    """Match every dimension against its rules and rank the results.

    Dimensions whose key has no entry in the rule set are skipped, as are
    inactive rules. Results from all dimensions are ranked together by
    descending priority; ties keep matching order.

    Args:
        dimensions: Live dimension scores.
        rule_set: Recommendation rule set.
        default_weight: Dimension weight when the rule set declares none.
        default_color: Dimension colour when the rule set declares none.

    Returns:
        Ranked recommendations with 1-based ``rank``.
    """
    meta = rule_set.meta
    matched: list[EnhancedRecommendation] = []
    skipped_dimensions: list[str] = []

    for dimension in dimensions:
        rules = rule_set.rules_for(dimension.dimension_key)
        if rules is None:
            skipped_dimensions.append(dimension.dimension_key)
            continue

        score = dimension.score
        gap = dimension.gap
        target = score + gap
        weight = meta.dimension_weights.get(dimension.dimension_key, default_weight)

        for rule in rules:
            if not rule.is_active:
                continue
            if not rule_matches(rule, score, gap):
                continue

            metrics = calculate_metrics(score, target, gap, weight)
            priority = rule.priority if rule.priority is not None else compute_ranking_priority(metrics)
            matched.append(
                EnhancedRecommendation(
                    id=rule.id,
                    title=rule.title,
                    description=rule.description or "",
                    dimension=dimension.dimension_key,
                    dimension_title=dimension.title,
                    category=resolve_category(rule, metrics),
                    metrics=metrics,
                    color=meta.dimension_colors.get(dimension.dimension_key, default_color),
                    tags=list(rule.tags),
                    actions=[text for text in rule.action_items if text],
                    gap=gap,
                    priority=priority,
                    why=rule.why,
                    what=rule.what,
                    how=rule.how,
                )
            )

    matched.sort(key=lambda recommendation: recommendation.priority, reverse=True)
    ranked = [
        recommendation.model_copy(update={"rank": index + 1})
        for index, recommendation in enumerate(matched)
    ]

    logger.debug(
        "Recommendations matched",
        dimension_count=len(dimensions),
        matched_count=len(ranked),
        skipped_dimensions=skipped_dimensions,
    )
    return ranked


def bubble_size(resource_need: float) -> int:
    """Bubble diameter in px, linear in resource need between 30 and 70."""
    size = _BUBBLE_MIN_SIZE + (resource_need / 10) * (_BUBBLE_MAX_SIZE - _BUBBLE_MIN_SIZE)
    return int(round_to_step(size, 1))


def generate_bubble_data(
    recommendations: Sequence[EnhancedRecommendation],
    limit: int = DEFAULT_BUBBLE_LIMIT,
) -> list[RecommendationBubble]:
    """Bubble chart points for the top ``limit`` ranked recommendations."""
    return [
        RecommendationBubble(
            id=recommendation.id,
            rank=recommendation.rank,
            x=recommendation.metrics.urgency,
            y=recommendation.metrics.importance,
            size=bubble_size(recommendation.metrics.resource_need),
            color=recommendation.color,
            label=str(recommendation.rank),
        )
        for recommendation in recommendations[:limit]
    ]


def displace_overlapping_bubbles(
    bubbles: Sequence[RecommendationBubble],
) -> list[RecommendationBubble]:
    """Spread bubbles that share the same (x, y) point around it.

    Bubbles in a group of n are placed at equal angles ``2*pi*i/n`` on a
    circle whose radius scales with the first bubble's size (at least 10px).
    Lone bubbles get a zero offset. Order is preserved.

    Args:
        bubbles: Bubble records, typically from generate_bubble_data.

    Returns:
        New bubble records with ``offset_x``/``offset_y`` set.
    """
    groups: dict[str, list[int]] = {}
    for index, bubble in enumerate(bubbles):
        key = f"{bubble.x:.2f}:{bubble.y:.2f}"
        groups.setdefault(key, []).append(index)

    offsets: dict[int, tuple[float, float]] = {}
    for members in groups.values():
        if len(members) == 1:
            offsets[members[0]] = (0.0, 0.0)
            continue
        spread = max(_BUBBLE_MIN_SPREAD, bubbles[members[0]].size * _BUBBLE_SPREAD_FACTOR)
        for position, index in enumerate(members):
            angle = (2 * math.pi * position) / len(members)
            offsets[index] = (math.cos(angle) * spread, math.sin(angle) * spread)

    return [
        bubble.model_copy(update={"offset_x": offsets[index][0], "offset_y": offsets[index][1]})
        for index, bubble in enumerate(bubbles)
    ]


def _bound_phrase(axis: str, bounds: ScoreRange) -> str | None:
    if bounds.minimum is not None and bounds.maximum is not None:
        return f"{axis} between {bounds.minimum:g}-{bounds.maximum:g}"
    if bounds.maximum is not None:
        return f"{axis} <= {bounds.maximum:g}"
    if bounds.minimum is not None:
        return f"{axis} >= {bounds.minimum:g}"
    return None


def build_condition_preview(rule: RecommendationRule) -> str:
    """Describe when a rule fires, for rule authors.

    Returns:
        ``"Always shows"`` for an unbounded rule, otherwise e.g.
        ``"Shows when: score <= 2.5 AND gap >= 1"``.
    """
    conditions = RuleConditions.from_rule(rule)
    parts = [
        phrase
        for phrase in (
            _bound_phrase("score", conditions.score),
            _bound_phrase("target", conditions.target),
            _bound_phrase("gap", conditions.gap),
        )
        if phrase is not None
    ]
    if not parts:
        return "Always shows"
    return "Shows when: " + " AND ".join(parts)
