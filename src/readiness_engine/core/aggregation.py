"""Dimension and overall score aggregation.

Averages are taken over answered topics only (touched and scored), never
over every topic in a dimension. The overall summary sums per-topic
contributions across all dimensions and divides once, so a dimension with
more answered topics weighs proportionally more than a small one. Averaging
the dimension averages would give a different, wrong, result.

This module is independent of any storage layer so that the aggregation
rules can be unit-tested on plain snapshots.
"""

from collections.abc import Mapping

from readiness_engine.core.answers import iter_answered_topics, iter_dimension_answers
from readiness_engine.core.definitions import (
    AssessmentDefinition,
    DimensionDefinition,
    DimensionScore,
    RatingsSnapshot,
    TopicScore,
)
from readiness_engine.core.models import (
    DimensionResult,
    DimensionSummary,
    MissingItem,
    OverallSummary,
    ResultsModel,
    TopGap,
)
from readiness_engine.core.number import clamped_gap, normalize_score, round_to_step
from readiness_engine.core.priority import (
    calculate_priority_score,
    compute_dimension_comparisons,
    compute_top_topics,
    determine_risk_level,
)
from readiness_engine.observability import get_logger

logger = get_logger(__name__)


def _percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return int(round_to_step(100 * part / whole, 1))


def compute_dimension_summary(
    dimension: DimensionDefinition,
    scores: Mapping[str, TopicScore],
    touched: Mapping[str, bool],
) -> DimensionSummary:
    """Summarise one dimension over its answered topics.

    A touched topic with no score record is excluded from both the sums
    and the answered count.

    Args:
        dimension: Dimension definition.
        scores: topic id -> TopicScore for this dimension.
        touched: topic id -> touched flag for this dimension.

    Returns:
        The dimension summary. All zeros (apart from total_count) when
        nothing is answered.
    """
    current_sum = 0.0
    target_sum = 0.0
    answered_count = 0

    for answered in iter_dimension_answers(dimension, scores, touched):
        current_sum += answered.current
        target_sum += answered.target
        answered_count += 1

    total_count = len(dimension.topics)
    if answered_count == 0:
        return DimensionSummary(total_count=total_count)

    current_avg = normalize_score(current_sum / answered_count)
    target_avg = normalize_score(target_sum / answered_count)
    return DimensionSummary(
        current_avg=current_avg,
        target_avg=target_avg,
        gap_avg=clamped_gap(target_avg, current_avg),
        answered_count=answered_count,
        total_count=total_count,
        progress=_percent(answered_count, total_count),
        current_sum=current_sum,
        target_sum=target_sum,
    )


def compute_overall_summary(
    definition: AssessmentDefinition,
    snapshot: RatingsSnapshot,
) -> OverallSummary:
    """Response-weighted summary across every dimension.

    Sums and counts are accumulated over all dimensions first and divided
    once by the total answered count.

    Args:
        definition: Assessment definition.
        snapshot: Ratings snapshot.

    Returns:
        The overall summary. ``confidence_ratio`` is answered/total rounded
        to two decimals, and 0 when nothing is answered.
    """
    total_current_sum = 0.0
    total_target_sum = 0.0
    total_answered = 0
    total_questions = 0
    completed_dimensions = 0

    for dimension in definition.dimensions:
        summary = compute_dimension_summary(
            dimension,
            snapshot.scores_for(dimension.id),
            snapshot.touched_for(dimension.id),
        )
        total_current_sum += summary.current_sum
        total_target_sum += summary.target_sum
        total_answered += summary.answered_count
        total_questions += summary.total_count
        if snapshot.is_complete(dimension.id):
            completed_dimensions += 1

    total_dimensions = len(definition.dimensions)
    if total_answered == 0:
        return OverallSummary(
            total_count=total_questions,
            completed_dimensions=completed_dimensions,
            total_dimensions=total_dimensions,
        )

    current_avg = normalize_score(total_current_sum / total_answered)
    target_avg = normalize_score(total_target_sum / total_answered)
    return OverallSummary(
        current_avg=current_avg,
        target_avg=target_avg,
        gap_avg=clamped_gap(target_avg, current_avg),
        answered_count=total_answered,
        total_count=total_questions,
        progress=_percent(total_answered, total_questions),
        completed_dimensions=completed_dimensions,
        total_dimensions=total_dimensions,
        confidence_ratio=_percent(total_answered, total_questions) / 100,
    )


def collect_top_gaps(
    definition: AssessmentDefinition,
    snapshot: RatingsSnapshot,
    limit: int = 5,
) -> list[TopGap]:
    """Answered topics with a positive gap, largest gap first.

    Ties keep definition order.
    """
    gaps = [
        TopGap(
            dimension_id=answered.dimension.id,
            dimension_title=answered.dimension.title,
            topic_id=answered.topic.id,
            topic_label=answered.topic.label,
            current=answered.current,
            target=answered.target,
            gap=answered.gap,
            priority_score=calculate_priority_score(answered.current, answered.target, answered.gap),
            risk_level=determine_risk_level(answered.current, answered.gap),
        )
        for answered in iter_answered_topics(definition, snapshot)
        if answered.gap > 0
    ]
    gaps.sort(key=lambda gap: gap.gap, reverse=True)
    return gaps[:limit]


def compute_results(
    definition: AssessmentDefinition,
    snapshot: RatingsSnapshot,
    top_gap_limit: int = 5,
    top_topic_limit: int = 10,
) -> ResultsModel:
    """Run the full aggregation for one snapshot.

    Args:
        definition: Assessment definition.
        snapshot: Ratings snapshot.
        top_gap_limit: Maximum number of top gaps.
        top_topic_limit: Maximum number of priority-ranked topics.

    Returns:
        ResultsModel with overall and per-dimension summaries, top gaps,
        dimension comparisons and top topics.
    """
    overall = compute_overall_summary(definition, snapshot)

    dimensions: list[DimensionResult] = []
    for dimension in definition.dimensions:
        summary = compute_dimension_summary(
            dimension,
            snapshot.scores_for(dimension.id),
            snapshot.touched_for(dimension.id),
        )
        dimensions.append(
            DimensionResult(
                id=dimension.id,
                key=dimension.key,
                title=dimension.title,
                current_avg=summary.current_avg,
                target_avg=summary.target_avg,
                gap_avg=summary.gap_avg,
                answered_count=summary.answered_count,
                total_count=summary.total_count,
                progress=summary.progress,
                is_complete=snapshot.is_complete(dimension.id),
            )
        )

    topic_currents: dict[str, list[float]] = {}
    for answered in iter_answered_topics(definition, snapshot):
        topic_currents.setdefault(answered.dimension.id, []).append(answered.current)

    results = ResultsModel(
        overall=overall,
        dimensions=dimensions,
        top_gaps=collect_top_gaps(definition, snapshot, limit=top_gap_limit),
        dimension_comparisons=compute_dimension_comparisons(dimensions, topic_currents),
        top_topics=compute_top_topics(definition, snapshot, limit=top_topic_limit),
        overall_gap=round_to_step(overall.target_avg - overall.current_avg, 0.1),
    )

    logger.debug(
        "Results computed",
        dimension_count=len(dimensions),
        answered_count=overall.answered_count,
        total_count=overall.total_count,
        top_gap_count=len(results.top_gaps),
    )
    return results


def get_missing_items(
    definition: AssessmentDefinition,
    snapshot: RatingsSnapshot,
) -> list[MissingItem]:
    """Topics the participant has not touched, in definition order."""
    missing: list[MissingItem] = []
    for dimension in definition.dimensions:
        touched = snapshot.touched_for(dimension.id)
        for topic in dimension.topics:
            if not touched.get(topic.id):
                missing.append(
                    MissingItem(
                        dimension_id=dimension.id,
                        dimension_title=dimension.title,
                        topic_id=topic.id,
                        topic_label=topic.label,
                    )
                )
    return missing


def next_incomplete_dimension_id(
    definition: AssessmentDefinition,
    snapshot: RatingsSnapshot,
) -> str | None:
    """Id of the first dimension not marked complete, or None when all are."""
    for dimension in definition.dimensions:
        if not snapshot.is_complete(dimension.id):
            return dimension.id
    return None


def dimension_scores(results: ResultsModel) -> list[DimensionScore]:
    """Rule-matcher inputs from aggregated dimension results.

    Score is the current average and gap the clamped gap average.
    Dimensions with no answered topics are left out: their all-zero
    summary is not a score.
    """
    return [
        DimensionScore(
            dimension_key=dimension.key,
            title=dimension.title,
            score=dimension.current_avg,
            gap=dimension.gap_avg,
        )
        for dimension in results.dimensions
        if dimension.answered_count > 0
    ]
