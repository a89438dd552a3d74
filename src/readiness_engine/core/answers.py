"""Walk the answered topics of a ratings snapshot."""

from collections.abc import Iterator, Mapping
from typing import NamedTuple

from readiness_engine.core.definitions import (
    AssessmentDefinition,
    DimensionDefinition,
    RatingsSnapshot,
    TopicDefinition,
    TopicScore,
)
from readiness_engine.core.number import clamped_gap, normalize_score


class AnsweredTopic(NamedTuple):
    """A touched, scored topic with its normalised ratings."""

    dimension: DimensionDefinition
    topic: TopicDefinition
    current: float
    target: float
    gap: float


def iter_dimension_answers(
    dimension: DimensionDefinition,
    scores: Mapping[str, TopicScore],
    touched: Mapping[str, bool],
) -> Iterator[AnsweredTopic]:
    """Yield the answered topics of one dimension in definition order.

    A topic is answered when it is touched and has a score record. A
    touched topic without a score is skipped, never counted as a 1.
    """
    for topic in dimension.topics:
        if not touched.get(topic.id):
            continue
        score = scores.get(topic.id)
        if score is None:
            continue
        current = normalize_score(score.current)
        target = normalize_score(score.target)
        yield AnsweredTopic(
            dimension=dimension,
            topic=topic,
            current=current,
            target=target,
            gap=clamped_gap(target, current),
        )


def iter_answered_topics(
    definition: AssessmentDefinition,
    snapshot: RatingsSnapshot,
) -> Iterator[AnsweredTopic]:
    """Yield every answered topic of the assessment in definition order."""
    for dimension in definition.dimensions:
        yield from iter_dimension_answers(
            dimension,
            snapshot.scores_for(dimension.id),
            snapshot.touched_for(dimension.id),
        )
