"""Shared fixtures for readiness-engine tests.

Provides a two-dimension assessment definition (2 + 4 topics, so response
weighting and average-of-averages differ), a recommendation rule set and a
narrative template. ``make_snapshot`` builds ratings snapshots from compact
tuples.
"""

from typing import Any

import pytest

from readiness_engine.core.definitions import (
    AssessmentDefinition,
    NarrativeTemplate,
    RatingsSnapshot,
    RecommendationRuleSet,
    load_assessment_definition,
    load_narrative_template,
    load_rule_set,
)

_ANCHORS = ["Ad hoc", "Emerging", "Defined", "Managed", "Optimised"]

ASSESSMENT_DOCUMENT: dict[str, Any] = {
    "version": 1,
    "title": "AI Readiness",
    "dimensions": [
        {
            "id": "strategy",
            "dimensionKey": "strategy",
            "title": "Strategy & Leadership",
            "topics": [
                {"id": "s1", "label": "Vision", "prompt": "Is there an AI vision?", "levelAnchors": _ANCHORS},
                {"id": "s2", "label": "Sponsorship", "prompt": "Is AI sponsored?", "levelAnchors": _ANCHORS},
            ],
        },
        {
            "id": "data",
            "dimensionKey": "data",
            "title": "Data Foundations",
            "topics": [
                {"id": "d1", "label": "Quality", "prompt": "How good is the data?", "levelAnchors": _ANCHORS},
                {"id": "d2", "label": "Pipelines", "prompt": "Are pipelines automated?", "levelAnchors": _ANCHORS},
                {"id": "d3", "label": "Catalogue", "prompt": "Is data catalogued?", "levelAnchors": _ANCHORS},
                {"id": "d4", "label": "Access", "prompt": "Is access governed?", "levelAnchors": _ANCHORS},
            ],
        },
    ],
}

RULE_SET_DOCUMENT: dict[str, Any] = {
    "version": 1,
    "dimensions": [
        {
            "dimensionKey": "strategy",
            "recommendations": [
                {
                    "id": "strat-roadmap",
                    "title": "Publish an AI roadmap",
                    "description": "Agree and publish a two-year AI roadmap.",
                    "gapMin": 0.5,
                    "scoreMax": 3,
                    "tags": ["governance"],
                    "actionItems": [{"id": "a1", "text": "Draft an AI roadmap"}],
                },
                {
                    "id": "strat-advanced",
                    "title": "Scale AI portfolio management",
                    "scoreMin": 4,
                },
                {
                    "id": "strat-inactive",
                    "title": "Retired rule",
                    "isActive": False,
                },
            ],
        },
        {
            "dimensionKey": "data",
            "recommendations": [
                {
                    "id": "data-foundation",
                    "title": "Fix data quality",
                    "gapMin": 2,
                    "priority": 9.5,
                    "tags": ["data"],
                    "actionItems": ["Profile critical datasets"],
                },
                {
                    "id": "data-catalogue",
                    "title": "Catalogue key data",
                    "scoreMax": 2,
                    "tags": ["data", "Quick Win"],
                    "actionItems": ["Stand up a data catalogue"],
                },
            ],
        },
        {
            "dimensionKey": "operations",
            "recommendations": [{"id": "ops-any", "title": "Operations rule"}],
        },
    ],
    "meta": {
        "dimensionWeights": {"strategy": 0.8, "data": 1.0},
        "dimensionColors": {"strategy": "#1d4ed8"},
        "themeMap": {"data": "Data Quality", "governance": "Governance"},
    },
}

NARRATIVE_DOCUMENT: dict[str, Any] = {
    "version": 1,
    "themeMap": {"data": "Data Quality", "governance": "Governance", "skills": "Talent"},
    "headlines": {
        "lowConfidencePrefix": "Early signals of {stageLabel}",
        "byStageId": {
            "explorer": "You are exploring AI as an {stageLabel}",
            "default": "Your organization is {stageLabel}",
        },
    },
    "executiveSummary": {
        "sentence1": "You are at the {stageLabel} stage with an average of {currentAvg}.",
        "sentence2": "Your biggest opportunity is {topTheme}.",
        "sentence3": "Closing the {gapAvg} point gap is the next step.",
    },
    "stageRationale": (
        "Based on an average of {currentAvg} with {confidenceLabel} confidence "
        "({confidenceRatio}% answered)."
    ),
    "notes": {
        "low": "Answer more topics for a reliable result.",
        "moderate": "Some topics are still unanswered.",
    },
    "maturityThresholds": {"leading": 4.5, "advanced": 3.5, "ready": 2.5, "exploring": 1.5},
    "executiveTemplates": {
        "maturityLevel": {
            "leading": "Leading at {score}.",
            "advanced": "Advanced at {score}.",
            "ready": "Ready at {score}.",
            "exploring": "Exploring at {score}.",
            "beginner": "Beginning at {score}.",
        },
        "gapAnalysis": {
            "large": "{count} area{pluralS} ({dimensions}) need{verbS} attention.",
            "moderate": "{count} area{pluralS}{verbS} a notable gap.",
            "minimal": "Gaps are small.",
        },
        "strengths": {
            "multiple": "Strengths: {list} and {lastItem}.",
            "single": "Strength: {area}.",
        },
        "priorities": {
            "high": "Focus on {topics}.",
            "balanced": "Priorities are balanced.",
        },
    },
}


def make_snapshot(
    ratings: dict[str, dict[str, tuple[float, float] | None]],
    completion: dict[str, bool] | None = None,
) -> RatingsSnapshot:
    """Build a snapshot from dimension -> topic -> (current, target).

    Every listed topic is touched. A value of None marks a topic as touched
    without a score record.
    """
    scores: dict[str, dict[str, dict[str, float]]] = {}
    touched: dict[str, dict[str, bool]] = {}
    for dimension_id, topics in ratings.items():
        scores[dimension_id] = {
            topic_id: {"current": pair[0], "target": pair[1]}
            for topic_id, pair in topics.items()
            if pair is not None
        }
        touched[dimension_id] = {topic_id: True for topic_id in topics}
    return RatingsSnapshot.model_validate(
        {"scores": scores, "touched": touched, "completion": completion or {}}
    )


@pytest.fixture()
def definition() -> AssessmentDefinition:
    """Two dimensions: strategy (2 topics) and data (4 topics)."""
    return load_assessment_definition(ASSESSMENT_DOCUMENT)


@pytest.fixture()
def rule_set() -> RecommendationRuleSet:
    """Rule set covering both dimensions plus one unknown dimension."""
    return load_rule_set(RULE_SET_DOCUMENT)


@pytest.fixture()
def narrative_template() -> NarrativeTemplate:
    """Narrative template with headlines, summary sentences and notes."""
    return load_narrative_template(NARRATIVE_DOCUMENT)


@pytest.fixture()
def snapshot() -> RatingsSnapshot:
    """Partially answered snapshot used by the end-to-end tests.

    strategy: s1 (2 -> 4), s2 (3 -> 3)
    data:     d1 (1 -> 4), d2 (2 -> 4), d3 touched without score, d4 untouched
    """
    return make_snapshot(
        {
            "strategy": {"s1": (2, 4), "s2": (3, 3)},
            "data": {"d1": (1, 4), "d2": (2, 4), "d3": None},
        },
        completion={"strategy": True},
    )


@pytest.fixture()
def snapshot_factory() -> Any:
    """Expose make_snapshot to tests that build their own ratings."""
    return make_snapshot
