"""End-to-end tests for ReadinessEngine.evaluate.

Runs the whole pipeline over the shared fixtures and checks the report
against values worked out by hand for the partially answered snapshot.
"""

import pytest

from readiness_engine.core.definitions import (
    AssessmentDefinition,
    NarrativeTemplate,
    RatingsSnapshot,
    RecommendationRuleSet,
    load_ratings_snapshot,
)
from readiness_engine.core.engine import ReadinessEngine
from readiness_engine.core.models import AssessmentReport
from readiness_engine.errors import TemplatePlaceholderError
from readiness_engine.settings import Settings


@pytest.fixture()
def engine() -> ReadinessEngine:
    return ReadinessEngine(Settings())


@pytest.fixture()
def report(
    engine: ReadinessEngine,
    definition: AssessmentDefinition,
    snapshot: RatingsSnapshot,
    rule_set: RecommendationRuleSet,
    narrative_template: NarrativeTemplate,
) -> AssessmentReport:
    return engine.evaluate(definition, snapshot, rule_set, narrative_template)


class TestEvaluate:
    """Full pipeline over the shared snapshot."""

    def test_overall_results(self, report: AssessmentReport) -> None:
        """Overall averages, confidence and top gaps for the shared snapshot."""
        overall = report.results.overall
        assert (overall.current_avg, overall.target_avg, overall.gap_avg) == (2.0, 4.0, 2.0)
        assert overall.confidence_ratio == 0.67
        assert [gap.topic_id for gap in report.results.top_gaps] == ["d1", "s1", "d2"]

    def test_maturity(self, report: AssessmentReport) -> None:
        """Organisation and per-dimension stages with no downgrade."""
        organization = report.organization_maturity
        assert organization.stage.id == "structured"
        assert organization.confidence_label == "Medium"
        assert organization.downgrade_reason is None
        assert report.dimension_maturity["strategy"].stage.id == "structured"
        assert report.dimension_maturity["data"].stage.id == "explorer"
        assert report.dimension_maturity["data"].downgrade_reason is None

    def test_recommendations_and_bubbles(self, report: AssessmentReport) -> None:
        """Ranked recommendations with overlapping bubbles spread apart."""
        assert [rec.id for rec in report.recommendations] == [
            "data-foundation",
            "data-catalogue",
            "strat-roadmap",
        ]
        assert [bubble.rank for bubble in report.bubbles] == [1, 2, 3]
        assert report.bubbles[0].offset_x != 0.0
        assert report.bubbles[2].offset_x == 0.0

    def test_narrative(self, report: AssessmentReport) -> None:
        """Headline, quick wins and the first priority."""
        narrative = report.narrative
        assert narrative.headline == "Your organization is Structured"
        assert narrative.quick_wins == [
            "Profile critical datasets",
            "Draft an AI roadmap",
            "Stand up a data catalogue",
        ]
        assert [priority.title for priority in narrative.priorities][0] == "Fix data quality"

    def test_missing_items(self, report: AssessmentReport) -> None:
        """Only the untouched topic is reported missing."""
        assert [item.topic_id for item in report.missing_items] == ["d4"]

    def test_camel_case_dump(self, report: AssessmentReport) -> None:
        """Reports serialise with camelCase keys."""
        dumped = report.model_dump(by_alias=True)
        assert "executiveSummary" in dumped["narrative"]
        assert "confidenceRatio" in dumped["results"]["overall"]
        assert "topGaps" in dumped["results"]
        assert "offsetX" in dumped["bubbles"][0]


class TestEngineSettings:
    """Settings limits and defaults flow into the pipeline."""

    def test_limits(
        self,
        definition: AssessmentDefinition,
        snapshot: RatingsSnapshot,
        rule_set: RecommendationRuleSet,
        narrative_template: NarrativeTemplate,
    ) -> None:
        """Result limits come from settings; recommendations are never capped."""
        engine = ReadinessEngine(Settings(top_gap_limit=1, top_topic_limit=2, bubble_limit=1))
        report = engine.evaluate(definition, snapshot, rule_set, narrative_template)
        assert len(report.results.top_gaps) == 1
        assert len(report.results.top_topics) == 2
        assert len(report.bubbles) == 1
        assert len(report.recommendations) == 3

    def test_default_color_from_settings(
        self,
        definition: AssessmentDefinition,
        snapshot: RatingsSnapshot,
        rule_set: RecommendationRuleSet,
        narrative_template: NarrativeTemplate,
    ) -> None:
        """The settings colour fills dimensions without one."""
        engine = ReadinessEngine(Settings(default_dimension_color="#ff0000"))
        report = engine.evaluate(definition, snapshot, rule_set, narrative_template)
        colors = {rec.id: rec.color for rec in report.recommendations}
        assert colors["data-foundation"] == "#ff0000"
        assert colors["strat-roadmap"] == "#1d4ed8"

    def test_strict_templates(
        self,
        definition: AssessmentDefinition,
        snapshot: RatingsSnapshot,
        rule_set: RecommendationRuleSet,
    ) -> None:
        """Strict settings turn a bad placeholder into an error."""
        template = NarrativeTemplate(priority_why_template="Because {reason}")
        engine = ReadinessEngine(Settings(strict_templates=True))
        with pytest.raises(TemplatePlaceholderError):
            engine.evaluate(definition, snapshot, rule_set, template)

    def test_settings_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Prefixed environment variables configure the engine."""
        monkeypatch.setenv("READINESS_ENGINE_TOP_GAP_LIMIT", "3")
        monkeypatch.setenv("READINESS_ENGINE_STRICT_TEMPLATES", "true")
        engine = ReadinessEngine()
        assert engine.settings.top_gap_limit == 3
        assert engine.settings.strict_templates is True


class TestEmptySnapshot:
    """Nothing answered yet."""

    def test_report_for_empty_snapshot(
        self,
        engine: ReadinessEngine,
        definition: AssessmentDefinition,
        rule_set: RecommendationRuleSet,
        narrative_template: NarrativeTemplate,
    ) -> None:
        """An empty snapshot yields an Explorer report with a low-confidence note."""
        report = engine.evaluate(definition, load_ratings_snapshot("{}"), rule_set, narrative_template)
        assert report.results.overall.current_avg == 0.0
        assert report.organization_maturity.stage.id == "explorer"
        assert report.organization_maturity.confidence_label == "Low"
        assert report.recommendations == []
        assert report.bubbles == []
        assert report.narrative.headline == "Early signals of Explorer potential"
        assert report.narrative.notes == ["Answer more topics for a reliable result."]
        assert len(report.missing_items) == 6


class TestRuleSetThemeMap:
    """The rule set's theme map backs a narrative template without one."""

    def test_template_without_theme_map_uses_rule_set_themes(
        self,
        engine: ReadinessEngine,
        definition: AssessmentDefinition,
        snapshot: RatingsSnapshot,
        rule_set: RecommendationRuleSet,
        narrative_template: NarrativeTemplate,
    ) -> None:
        """Priorities name the rule set's theme instead of the default one."""
        template = narrative_template.model_copy(update={"theme_map": {}})
        report = engine.evaluate(definition, snapshot, rule_set, template)
        assert report.narrative.priorities[0].why == (
            "Closes a +2.5 gap in Data Foundations by targeting Data Quality."
        )
        assert report.narrative.executive_summary.startswith(
            "You are at the Structured stage with an average of 2.0. Your biggest opportunity is data quality."
        )
