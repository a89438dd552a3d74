"""Full evaluation pipeline.

Runs aggregation, maturity classification, rule matching and narrative
assembly in dependency order for one ratings snapshot. The engine keeps
only its settings; every call works on the arguments it is given.
"""

from readiness_engine.core.aggregation import compute_results, dimension_scores, get_missing_items
from readiness_engine.core.definitions import (
    AssessmentDefinition,
    NarrativeTemplate,
    RatingsSnapshot,
    RecommendationRuleSet,
)
from readiness_engine.core.maturity import get_dimension_maturity, get_organization_maturity
from readiness_engine.core.models import AssessmentReport
from readiness_engine.core.narrative import generate_narrative
from readiness_engine.core.recommendations import (
    displace_overlapping_bubbles,
    generate_bubble_data,
    generate_recommendations,
)
from readiness_engine.observability import get_logger
from readiness_engine.settings import Settings

logger = get_logger(__name__)


class ReadinessEngine:
    """Stateless assessment evaluator.

    Settings control result limits and defaults only. A single instance
    can be shared between concurrent callers.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialise the engine.

        Args:
            settings: Engine settings. Loaded from the environment when omitted.
        """
        self._settings = settings or Settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def evaluate(
        self,
        definition: AssessmentDefinition,
        snapshot: RatingsSnapshot,
        rule_set: RecommendationRuleSet,
        narrative_template: NarrativeTemplate,
    ) -> AssessmentReport:
        """Evaluate one ratings snapshot end to end.

        Args:
            definition: Assessment definition tree.
            snapshot: Consistent snapshot of the participant's ratings.
            rule_set: Recommendation rules and metadata.
            narrative_template: Narrative template definition.

        Returns:
            AssessmentReport with results, maturity, ranked recommendations,
            bubble layout, narrative and the list of unanswered topics.
        """
        settings = self._settings

        results = compute_results(
            definition,
            snapshot,
            top_gap_limit=settings.top_gap_limit,
            top_topic_limit=settings.top_topic_limit,
        )
        overall = results.overall

        organization_maturity = get_organization_maturity(
            overall_current_avg=overall.current_avg,
            confidence_ratio=overall.confidence_ratio,
        )
        dimension_maturity = {
            dimension.id: get_dimension_maturity(dimension.current_avg, dimension.gap_avg)
            for dimension in results.dimensions
        }

        recommendations = generate_recommendations(
            dimension_scores(results),
            rule_set,
            default_weight=settings.default_dimension_weight,
            default_color=settings.default_dimension_color,
        )
        bubbles = displace_overlapping_bubbles(
            generate_bubble_data(recommendations, limit=settings.bubble_limit)
        )

        narrative = generate_narrative(
            maturity=organization_maturity,
            overall=overall,
            top_gaps=results.top_gaps,
            recommendations=recommendations,
            template=narrative_template,
            strict=settings.strict_templates,
            fallback_theme_map=rule_set.meta.theme_map,
        )

        logger.info(
            "Assessment evaluated",
            overall_current_avg=overall.current_avg,
            overall_gap_avg=overall.gap_avg,
            confidence_ratio=overall.confidence_ratio,
            stage=organization_maturity.stage.id,
            recommendation_count=len(recommendations),
        )

        return AssessmentReport(
            results=results,
            organization_maturity=organization_maturity,
            dimension_maturity=dimension_maturity,
            recommendations=recommendations,
            bubbles=bubbles,
            narrative=narrative,
            missing_items=get_missing_items(definition, snapshot),
        )
