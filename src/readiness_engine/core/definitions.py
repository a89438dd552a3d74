"""Input models supplied by the surrounding system.

The assessment definition, the ratings snapshot, the recommendation rule
set and the narrative template all arrive as camelCase JSON documents.
These pydantic models accept either camelCase or snake_case keys and are
frozen: the engine reads them and never writes back.

The ``load_*`` helpers are the only place definition documents are
checked; the scoring functions assume already-parsed models.
"""

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from readiness_engine.core.number import normalize_score
from readiness_engine.errors import DefinitionValidationError

RecommendationCategory = Literal["Quick Win", "Project", "Big Bet"]


class _InputModel(BaseModel):
    """Base for all input documents: camelCase aliases, immutable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ---------------------------------------------------------------------------
# Assessment definition
# ---------------------------------------------------------------------------


class TopicDefinition(_InputModel):
    """A single rated topic.

    Attributes:
        id: Unique topic identifier.
        topic_key: Optional stable slug.
        label: Short display label.
        prompt: Question shown to the participant.
        order_index: Display order within the dimension.
        help_text: Optional guidance text.
        level_anchors: Five descriptions for levels 1-5 (entries may be None).
    """

    id: str
    topic_key: str | None = None
    label: str
    prompt: str = ""
    order_index: int | None = None
    help_text: str | None = None
    level_anchors: list[str | None] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _anchors_from_mapping(cls, data: Any) -> Any:
        # Older documents carry anchors as {"1": "...", ..., "5": "..."}.
        if (
            isinstance(data, Mapping)
            and "anchors" in data
            and "levelAnchors" not in data
            and "level_anchors" not in data
        ):
            anchors = data["anchors"] or {}
            data = dict(data)
            data["levelAnchors"] = [anchors.get(str(level)) for level in range(1, 6)]
            del data["anchors"]
        return data


class DimensionDefinition(_InputModel):
    """A group of topics scored together.

    Attributes:
        id: Unique dimension identifier, used as the key in the ratings snapshot.
        dimension_key: Key used by recommendation rule sets; defaults to ``id``.
        title: Display title.
        description: Optional description.
        category: Optional grouping label.
        order_index: Display order.
        topics: Topics in display order.
    """

    id: str
    dimension_key: str | None = None
    title: str
    description: str | None = None
    category: str | None = None
    order_index: int | None = None
    topics: list[TopicDefinition] = Field(default_factory=list)

    @property
    def key(self) -> str:
        """Rule-set key for this dimension."""
        return self.dimension_key or self.id


class AssessmentDefinition(_InputModel):
    """The full dimension/topic tree of an assessment."""

    version: int | None = None
    title: str | None = None
    dimensions: list[DimensionDefinition] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Ratings snapshot
# ---------------------------------------------------------------------------


class TopicScore(_InputModel):
    """Current and target rating for one topic, snapped to the 0.5-step 1-5 scale."""

    current: float
    target: float

    @field_validator("current", "target", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> float:
        return normalize_score(value)


class RatingsSnapshot(_InputModel):
    """Consistent snapshot of a participant's ratings.

    All three maps are keyed by dimension id first. A topic counts as
    answered only when it is touched and has a score.

    Attributes:
        scores: dimension id -> topic id -> TopicScore.
        touched: dimension id -> topic id -> whether the participant rated it.
        completion: dimension id -> whether the dimension was marked complete.
    """

    scores: dict[str, dict[str, TopicScore]] = Field(default_factory=dict)
    touched: dict[str, dict[str, bool]] = Field(default_factory=dict)
    completion: dict[str, bool] = Field(default_factory=dict)

    def scores_for(self, dimension_id: str) -> Mapping[str, TopicScore]:
        """Scores recorded for one dimension (empty when none)."""
        return self.scores.get(dimension_id, {})

    def touched_for(self, dimension_id: str) -> Mapping[str, bool]:
        """Touched flags for one dimension (empty when none)."""
        return self.touched.get(dimension_id, {})

    def is_complete(self, dimension_id: str) -> bool:
        """Whether the dimension was marked complete."""
        return bool(self.completion.get(dimension_id, False))

    @classmethod
    def from_responses(
        cls,
        definition: AssessmentDefinition,
        responses: Mapping[str, Mapping[str, Any]],
    ) -> "RatingsSnapshot":
        """Build a snapshot from a flat topic id -> {current, target} map.

        Every topic present in ``responses`` is treated as touched. A
        dimension is complete when all of its topics have a response.
        Responses for topics not in the definition are ignored.

        Args:
            definition: Assessment definition used to group topics.
            responses: Flat response map as stored by the caller.

        Returns:
            A new RatingsSnapshot.
        """
        scores: dict[str, dict[str, TopicScore]] = {}
        touched: dict[str, dict[str, bool]] = {}
        completion: dict[str, bool] = {}
        for dimension in definition.dimensions:
            dimension_scores: dict[str, TopicScore] = {}
            for topic in dimension.topics:
                response = responses.get(topic.id)
                if response is None:
                    continue
                dimension_scores[topic.id] = TopicScore(
                    current=response.get("current"),
                    target=response.get("target"),
                )
            scores[dimension.id] = dimension_scores
            touched[dimension.id] = {topic_id: True for topic_id in dimension_scores}
            completion[dimension.id] = bool(dimension.topics) and len(dimension_scores) == len(
                dimension.topics
            )
        return cls(scores=scores, touched=touched, completion=completion)


# ---------------------------------------------------------------------------
# Recommendation rule set
# ---------------------------------------------------------------------------


class RecommendationRule(_InputModel):
    """A declarative recommendation rule attached to one dimension.

    Every bound is optional and inclusive. ``score`` bounds test the
    dimension's current average, ``target`` bounds test score + gap, and
    ``gap`` bounds test the clamped gap.

    Attributes:
        id: Rule identifier.
        title: Recommendation title.
        description: Short description.
        score_min: Lower bound on the current score.
        score_max: Upper bound on the current score.
        target_min: Lower bound on the target score.
        target_max: Upper bound on the target score.
        gap_min: Lower bound on the gap.
        gap_max: Upper bound on the gap.
        why: Narrative "why" text.
        what: Narrative "what" text.
        how: Narrative "how" text.
        action_items: Concrete next steps.
        category: Explicit category; derived from metrics when absent.
        priority: Explicit priority; computed from metrics when absent.
        tags: Theme tags, also used for the Quick Win / Big Bet override.
        is_active: Inactive rules never match.
        order_index: Authoring order.
    """

    id: str
    title: str
    description: str | None = None
    score_min: float | None = None
    score_max: float | None = None
    target_min: float | None = None
    target_max: float | None = None
    gap_min: float | None = None
    gap_max: float | None = None
    why: str | None = None
    what: str | None = None
    how: str | None = None
    action_items: list[str] = Field(default_factory=list)
    category: RecommendationCategory | None = None
    priority: float | None = None
    tags: list[str] = Field(default_factory=list)
    is_active: bool = True
    order_index: int | None = None

    @field_validator("action_items", mode="before")
    @classmethod
    def _action_texts(cls, value: Any) -> Any:
        # Accept both ["text", ...] and [{"id": ..., "text": ...}, ...].
        if value is None:
            return []
        if isinstance(value, list):
            return [item.get("text", "") if isinstance(item, Mapping) else item for item in value]
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_default(cls, value: Any) -> Any:
        return [] if value is None else value


class DimensionRules(_InputModel):
    """Rules attached to a single dimension key."""

    dimension_key: str
    recommendations: list[RecommendationRule] = Field(default_factory=list)


class RuleSetMeta(_InputModel):
    """Global rule-set metadata.

    Attributes:
        dimension_weights: dimension key -> importance weight (0-1).
        dimension_colors: dimension key -> display colour.
        theme_map: tag -> theme label. Used by the narrative when its own
            template declares no theme map.
    """

    dimension_weights: dict[str, float] = Field(default_factory=dict)
    dimension_colors: dict[str, str] = Field(default_factory=dict)
    theme_map: dict[str, str] = Field(default_factory=dict)


class RecommendationRuleSet(_InputModel):
    """Per-dimension recommendation rules plus global metadata."""

    version: int | None = None
    dimensions: list[DimensionRules] = Field(default_factory=list)
    meta: RuleSetMeta = Field(default_factory=RuleSetMeta)

    def rules_for(self, dimension_key: str) -> list[RecommendationRule] | None:
        """Rules for a dimension key, or None when the rule set has no such dimension."""
        for entry in self.dimensions:
            if entry.dimension_key == dimension_key:
                return entry.recommendations
        return None


class DimensionScore(_InputModel):
    """One dimension's live result, as seen by the rule matcher.

    Attributes:
        dimension_key: Key used to find the dimension's rules.
        title: Dimension display title.
        score: Current average.
        gap: Clamped gap between target and current averages.
    """

    dimension_key: str
    title: str = ""
    score: float
    gap: float


# ---------------------------------------------------------------------------
# Narrative template
# ---------------------------------------------------------------------------


class HeadlineTemplates(_InputModel):
    """Headline templates keyed by maturity stage id (plus ``default``).

    An absent ``by_stage_id`` means no headline configuration; an empty
    one is still configured."""

    low_confidence_prefix: str
    by_stage_id: dict[str, str] | None = None


class ExecutiveSummaryTemplates(_InputModel):
    """The three executive summary sentences."""

    sentence1: str
    sentence2: str
    sentence3: str


class MaturityThresholds(_InputModel):
    """Score thresholds for the standalone executive summary's maturity wording."""

    leading: float
    advanced: float
    ready: float
    exploring: float


class GapAnalysisTemplates(_InputModel):
    large: str
    moderate: str
    minimal: str


class StrengthTemplates(_InputModel):
    multiple: str
    single: str


class PriorityTemplates(_InputModel):
    high: str
    balanced: str


class ExecutiveTemplates(_InputModel):
    """Templates for the standalone executive summary."""

    maturity_level: dict[str, str]
    gap_analysis: GapAnalysisTemplates
    strengths: StrengthTemplates
    priorities: PriorityTemplates


class NarrativeTemplate(_InputModel):
    """Template definition for the narrative summary.

    Attributes:
        version: Document version.
        theme_map: tag -> theme label.
        headlines: Headline templates; a generic headline is used when absent.
        executive_summary: Three-sentence summary templates.
        stage_rationale: Rationale template.
        priority_why_template: Template for each priority's "why" line.
        notes: Confidence notes keyed ``low`` and ``moderate``. When absent no
            notes are produced; missing keys fall back to default wording.
        maturity_thresholds: Thresholds for the standalone executive summary.
        executive_templates: Templates for the standalone executive summary.
    """

    version: int | None = None
    theme_map: dict[str, str] = Field(default_factory=dict)
    headlines: HeadlineTemplates | None = None
    executive_summary: ExecutiveSummaryTemplates | None = None
    stage_rationale: str | None = None
    priority_why_template: str | None = None
    notes: dict[str, str] | None = None
    maturity_thresholds: MaturityThresholds | None = None
    executive_templates: ExecutiveTemplates | None = None


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


def _load(model: type[_InputModel], kind: str, data: Mapping[str, Any] | str | bytes) -> Any:
    try:
        if isinstance(data, (str, bytes)):
            return model.model_validate_json(data)
        return model.model_validate(data)
    except ValidationError as exc:
        raise DefinitionValidationError(kind, exc.errors()) from exc


def load_assessment_definition(data: Mapping[str, Any] | str | bytes) -> AssessmentDefinition:
    """Parse an assessment definition document.

    Args:
        data: Parsed JSON mapping or raw JSON text.

    Returns:
        The parsed AssessmentDefinition.

    Raises:
        DefinitionValidationError: If the document does not match the model.
    """
    return _load(AssessmentDefinition, "assessment", data)


def load_rule_set(data: Mapping[str, Any] | str | bytes) -> RecommendationRuleSet:
    """Parse a recommendation rule set document.

    Raises:
        DefinitionValidationError: If the document does not match the model.
    """
    return _load(RecommendationRuleSet, "recommendation rule set", data)


def load_narrative_template(data: Mapping[str, Any] | str | bytes) -> NarrativeTemplate:
    """Parse a narrative template document.

    Raises:
        DefinitionValidationError: If the document does not match the model.
    """
    return _load(NarrativeTemplate, "narrative", data)


def load_ratings_snapshot(data: Mapping[str, Any] | str | bytes) -> RatingsSnapshot:
    """Parse a ratings snapshot document.

    Raises:
        DefinitionValidationError: If the document does not match the model.
    """
    return _load(RatingsSnapshot, "ratings snapshot", data)
