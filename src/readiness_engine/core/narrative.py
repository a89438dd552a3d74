"""Narrative assembly from maturity, scores and ranked recommendations.

The narrative template supplies every sentence; this module only picks
which template applies and what goes into its placeholders.

Deduplication differs between sections and is kept as-is:
- Priorities: first pass one per theme, second pass one per title, last
  pass "Strengthen <topic>" from the top gaps.
- Quick wins: first pass one per theme, second pass one per action text.

TODO: confirm with the rule-set authors whether the second passes should
share one dedup key.
"""

from collections.abc import Mapping, Sequence

from readiness_engine.core.definitions import NarrativeTemplate
from readiness_engine.core.models import (
    EnhancedRecommendation,
    NarrativeModel,
    NarrativePriority,
    OrganizationMaturity,
    OverallSummary,
    ResultsModel,
    TopGap,
)
from readiness_engine.core.number import format_gap
from readiness_engine.core.templating import format_template
from readiness_engine.observability import get_logger

logger = get_logger(__name__)

MAX_PRIORITIES: int = 3
MAX_QUICK_WINS: int = 5
THEME_SAMPLE_SIZE: int = 5

DEFAULT_THEME: str = "General Capability"
DEFAULT_TOP_THEME: str = "General Readiness"
DEFAULT_PRIORITY_WHY_TEMPLATE: str = "Closes a +{gap} gap in {dimensionTitle} by targeting {theme}."
DEFAULT_LOW_CONFIDENCE_NOTE: str = "Confidence is low."
DEFAULT_MODERATE_CONFIDENCE_NOTE: str = "Confidence is moderate."


def theme_label(tags: Sequence[str], theme_map: Mapping[str, str]) -> str:
    """Theme of a recommendation: the first tag with a mapped label."""
    for tag in tags:
        label = theme_map.get(tag)
        if label:
            return label
    return DEFAULT_THEME


def extract_theme(
    recommendations: Sequence[EnhancedRecommendation],
    theme_map: Mapping[str, str],
    top_gaps: Sequence[TopGap],
) -> str:
    """Most frequent theme across the top recommendations.

    Tags of the first five recommendations are counted under their mapped
    label (or the raw tag when unmapped). Ties go to the label seen first.
    Without any tags the first top gap's dimension title is used, then
    ``"General Readiness"``.
    """
    counts: dict[str, int] = {}
    for recommendation in recommendations[:THEME_SAMPLE_SIZE]:
        for tag in recommendation.tags:
            label = theme_map.get(tag) or tag
            counts[label] = counts.get(label, 0) + 1

    top_theme = ""
    max_count = 0
    for label, count in counts.items():
        if count > max_count:
            top_theme = label
            max_count = count

    if top_theme:
        return top_theme
    if top_gaps:
        return top_gaps[0].dimension_title
    return DEFAULT_TOP_THEME


def build_headline(
    template: NarrativeTemplate,
    maturity: OrganizationMaturity,
    strict: bool = False,
) -> str:
    """Headline for the organisation's stage.

    Low confidence replaces the stage headline with the low-confidence
    prefix followed by "potential".
    """
    headlines = template.headlines
    stage = maturity.stage
    if headlines is None or headlines.by_stage_id is None:
        return f"Assessment Complete: {stage.label}"

    values = {"stageLabel": stage.label}
    if maturity.confidence_label == "Low":
        prefix = format_template(headlines.low_confidence_prefix, values, "headline", strict)
        return f"{prefix} potential"

    headline = headlines.by_stage_id.get(stage.id) or headlines.by_stage_id.get("default", "")
    return format_template(headline, values, "headline", strict)


def build_executive_summary(
    template: NarrativeTemplate,
    maturity: OrganizationMaturity,
    overall: OverallSummary,
    top_theme: str,
    strict: bool = False,
) -> str:
    """Three templated sentences joined with spaces."""
    sentences = template.executive_summary
    current_avg = f"{overall.current_avg:.1f}"
    if sentences is None:
        return (
            f"The organization is at the {maturity.stage.label} stage "
            f"with a score of {current_avg}."
        )

    first = format_template(
        sentences.sentence1,
        {"stageLabel": maturity.stage.label, "currentAvg": current_avg},
        "summary_sentence1",
        strict,
    )
    second = format_template(
        sentences.sentence2,
        {"topTheme": top_theme.lower()},
        "summary_sentence2",
        strict,
    )
    third = format_template(
        sentences.sentence3,
        {"gapAvg": format_gap(overall.gap_avg)},
        "summary_sentence3",
        strict,
    )
    return " ".join([first, second, third])


def build_stage_rationale(
    template: NarrativeTemplate,
    maturity: OrganizationMaturity,
    overall: OverallSummary,
    strict: bool = False,
) -> str:
    """Explain the stage, appending the downgrade reason when there is one."""
    current_avg = f"{overall.current_avg:.1f}"
    if template.stage_rationale:
        rationale = format_template(
            template.stage_rationale,
            {
                "currentAvg": current_avg,
                "confidenceLabel": maturity.confidence_label.lower(),
                "confidenceRatio": f"{maturity.confidence_ratio * 100:.0f}",
            },
            "stage_rationale",
            strict,
        )
    else:
        rationale = (
            "This stage determination reflects a calculated aggregate score "
            f"of {current_avg}."
        )

    if maturity.downgrade_reason:
        rationale += f" Note: {maturity.downgrade_reason}"
    return rationale


def build_notes(template: NarrativeTemplate, maturity: OrganizationMaturity) -> list[str]:
    """Confidence notes; low and moderate are mutually exclusive.

    No notes at all when the template has no ``notes`` section. An empty
    section still yields the default wording.
    """
    if template.notes is None:
        return []
    if maturity.confidence_ratio < 0.4:
        return [template.notes.get("low") or DEFAULT_LOW_CONFIDENCE_NOTE]
    if maturity.confidence_ratio < 0.7:
        return [template.notes.get("moderate") or DEFAULT_MODERATE_CONFIDENCE_NOTE]
    return []


def _dimension_title(recommendation: EnhancedRecommendation, top_gaps: Sequence[TopGap]) -> str:
    if recommendation.dimension_title:
        return recommendation.dimension_title
    for gap in top_gaps:
        if gap.dimension_id == recommendation.dimension:
            return gap.dimension_title
    return recommendation.dimension[:1].upper() + recommendation.dimension[1:]


def build_priorities(
    recommendations: Sequence[EnhancedRecommendation],
    top_gaps: Sequence[TopGap],
    template: NarrativeTemplate,
    strict: bool = False,
) -> list[NarrativePriority]:
    """Up to three priorities, one per theme where possible.

    Falls back to deduplicating by title, then to the top gaps.
    """
    why_template = template.priority_why_template or DEFAULT_PRIORITY_WHY_TEMPLATE

    def _priority(recommendation: EnhancedRecommendation, theme: str) -> NarrativePriority:
        why = format_template(
            why_template,
            {
                "gap": format_gap(recommendation.gap),
                "dimensionTitle": _dimension_title(recommendation, top_gaps),
                "theme": theme,
            },
            "priority_why",
            strict,
        )
        return NarrativePriority(title=recommendation.title, why=why)

    priorities: list[NarrativePriority] = []
    seen_themes: set[str] = set()
    for recommendation in recommendations:
        if len(priorities) >= MAX_PRIORITIES:
            break
        theme = theme_label(recommendation.tags, template.theme_map)
        if theme in seen_themes:
            continue
        seen_themes.add(theme)
        priorities.append(_priority(recommendation, theme))

    if len(priorities) < MAX_PRIORITIES:
        seen_titles = {priority.title for priority in priorities}
        for recommendation in recommendations:
            if len(priorities) >= MAX_PRIORITIES:
                break
            if recommendation.title in seen_titles:
                continue
            seen_titles.add(recommendation.title)
            theme = theme_label(recommendation.tags, template.theme_map)
            priorities.append(_priority(recommendation, theme))

    if len(priorities) < MAX_PRIORITIES:
        for gap in top_gaps:
            if len(priorities) >= MAX_PRIORITIES:
                break
            title = f"Strengthen {gap.topic_label}"
            if any(priority.title == title for priority in priorities):
                continue
            priorities.append(
                NarrativePriority(
                    title=title,
                    why=f"Critical gap of {format_gap(gap.gap)} in {gap.dimension_title}.",
                )
            )

    return priorities


def build_quick_wins(
    recommendations: Sequence[EnhancedRecommendation],
    theme_map: Mapping[str, str],
) -> list[str]:
    """Up to five first actions, preferring one per theme."""

    def _action(recommendation: EnhancedRecommendation) -> str:
        return recommendation.actions[0] if recommendation.actions else recommendation.title

    quick_wins: list[str] = []
    seen_actions: set[str] = set()
    seen_themes: set[str] = set()

    for recommendation in recommendations:
        if len(quick_wins) >= MAX_QUICK_WINS:
            break
        action = _action(recommendation)
        theme = theme_label(recommendation.tags, theme_map)
        if theme in seen_themes or action in seen_actions:
            continue
        seen_themes.add(theme)
        seen_actions.add(action)
        quick_wins.append(action)

    for recommendation in recommendations:
        if len(quick_wins) >= MAX_QUICK_WINS:
            break
        action = _action(recommendation)
        if action in seen_actions:
            continue
        seen_actions.add(action)
        quick_wins.append(action)

    return quick_wins


def generate_narrative(
    maturity: OrganizationMaturity,
    overall: OverallSummary,
    top_gaps: Sequence[TopGap],
    recommendations: Sequence[EnhancedRecommendation],
    template: NarrativeTemplate,
    strict: bool = False,
    fallback_theme_map: Mapping[str, str] | None = None,
) -> NarrativeModel:
    """Assemble the full narrative.

    Args:
        maturity: Organisation maturity classification.
        overall: Overall score summary.
        top_gaps: Largest topic gaps, largest first.
        recommendations: Ranked recommendations.
        template: Narrative template definition.
        strict: Raise on unusable template placeholders instead of dropping them.
        fallback_theme_map: Theme map used when the template declares none,
            normally the rule set's ``meta.theme_map``.

    Returns:
        NarrativeModel with every text fully rendered.
    """
    if not template.theme_map and fallback_theme_map:
        template = template.model_copy(update={"theme_map": dict(fallback_theme_map)})

    top_theme = extract_theme(recommendations, template.theme_map, top_gaps)
    narrative = NarrativeModel(
        headline=build_headline(template, maturity, strict),
        executive_summary=build_executive_summary(template, maturity, overall, top_theme, strict),
        stage_rationale=build_stage_rationale(template, maturity, overall, strict),
        priorities=build_priorities(recommendations, top_gaps, template, strict),
        quick_wins=build_quick_wins(recommendations, template.theme_map),
        notes=build_notes(template, maturity),
    )

    logger.debug(
        "Narrative assembled",
        stage=maturity.stage.id,
        top_theme=top_theme,
        priority_count=len(narrative.priorities),
        quick_win_count=len(narrative.quick_wins),
    )
    return narrative


# ---------------------------------------------------------------------------
# Standalone executive summary (results only, no recommendations)
# ---------------------------------------------------------------------------


def _maturity_level_key(score: float, template: NarrativeTemplate) -> str:
    thresholds = template.maturity_thresholds
    if thresholds is None:
        return "beginner"
    if score >= thresholds.leading:
        return "leading"
    if score >= thresholds.advanced:
        return "advanced"
    if score >= thresholds.ready:
        return "ready"
    if score >= thresholds.exploring:
        return "exploring"
    return "beginner"


def generate_executive_summary(
    results: ResultsModel,
    template: NarrativeTemplate,
    strict: bool = False,
) -> str:
    """Short executive summary built from aggregated results alone.

    Combines a maturity statement, strengths (dimensions at 4.0 or above),
    a gap statement (dimensions with |gap| > 1.0) and the top three
    priority topics. Returns an empty string when the template has no
    executive templates.
    """
    templates = template.executive_templates
    if templates is None:
        return ""

    overall = results.overall
    comparisons = results.dimension_comparisons

    level_key = _maturity_level_key(overall.current_avg, template)
    maturity_statement = format_template(
        templates.maturity_level.get(level_key, ""),
        {"score": f"{overall.current_avg:.1f}"},
        "maturity_level",
        strict,
    )

    strengths = [comparison for comparison in comparisons if comparison.current >= 4.0]
    strength_statement = ""
    if len(strengths) > 1:
        strength_statement = format_template(
            templates.strengths.multiple,
            {
                "list": ", ".join(strength.name for strength in strengths[:-1]),
                "lastItem": strengths[-1].name,
            },
            "strengths",
            strict,
        )
    elif len(strengths) == 1:
        strength_statement = format_template(
            templates.strengths.single,
            {"area": strengths[0].name},
            "strengths",
            strict,
        )

    large_gaps = [comparison for comparison in comparisons if abs(comparison.gap) > 1.0]
    if len(large_gaps) > 2:
        gap_statement = format_template(
            templates.gap_analysis.large,
            {
                "count": len(large_gaps),
                "pluralS": "s",
                "dimensions": ", ".join(gap.name for gap in large_gaps[:3]),
                "verbS": "",
            },
            "gap_analysis",
            strict,
        )
    elif large_gaps:
        plural = len(large_gaps) > 1
        gap_statement = format_template(
            templates.gap_analysis.moderate,
            {
                "count": len(large_gaps),
                "pluralS": "s" if plural else "",
                "verbS": " show" if plural else " shows",
            },
            "gap_analysis",
            strict,
        )
    else:
        gap_statement = format_template(templates.gap_analysis.minimal, {}, "gap_analysis", strict)

    if len(results.top_topics) >= 3:
        priority_statement = format_template(
            templates.priorities.high,
            {"topics": ", ".join(topic.label for topic in results.top_topics[:3])},
            "priorities",
            strict,
        )
    else:
        priority_statement = format_template(templates.priorities.balanced, {}, "priorities", strict)

    statements = [maturity_statement, strength_statement, gap_statement, priority_statement]
    return " ".join(statement for statement in statements if statement)
