"""Named-placeholder substitution for narrative templates.

Templates use ``{name}`` placeholders. Each template category has a fixed
set of keys it may use; anything else is dropped from the output (and
logged) rather than leaking a raw ``{placeholder}`` into a report.
"""

import re
from collections.abc import Mapping

from readiness_engine.errors import TemplatePlaceholderError
from readiness_engine.observability import get_logger

logger = get_logger(__name__)

_PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")

TEMPLATE_KEYS: dict[str, frozenset[str]] = {
    "headline": frozenset({"stageLabel"}),
    "summary_sentence1": frozenset({"stageLabel", "currentAvg"}),
    "summary_sentence2": frozenset({"topTheme"}),
    "summary_sentence3": frozenset({"gapAvg"}),
    "stage_rationale": frozenset({"currentAvg", "confidenceLabel", "confidenceRatio"}),
    "priority_why": frozenset({"gap", "dimensionTitle", "theme"}),
    "maturity_level": frozenset({"score"}),
    "gap_analysis": frozenset({"count", "pluralS", "dimensions", "verbS"}),
    "strengths": frozenset({"list", "lastItem", "area"}),
    "priorities": frozenset({"topics"}),
}


def find_placeholders(template: str) -> list[str]:
    """List the placeholder names in a template, in order of appearance."""
    return _PLACEHOLDER_PATTERN.findall(template)


def unknown_placeholders(template: str, category: str) -> list[str]:
    """Return placeholders in ``template`` that ``category`` does not allow.

    Useful for checking authored templates before they reach a report.

    Args:
        template: Template text.
        category: Key into TEMPLATE_KEYS.

    Returns:
        Disallowed placeholder names, deduplicated, in order of appearance.
    """
    allowed = TEMPLATE_KEYS[category]
    unknown: list[str] = []
    for name in find_placeholders(template):
        if name not in allowed and name not in unknown:
            unknown.append(name)
    return unknown


def format_template(
    template: str,
    values: Mapping[str, object],
    category: str | None = None,
    strict: bool = False,
) -> str:
    """Substitute ``{name}`` placeholders with values.

    A placeholder is filled only when its name is allowed for ``category``
    (any name when ``category`` is None) and present in ``values``. Other
    placeholders are removed from the output.

    Args:
        template: Template text, e.g. ``"You are at the {stageLabel} stage."``.
        values: Placeholder values; converted with ``str()``.
        category: Template category restricting the usable keys.
        strict: Raise instead of dropping unusable placeholders.

    Returns:
        The formatted text.

    Raises:
        TemplatePlaceholderError: In strict mode, if any placeholder could
            not be filled.
    """
    allowed = TEMPLATE_KEYS[category] if category is not None else None
    dropped: list[str] = []

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if (allowed is None or name in allowed) and name in values:
            return str(values[name])
        dropped.append(name)
        return ""

    formatted = _PLACEHOLDER_PATTERN.sub(_substitute, template)
    if dropped:
        if strict:
            raise TemplatePlaceholderError(template, dropped)
        logger.warning(
            "Dropped unsupported template placeholders",
            category=category,
            placeholders=dropped,
        )
        formatted = re.sub(r" {2,}", " ", formatted).strip()
    return formatted
