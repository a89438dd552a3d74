"""Exceptions raised by the readiness engine.

The scoring functions themselves are total and never raise on numeric
input. These exceptions cover the two places where the engine does refuse
input: loading definition documents, and strict template formatting.
"""

from typing import Any


class ReadinessEngineError(Exception):
    """Base class for all readiness engine errors."""


class DefinitionValidationError(ReadinessEngineError):
    """Raised when a definition document cannot be parsed into its model.

    Attributes:
        definition_kind: Which document failed (assessment, rule set, narrative).
        errors: The underlying pydantic error list.
    """

    def __init__(self, definition_kind: str, errors: list[dict[str, Any]]) -> None:
        """Initialise the error.

        Args:
            definition_kind: Human-readable name of the definition document.
            errors: Error dicts from ``ValidationError.errors()``.
        """
        self.definition_kind = definition_kind
        self.errors = errors
        super().__init__(
            f"Invalid {definition_kind} definition: {len(errors)} validation error(s)"
        )


class TemplatePlaceholderError(ReadinessEngineError):
    """Raised in strict mode when a template uses an unknown or unfilled placeholder.

    Attributes:
        template: The offending template text.
        placeholders: Placeholder names that could not be substituted.
    """

    def __init__(self, template: str, placeholders: list[str]) -> None:
        """Initialise the error.

        Args:
            template: Template that failed to format.
            placeholders: Names that had no allowed value.
        """
        self.template = template
        self.placeholders = placeholders
        super().__init__(
            f"Template has unsupported placeholders {placeholders!r}: {template!r}"
        )
