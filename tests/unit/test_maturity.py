"""Unit tests for maturity stage classification.

Tests cover:
- Base stage boundaries (inclusive minimums)
- Dimension gap downgrade (> 1.5 only, never below Explorer)
- Organisation confidence downgrades (two-stage, one-stage, clamping)
- Confidence labels at their boundaries
"""

import pytest

from readiness_engine.core.maturity import (
    ORDERED_STAGES,
    base_stage_index,
    confidence_label,
    get_dimension_maturity,
    get_organization_maturity,
    get_stage,
)


class TestBaseStage:
    """Tests for base_stage_index."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (0.0, 0),
            (1.9, 0),
            (2.0, 1),
            (2.9, 1),
            (3.0, 2),
            (3.9, 2),
            (4.0, 3),
            (5.0, 3),
        ],
    )
    def test_boundaries(self, score: float, expected: int) -> None:
        """Each stage starts at its inclusive minimum score."""
        assert base_stage_index(score) == expected

    def test_stages_are_ordered_by_min_score(self) -> None:
        """Stages run from Explorer to Optimized."""
        assert [stage.id for stage in ORDERED_STAGES] == ["explorer", "structured", "integrated", "optimized"]
        assert [stage.min_score for stage in ORDERED_STAGES] == [0, 2, 3, 4]

    def test_get_stage(self) -> None:
        """Stages are looked up by id."""
        assert get_stage("integrated").label == "Integrated"


class TestDimensionMaturity:
    """Tests for get_dimension_maturity."""

    def test_gap_at_threshold_does_not_downgrade(self) -> None:
        """A gap of exactly 1.5 keeps the stage."""
        maturity = get_dimension_maturity(3.0, 1.5)
        assert maturity.stage.id == "integrated"
        assert maturity.downgrade_reason is None

    def test_gap_above_threshold_drops_one_stage(self) -> None:
        """A gap over 1.5 drops one stage with a reason."""
        maturity = get_dimension_maturity(3.0, 1.51)
        assert maturity.stage.id == "structured"
        assert maturity.downgrade_reason == "Large gap between current and target capabilities."

    def test_never_below_explorer(self) -> None:
        """Explorer cannot be downgraded and gets no reason."""
        maturity = get_dimension_maturity(1.5, 3.0)
        assert maturity.stage.id == "explorer"
        assert maturity.downgrade_reason is None

    def test_optimized_with_large_gap(self) -> None:
        """Optimized drops to Integrated on a large gap."""
        assert get_dimension_maturity(4.0, 2.0).stage.id == "integrated"


class TestOrganizationMaturity:
    """Tests for get_organization_maturity."""

    def test_no_downgrade_with_medium_confidence(self) -> None:
        """Medium confidence keeps the base stage."""
        maturity = get_organization_maturity(2.0, 0.67)
        assert maturity.stage.id == "structured"
        assert maturity.confidence_label == "Medium"
        assert maturity.downgrade_reason is None

    def test_low_confidence_drops_one_stage(self) -> None:
        """Below 0.4 drops one stage."""
        maturity = get_organization_maturity(3.0, 0.39)
        assert maturity.stage.id == "structured"
        assert maturity.confidence_label == "Low"
        assert maturity.downgrade_reason == "Low assessment confidence."

    def test_very_low_confidence_drops_two_stages(self) -> None:
        """Below 0.2 drops two stages."""
        maturity = get_organization_maturity(4.0, 0.1)
        assert maturity.stage.id == "structured"
        assert maturity.downgrade_reason == "Very low assessment confidence."

    def test_very_low_confidence_clamps_at_explorer(self) -> None:
        """A two-stage drop stops at Explorer."""
        maturity = get_organization_maturity(2.0, 0.19)
        assert maturity.stage.id == "explorer"
        assert maturity.downgrade_reason == "Very low assessment confidence."

    def test_downgrades_do_not_stack(self) -> None:
        """Very low confidence excludes the low-confidence rule."""
        maturity = get_organization_maturity(3.0, 0.19)
        assert maturity.stage.id == "explorer"
        assert maturity.downgrade_reason == "Very low assessment confidence."

    def test_explorer_has_no_reason(self) -> None:
        """Nothing to downgrade means no reason."""
        maturity = get_organization_maturity(1.0, 0.1)
        assert maturity.stage.id == "explorer"
        assert maturity.downgrade_reason is None
        assert maturity.confidence_label == "Low"

    def test_ratio_is_carried_through(self) -> None:
        """The confidence ratio is kept on the result."""
        assert get_organization_maturity(3.0, 0.85).confidence_ratio == 0.85


class TestConfidenceLabel:
    """Tests for confidence_label."""

    @pytest.mark.parametrize(
        ("ratio", "expected"),
        [
            (0.0, "Low"),
            (0.39, "Low"),
            (0.4, "Medium"),
            (0.69, "Medium"),
            (0.7, "High"),
            (1.0, "High"),
        ],
    )
    def test_boundaries(self, ratio: float, expected: str) -> None:
        """Low below 0.4, Medium below 0.7, High above."""
        assert confidence_label(ratio) == expected
