"""Numeric normalisation for ratings and gaps.

Ratings live on a discrete 1.0-5.0 scale in 0.5 steps, so the largest
possible gap is 4.0. Everything here is total: out-of-range or malformed
values are coerced onto the scale instead of being rejected.
"""

import math
from typing import Any

SCORE_STEP: float = 0.5
SCORE_MIN: float = 1.0
SCORE_MAX: float = 5.0
GAP_MIN: float = 0.0
GAP_MAX: float = SCORE_MAX - SCORE_MIN


def round_to_step(value: float, step: float = SCORE_STEP) -> float:
    """Round to the nearest multiple of ``step``, halves away from zero.

    Snaps floating point noise back onto the grid (1.50000002 -> 1.5).
    Non-finite values are returned unchanged so callers can clamp them.

    Args:
        value: Number to round.
        step: Grid spacing, e.g. 0.5 for ratings or 0.1 for display values.

    Returns:
        The rounded value.
    """
    if not math.isfinite(value):
        return value
    inverse = 1 / step
    scaled = value * inverse
    rounded = math.floor(abs(scaled) + 0.5)
    return math.copysign(rounded, scaled) / inverse


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Clamp ``value`` into the closed interval [minimum, maximum]."""
    return max(minimum, min(maximum, value))


def coerce_number(value: Any, default: float = SCORE_MIN) -> float:
    """Convert loosely typed input to a float.

    Args:
        value: Number, numeric string, or anything else.
        default: Returned when ``value`` is missing, NaN, or unparseable.

    Returns:
        The parsed float, or ``default``.
    """
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return number


def normalize_score(value: Any) -> float:
    """Snap a rating onto the 0.5-step 1-5 scale."""
    return clamp(round_to_step(coerce_number(value), SCORE_STEP), SCORE_MIN, SCORE_MAX)


def normalize_gap(value: float) -> float:
    """Snap a gap onto the 0.5-step 0-4 scale."""
    return clamp(round_to_step(value, SCORE_STEP), GAP_MIN, GAP_MAX)


def clamped_gap(target: float, current: float) -> float:
    """Gap used for scoring: overperformance collapses to exactly 0.

    Args:
        target: Target rating.
        current: Current rating.

    Returns:
        A gap in [0, 4] on the 0.5 grid. Never negative.
    """
    return normalize_gap(max(0.0, target - current))


# Name used throughout the scoring pipeline.
calculate_gap = clamped_gap


def signed_gap(target: float, current: float) -> float:
    """Gap used for trend display: keeps the sign of ``target - current``.

    Rounded to 0.1 but never clamped, so an organisation ahead of its
    target shows a negative gap.
    """
    return round_to_step(target - current, 0.1)


def format_score(value: Any) -> str:
    """Format a rating with one decimal place, e.g. ``"3.5"``."""
    return f"{normalize_score(value):.1f}"


def format_gap(value: float) -> str:
    """Format a gap with one decimal place.

    Negative zero (from e.g. ``-0.04``) is printed as ``"0.0"``.
    """
    rounded = round_to_step(value, 0.1)
    if rounded == 0:
        rounded = 0.0
    return f"{rounded:.1f}"
