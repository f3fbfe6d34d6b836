"""
KPI computation functions — pure functions with no side effects.

Provides achievement percentage, variance, trend direction and
performance-band classification.
"""

import logging
import math

from .config import CARD_REGISTRY, PERFORMANCE_BANDS

logger = logging.getLogger(__name__)


def get_direction(card_type: str) -> str:
    """Return 'higher_is_better' or 'lower_is_better' for a card type."""
    registry = CARD_REGISTRY.get(card_type, {})
    return registry.get("direction", "higher_is_better")


def calc_achievement_percentage(actual: float, benchmark: float, card_type: str) -> float:
    """Return achievement as a percentage rounded to one decimal.

    Logic
    -----
    - direction='higher_is_better':  actual / benchmark * 100
    - direction='lower_is_better':   benchmark / actual * 100

    A zero divisor yields +inf; generators never produce one, and the
    lifecycle manager replaces a non-finite result with the fallback point.
    """
    if get_direction(card_type) == "lower_is_better":
        numerator, divisor = benchmark, actual
    else:
        numerator, divisor = actual, benchmark

    if divisor == 0:
        logger.warning("Zero divisor computing achievement for '%s'", card_type)
        return math.inf
    return round(numerator / divisor * 100, 1)


def calc_variance(actual: float, benchmark: float) -> float:
    """Return actual - benchmark."""
    return actual - benchmark


def calc_trend(current: float, previous: float | None) -> str:
    """Return 'up', 'down' or 'stable' comparing two successive actuals."""
    if previous is None or current == previous:
        return "stable"
    return "up" if current > previous else "down"


def _band(percentage: float) -> tuple[float, str, str, str]:
    for band in PERFORMANCE_BANDS:
        if percentage >= band[0]:
            return band
    return PERFORMANCE_BANDS[-1]


def classify_performance(percentage: float) -> tuple[str, str]:
    """Return (status, color) for an achievement percentage.

    Bands
    -----
    - excellent  if percentage >= 100
    - good       if percentage >= 80
    - average    if percentage >= 60
    - poor       otherwise
    """
    _, status, color, _ = _band(percentage)
    return status, color


def get_status_text(percentage: float) -> str:
    """Return the card footer label: Exceeding Target / On Track / Below Target."""
    return _band(percentage)[3]
