"""
Formatting helpers: value strings per card type, percentage badges,
large-number abbreviation and durations.
"""

import math

from .kpis import classify_performance
from .periods import convert_to_period


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def _tons(value: float, period: str) -> str:
    return f"{convert_to_period(value, period):.1f} tons"


def _coils(value: float, period: str) -> str:
    return f"{round_half_up(convert_to_period(value, period))} coils"


def _percent(value: float, period: str) -> str:
    # rates already expressed as a percentage do not scale with the period
    return f"{value:.1f}%"


def _energy(value: float, period: str) -> str:
    return f"{value:.2f} MWh/ton"


def _plain(value: float, period: str) -> str:
    return f"{round_half_up(convert_to_period(value, period))}"


VALUE_FORMATTERS: dict = {
    "tons": _tons,
    "coils": _coils,
    "shipped": _coils,
    "yield": _percent,
    "efficiency": _percent,
    "quality": _percent,
    "energy": _energy,
}


def format_value(value: float, card_type: str, period: str = "daily") -> str:
    """Render an hourly value for display on a card of `card_type`."""
    formatter = VALUE_FORMATTERS.get(card_type, _plain)
    return formatter(value, period)


def format_percentage(percentage: float) -> dict:
    """Return the achievement badge: ``{"value", "status", "color"}``."""
    status, color = classify_performance(percentage)
    return {
        "value": f"{round_half_up(percentage)}%",
        "status": status,
        "color": color,
    }


def format_large_number(num: float) -> str:
    """Abbreviate with K, M or B suffixes (one decimal)."""
    if num >= 1_000_000_000:
        return f"{num / 1_000_000_000:.1f}B"
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    if float(num).is_integer():
        return str(int(num))
    return str(num)


def format_duration(seconds: int) -> str:
    """Format seconds as 'Hh Mm', 'Mm Ss' or 'Ss'."""
    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
