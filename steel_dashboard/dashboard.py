"""
Dashboard-ready output functions.

These are the primary entry points for the Streamlit front end. Each
function returns plain dicts or DataFrames suitable for rendering cards,
charts and tables.
"""

import logging
from typing import Iterable

import pandas as pd

from .config import CARD_REGISTRY, PERFORMANCE_STATUSES, TIME_PERIODS
from .formatting import format_percentage, format_value
from .kpis import calc_trend, calc_variance, get_status_text
from .models import KPICard
from .periods import convert_to_period, get_current_period_info, get_period_label

logger = logging.getLogger(__name__)

CARD_FRAME_COLUMNS = [
    "id", "title", "type", "position",
    "actual", "benchmark", "percentage",
    "period_actual", "period_benchmark", "variance",
    "status", "color",
]


def get_card_view(
    card: KPICard,
    period: str,
    previous_actual: float | None = None,
) -> dict:
    """Everything a single card needs to render for the selected period.

    Returns
    -------
    Dict with the card identity, hourly and period-scaled values, formatted
    strings, the achievement badge, status text, variance and trend.
    """
    data = card.data
    period_actual = convert_to_period(data.actual, period)
    period_benchmark = convert_to_period(data.benchmark, period)
    variance = calc_variance(data.actual, data.benchmark)
    badge = format_percentage(data.percentage)

    # variance goes through the card's own formatter so units match
    sign = "+" if variance >= 0 else "-"
    variance_str = sign + format_value(abs(variance), card.type, period)

    return {
        "id": card.id,
        "title": card.title,
        "type": card.type,
        "position": card.position,
        "unit": CARD_REGISTRY.get(card.type, {}).get("unit", ""),
        "period": period,
        "period_label": get_period_label(period),
        "actual": data.actual,
        "benchmark": data.benchmark,
        "percentage": data.percentage,
        "period_actual": period_actual,
        "period_benchmark": period_benchmark,
        "actual_str": format_value(data.actual, card.type, period),
        "benchmark_str": format_value(data.benchmark, card.type, period),
        "variance": variance,
        "variance_str": variance_str,
        "percentage_str": badge["value"],
        "status": badge["status"],
        "color": badge["color"],
        "status_text": get_status_text(data.percentage),
        "progress": min(max(data.percentage, 0.0), 100.0),
        "trend": calc_trend(data.actual, previous_actual),
    }


def get_dashboard_overview(
    cards: Iterable[KPICard],
    period: str,
    previous_actuals: dict[str, float] | None = None,
) -> dict:
    """Single entry point the Streamlit app calls to populate the card grid.

    Returns
    -------
    Dict with structure:
    {
        "period": "daily",
        "period_info": {"start": ..., "end": ..., "label": "per Day"},
        "cards": [card view, ...],            # ordered by position
        "status_counts": {"excellent": 1, "good": 0, ...},
    }
    """
    previous_actuals = previous_actuals or {}
    ordered = sorted(cards, key=lambda c: c.position)
    views = [get_card_view(c, period, previous_actuals.get(c.id)) for c in ordered]

    status_counts = {status: 0 for status in PERFORMANCE_STATUSES}
    for view in views:
        status_counts[view["status"]] += 1

    return {
        "period": period,
        "period_info": get_current_period_info(period),
        "cards": views,
        "status_counts": status_counts,
    }


def get_cards_frame(cards: Iterable[KPICard], period: str) -> pd.DataFrame:
    """One row per card for tables and charts.

    Returns
    -------
    DataFrame with columns:
        id, title, type, position, actual, benchmark, percentage,
        period_actual, period_benchmark, variance, status, color
    """
    views = [get_card_view(c, period) for c in cards]
    if not views:
        logger.warning("No cards to tabulate")
        return pd.DataFrame(columns=CARD_FRAME_COLUMNS)

    df = pd.DataFrame(views)[CARD_FRAME_COLUMNS]
    return df.sort_values("position").reset_index(drop=True)


def get_available_periods() -> list[str]:
    """Periods offered by the UI period selector."""
    return list(TIME_PERIODS)


def get_card_type_options() -> pd.DataFrame:
    """Card types offered by the create-card form."""
    rows = [
        {
            "type": card_type,
            "title": params["title"],
            "description": params["description"],
            "unit": params["unit"],
            "direction": params["direction"],
        }
        for card_type, params in CARD_REGISTRY.items()
    ]
    return pd.DataFrame(rows)
