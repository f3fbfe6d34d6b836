"""
Period normalisation: hourly rates to daily, weekly and monthly aggregates.
"""

from datetime import datetime

import pandas as pd

from .config import DEFAULT_PERIOD, PERIOD_LABELS, PERIOD_MULTIPLIERS


def get_period_multiplier(period: str) -> int:
    """Hours in a period. Unknown periods are treated as daily."""
    return PERIOD_MULTIPLIERS.get(period, PERIOD_MULTIPLIERS[DEFAULT_PERIOD])


def get_period_label(period: str) -> str:
    return PERIOD_LABELS.get(period, PERIOD_LABELS[DEFAULT_PERIOD])


def convert_to_period(hourly_value: float, period: str) -> float:
    """Scale an hourly value to `period`, rounded to one decimal."""
    return round(hourly_value * get_period_multiplier(period), 1)


def get_current_period_info(period: str, now: datetime | None = None) -> dict:
    """Return the calendar window containing `now` for a period.

    Weeks start on Sunday. The end of each window is the last microsecond
    of its final day.

    Returns
    -------
    Dict with keys ``start``, ``end`` (pd.Timestamp) and ``label``.
    """
    ts = pd.Timestamp(now) if now is not None else pd.Timestamp.now()
    day_start = ts.normalize()

    if period == "weekly":
        days_since_sunday = (day_start.dayofweek + 1) % 7
        start = day_start - pd.Timedelta(days=days_since_sunday)
        last_day = start + pd.Timedelta(days=6)
    elif period == "monthly":
        start = day_start.replace(day=1)
        last_day = start + pd.offsets.MonthEnd(0)
    else:
        start = day_start
        last_day = day_start

    end = last_day + pd.Timedelta(days=1) - pd.Timedelta(microseconds=1)

    return {
        "start": start,
        "end": end,
        "label": get_period_label(period),
    }
