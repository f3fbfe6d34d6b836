from datetime import datetime

import pandas as pd
import pytest

from steel_dashboard.periods import (
    convert_to_period,
    get_current_period_info,
    get_period_label,
    get_period_multiplier,
)


@pytest.mark.parametrize("period, hours", [("daily", 24), ("weekly", 168), ("monthly", 720)])
def test_multipliers(period, hours):
    assert get_period_multiplier(period) == hours


@pytest.mark.parametrize("hourly", [12, 13.7, 0.45, 312.3])
def test_convert_to_period(hourly):
    assert convert_to_period(hourly, "daily") == round(hourly * 24, 1)
    assert convert_to_period(hourly, "weekly") == round(hourly * 168, 1)
    assert convert_to_period(hourly, "monthly") == round(hourly * 720, 1)


def test_unknown_period_falls_back_to_daily():
    assert get_period_multiplier("yearly") == 24
    assert get_period_label("yearly") == "per Day"


def test_labels():
    assert get_period_label("daily") == "per Day"
    assert get_period_label("weekly") == "per Week"
    assert get_period_label("monthly") == "per Month"


def test_daily_window():
    info = get_current_period_info("daily", datetime(2026, 10, 14, 15, 30))
    assert info["start"] == pd.Timestamp("2026-10-14 00:00:00")
    assert info["end"] == pd.Timestamp("2026-10-14 23:59:59.999999")
    assert info["label"] == "per Day"


def test_weekly_window_starts_on_sunday():
    # 2026-10-14 is a Wednesday
    info = get_current_period_info("weekly", datetime(2026, 10, 14, 9, 0))
    assert info["start"] == pd.Timestamp("2026-10-11")
    assert info["start"].day_name() == "Sunday"
    assert info["end"] == pd.Timestamp("2026-10-17 23:59:59.999999")


def test_weekly_window_on_a_sunday():
    info = get_current_period_info("weekly", datetime(2026, 10, 18, 12, 0))
    assert info["start"] == pd.Timestamp("2026-10-18")


def test_monthly_window():
    info = get_current_period_info("monthly", datetime(2026, 2, 10))
    assert info["start"] == pd.Timestamp("2026-02-01")
    assert info["end"] == pd.Timestamp("2026-02-28 23:59:59.999999")
    assert info["label"] == "per Month"
