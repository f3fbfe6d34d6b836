import pytest

from steel_dashboard.formatting import (
    format_duration,
    format_large_number,
    format_percentage,
    format_value,
    round_half_up,
)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert round_half_up(0.5) == 1


def test_tons_scale_with_period():
    assert format_value(312.5, "tons", "daily") == "7500.0 tons"
    assert format_value(312.5, "tons", "weekly") == "52500.0 tons"


def test_coils_and_shipped_round_scaled_value():
    assert format_value(12, "coils", "daily") == "288 coils"
    assert format_value(11, "shipped", "monthly") == "7920 coils"


@pytest.mark.parametrize("card_type", ["yield", "efficiency", "quality"])
def test_percentage_types_are_hourly(card_type):
    assert format_value(93.4, card_type, "monthly") == "93.4%"
    assert format_value(90.0, card_type, "weekly") == "90.0%"


def test_energy_is_hourly_two_places():
    assert format_value(0.5, "energy", "monthly") == "0.50 MWh/ton"


def test_default_is_rounded_period_value():
    assert format_value(75, "custom", "daily") == "1800"


def test_format_percentage_badge():
    assert format_percentage(100) == {"value": "100%", "status": "excellent", "color": "#4caf50"}
    assert format_percentage(79.5) == {"value": "80%", "status": "average", "color": "#ff9800"}
    assert format_percentage(59.9)["status"] == "poor"


@pytest.mark.parametrize(
    "num, expected",
    [
        (999, "999"),
        (12.5, "12.5"),
        (1500, "1.5K"),
        (2_300_000, "2.3M"),
        (7_100_000_000, "7.1B"),
    ],
)
def test_format_large_number(num, expected):
    assert format_large_number(num) == expected


@pytest.mark.parametrize(
    "seconds, expected",
    [(5, "5s"), (65, "1m 5s"), (3600, "1h 0m"), (3725, "1h 2m")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
