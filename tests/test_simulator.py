import math

import pytest

from steel_dashboard import simulator
from steel_dashboard.config import CARD_TYPES
from steel_dashboard.simulator import (
    GENERATORS,
    biased,
    generate_kpi_data,
    generate_sample,
    normal,
    uniform_decimal,
    uniform_int,
)

DRAWS = 300

EXPECTED_RANGES = {
    "coils": ((10, 15), (12, 20)),
    "tons": ((150, 450), (250, 500)),
    "shipped": ((8, 14), (10, 18)),
    "yield": ((85, 98), (92, 96)),
    "efficiency": ((75, 95), (85, 92)),
    "quality": ((90, 99.5), (95, 98)),
    "energy": ((0.4, 0.8), (0.5, 0.7)),
    "custom": ((50, 100), (70, 90)),
}


def test_uniform_int_is_inclusive_on_both_ends():
    seen = {uniform_int(1, 3) for _ in range(DRAWS)}
    assert seen == {1, 2, 3}
    assert all(isinstance(v, int) for v in seen)


def test_uniform_decimal_respects_range_and_places():
    for _ in range(DRAWS):
        value = uniform_decimal(0.4, 0.8, 2)
        assert 0.4 <= value <= 0.8
        assert round(value, 2) == value


def test_normal_centres_on_mean():
    draws = [normal(50, 5) for _ in range(2000)]
    assert all(math.isfinite(d) for d in draws)
    assert abs(sum(draws) / len(draws) - 50) < 1.0


def test_biased_full_weight_returns_target():
    assert biased(0, 100, 42, bias=1.0) == 42


def test_biased_stays_between_range_and_target():
    for _ in range(DRAWS):
        assert 10 <= biased(10, 20, 15, bias=0.3) <= 20


def test_biased_rejects_bias_outside_unit_interval():
    with pytest.raises(ValueError):
        biased(0, 10, 5, bias=1.5)


def test_every_card_type_has_a_generator():
    assert set(GENERATORS) == set(CARD_TYPES)


@pytest.mark.parametrize("card_type", CARD_TYPES)
def test_generated_points_are_within_ranges(card_type):
    (a_lo, a_hi), (b_lo, b_hi) = EXPECTED_RANGES[card_type]
    for _ in range(DRAWS):
        point = generate_kpi_data(card_type)
        assert a_lo <= point.actual <= a_hi
        assert b_lo <= point.benchmark <= b_hi
        assert point.actual >= 0
        assert point.benchmark > 0
        assert math.isfinite(point.percentage)


@pytest.mark.parametrize("card_type", [t for t in CARD_TYPES if t != "energy"])
def test_percentage_is_actual_over_benchmark(card_type):
    point = generate_kpi_data(card_type)
    assert point.percentage == round(point.actual / point.benchmark * 100, 1)


def test_energy_percentage_is_benchmark_over_actual():
    for _ in range(50):
        point = generate_kpi_data("energy")
        assert point.percentage == round(point.benchmark / point.actual * 100, 1)


def test_tons_actual_is_coils_times_weight(monkeypatch):
    monkeypatch.setattr(simulator, "generate_coils_per_hour", lambda: 12)
    monkeypatch.setattr(simulator, "generate_coil_weight", lambda: 20.5)
    actual, _ = simulator.generate_tons()
    assert actual == 246.0


def test_unknown_card_type_raises():
    with pytest.raises(KeyError):
        generate_kpi_data("temperature")


def test_generate_sample_shape():
    df = generate_sample("coils", 10)
    assert len(df) == 10
    assert list(df.columns) == ["tick", "card_type", "actual", "benchmark", "percentage"]
    assert (df["card_type"] == "coils").all()
