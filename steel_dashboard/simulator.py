"""
Simulated data generator for the steel production dashboard.

Generates hourly actual/benchmark pairs for each card type from the ranges
in config.CARD_REGISTRY. All values are synthetic — no real plant data is
used, and the generator is deliberately unseeded so every tick differs.
"""

import math

import numpy as np
import pandas as pd

from .config import CARD_REGISTRY, COIL_WEIGHT_RANGE, COILS_PER_HOUR_RANGE
from .kpis import calc_achievement_percentage
from .models import KPIDataPoint

_RNG = np.random.default_rng()


# ---------------------------------------------------------------------------
# Random primitives
# ---------------------------------------------------------------------------
def uniform_int(min_value: int, max_value: int) -> int:
    """Integer in [min_value, max_value], both ends inclusive."""
    return int(_RNG.integers(min_value, max_value, endpoint=True))


def uniform_decimal(min_value: float, max_value: float, decimals: int = 1) -> float:
    """Real number in [min_value, max_value] rounded to `decimals` places."""
    return round(float(_RNG.uniform(min_value, max_value)), decimals)


def normal(mean: float, std_dev: float) -> float:
    """Normally distributed draw via the Box–Muller transform.

    u1 is taken from (0, 1] so the logarithm is always defined.
    """
    u1 = 1.0 - float(_RNG.random())
    u2 = float(_RNG.random())
    z0 = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
    return mean + std_dev * z0


def biased(min_value: float, max_value: float, target: float, bias: float = 0.3) -> int:
    """Blend the mean of two uniform draws with `target`, weighted by `bias`."""
    if not 0.0 <= bias <= 1.0:
        raise ValueError(f"bias must be within [0, 1], got {bias}")
    draw1 = float(_RNG.uniform(min_value, max_value))
    draw2 = float(_RNG.uniform(min_value, max_value))
    blended = ((draw1 + draw2) / 2) * (1 - bias) + target * bias
    return int(math.floor(blended + 0.5))


def _draw(spec: tuple) -> float:
    min_value, max_value, decimals = spec
    if decimals == 0:
        return uniform_int(min_value, max_value)
    return uniform_decimal(min_value, max_value, decimals)


# ---------------------------------------------------------------------------
# Steel production primitives
# ---------------------------------------------------------------------------
def generate_coils_per_hour() -> int:
    return uniform_int(*COILS_PER_HOUR_RANGE)


def generate_coil_weight() -> float:
    """Weight of a single coil in tons."""
    return uniform_decimal(*COIL_WEIGHT_RANGE)


def calc_tons_per_hour(coils_per_hour: float, weight_per_coil: float) -> float:
    return round(coils_per_hour * weight_per_coil, 1)


# ---------------------------------------------------------------------------
# Domain generators: (actual, benchmark) at hourly granularity
# ---------------------------------------------------------------------------
def _ranged(card_type: str):
    params = CARD_REGISTRY[card_type]

    def generate() -> tuple[float, float]:
        return _draw(params["actual"]), _draw(params["benchmark"])

    generate.__name__ = f"generate_{card_type}"
    return generate


def generate_tons() -> tuple[float, float]:
    actual = calc_tons_per_hour(generate_coils_per_hour(), generate_coil_weight())
    return actual, _draw(CARD_REGISTRY["tons"]["benchmark"])


GENERATORS: dict = {
    card_type: generate_tons if card_type == "tons" else _ranged(card_type)
    for card_type in CARD_REGISTRY
}


def generate_kpi_data(card_type: str) -> KPIDataPoint:
    """Generate one hourly data point for a card type.

    Unknown types raise KeyError; callers that must not fail substitute the
    fallback point themselves.
    """
    generator = GENERATORS[card_type]
    actual, benchmark = generator()
    percentage = calc_achievement_percentage(actual, benchmark, card_type)
    return KPIDataPoint(actual=actual, benchmark=benchmark, percentage=percentage)


def generate_sample(card_type: str, n_ticks: int = 50) -> pd.DataFrame:
    """Generate `n_ticks` independent data points for one card type.

    Used for range previews on the dashboard; nothing is retained.
    """
    rows = []
    for tick in range(n_ticks):
        point = generate_kpi_data(card_type)
        rows.append({
            "tick": tick,
            "card_type": card_type,
            "actual": point.actual,
            "benchmark": point.benchmark,
            "percentage": point.percentage,
        })
    return pd.DataFrame(rows)
