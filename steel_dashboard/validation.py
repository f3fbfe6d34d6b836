"""Validation predicates for card input and generated values."""

import math
from typing import Any

from .config import CARD_TYPES, TIME_PERIODS, TITLE_MAX_LENGTH


def is_valid_card_title(title: Any) -> bool:
    """True when the trimmed title holds 1 to 50 characters."""
    if not isinstance(title, str):
        return False
    return 0 < len(title.strip()) <= TITLE_MAX_LENGTH


def is_valid_kpi_value(value: Any) -> bool:
    """True for finite, non-negative numbers."""
    if isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number >= 0


def is_valid_period(period: Any) -> bool:
    return period in TIME_PERIODS


def is_valid_card_type(card_type: Any) -> bool:
    return card_type in CARD_TYPES
