"""Minor-unit rounding and display formatting"""

import math
from typing import Iterable


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (not banker's rounding)"""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def round_percentage(value: float) -> float:
    """One decimal place, halves rounded up"""
    return round_half_up(value * 10) / 10


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when the denominator is zero"""
    if denominator == 0:
        return 0.0
    return numerator / denominator


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean, 0.0 for an empty input"""
    items = list(values)
    if not items:
        return 0.0
    return sum(items) / len(items)


def format_major_units(amount_minor: int, currency: str = "") -> str:
    """
    Render minor units as a whole major-unit string for human-facing text.

    Only used at the formatting boundary (advice prompts, messages):
    12345678 -> "123,457" (or "123,457 USD" with a currency code).
    """
    major = round_half_up(amount_minor / 100)
    text = f"{major:,}"
    return f"{text} {currency}" if currency else text
