# src/shared/numeric.py
"""Numeric helpers shared by scoring and quota planning."""

import math
from fractions import Fraction
from typing import Union


def round_half_up(value: Union[float, Fraction]) -> int:
    """Round to the nearest integer with halves rounded up (2.5 -> 3, unlike round())."""
    return math.floor(value + Fraction(1, 2))


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def as_fraction(value: Union[int, float, str]) -> Fraction:
    """Exact fraction of a configured percentage (0.1 stays 1/10)."""
    return Fraction(str(value))
