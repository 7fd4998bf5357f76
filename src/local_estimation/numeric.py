"""Numeric helpers shared by the estimation services."""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` decimals with halves rounded toward +infinity."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Round to the nearest integer with halves rounded toward +infinity."""
    return math.floor(value + 0.5)
