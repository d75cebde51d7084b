"""Utilities: output rounding conventions.

Energy quantities are reported to 2 decimals, percentages to 1 decimal and
unit prices to 3 decimals.
"""
from __future__ import annotations


def round_kwh(value: float) -> float:
    return round(float(value), 2)


def round_pct(value: float) -> float:
    return round(float(value), 1)


def round_price(value: float) -> float:
    return round(float(value), 3)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
