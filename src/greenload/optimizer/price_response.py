"""Optimization: real-time price response advisor."""
from __future__ import annotations

from greenload.data_pipeline.schemas import PriceResponse
from greenload.utils.rounding import round_kwh

HIGH_PRICE_RATIO = 1.5
LOW_PRICE_RATIO = 0.7
ELEVATED_PRICE_RATIO = 1.2
MIN_BATTERY_KWH = 10.0

# heuristic share of the avoided cost credited to each action
BATTERY_SAVINGS_FACTOR = 0.7
LOAD_REDUCTION_FACTOR = 0.1


def respond_to_price(
    current_price: float,
    average_price: float,
    demand: float,
    solar: float,
    battery_level: float,
) -> PriceResponse:
    """Classify the current price against its average and recommend an action."""
    if average_price <= 0:
        raise ValueError(f"average_price must be > 0, got {average_price}")
    ratio = current_price / average_price

    if ratio > HIGH_PRICE_RATIO and battery_level > MIN_BATTERY_KWH:
        return PriceResponse(
            action="use_battery",
            recommendation="Grid prices are high. Using battery storage to reduce costs.",
            potential_savings=round_kwh(demand * current_price * BATTERY_SAVINGS_FACTOR),
        )
    if ratio < LOW_PRICE_RATIO and solar > demand:
        return PriceResponse(
            action="charge_battery",
            recommendation="Low grid prices and excess solar. Charging battery for later use.",
            potential_savings=round_kwh((solar - demand) * (average_price - current_price)),
        )
    if ratio > ELEVATED_PRICE_RATIO:
        return PriceResponse(
            action="reduce_load",
            recommendation="Consider reducing non-essential loads during peak pricing.",
            potential_savings=round_kwh(demand * LOAD_REDUCTION_FACTOR * current_price),
        )
    return PriceResponse(
        action="maintain",
        recommendation="Current pricing is optimal. No action needed.",
        potential_savings=0.0,
    )
