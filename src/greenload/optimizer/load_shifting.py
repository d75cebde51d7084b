"""Optimization: flexible load shifting advisor.

For each deferrable load, every allowed hour is priced at its marginal grid
cost (the part of demand plus load that solar cannot cover, times the
hour's price) and the cheapest hour is recommended. Savings are reported as
the signed difference to the load's default hour. When the default hour lies
outside the allowed window the recommendation can cost more than leaving the
load alone; that shows up as negative savings.
"""
from __future__ import annotations

from typing import Sequence

from greenload.data_pipeline.schemas import FlexibleLoad, LoadShiftPlan, ShiftedLoad
from greenload.utils.logging import get_logger
from greenload.utils.rounding import round_kwh

log = get_logger(__name__)


def marginal_load_cost(
    load_kwh: float,
    hour: int,
    demands: Sequence[float],
    solar_forecasts: Sequence[float],
    grid_prices: Sequence[float],
) -> float:
    grid_needed = max(0.0, demands[hour] + load_kwh - solar_forecasts[hour])
    return grid_needed * grid_prices[hour]


def optimize_load_shifting(
    flexible_loads: Sequence[FlexibleLoad],
    demands: Sequence[float],
    solar_forecasts: Sequence[float],
    grid_prices: Sequence[float],
) -> LoadShiftPlan:
    horizon = len(demands)
    if len(solar_forecasts) != horizon or len(grid_prices) != horizon:
        raise ValueError("demands, solar_forecasts and grid_prices must have equal length")

    shifted = []
    total = 0.0
    for load in flexible_loads:
        default_hour = load.baseline_hour
        candidates = [h for h in load.allowed_hours if h < horizon]
        if not candidates:
            log.warning("Load %s has no allowed hour inside the %d-period horizon", load.name, horizon)
            shifted.append(ShiftedLoad(name=load.name, original_hour=default_hour, optimal_hour=default_hour, savings=0.0))
            continue

        best_hour = candidates[0]
        best_cost = float("inf")
        for hour in candidates:
            cost = marginal_load_cost(load.kwh, hour, demands, solar_forecasts, grid_prices)
            # strict comparison: the earliest of equally cheap hours wins
            if cost < best_cost:
                best_cost = cost
                best_hour = hour

        if default_hour < horizon:
            original_cost = marginal_load_cost(load.kwh, default_hour, demands, solar_forecasts, grid_prices)
        else:
            original_cost = best_cost
        savings = original_cost - best_cost
        total += savings
        shifted.append(
            ShiftedLoad(
                name=load.name,
                original_hour=default_hour,
                optimal_hour=best_hour,
                savings=round_kwh(savings),
            )
        )

    return LoadShiftPlan(shifted_loads=shifted, total_savings=round_kwh(total))
