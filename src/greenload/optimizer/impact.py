"""
Optimization: Impact metrics for a dispatch decision.

Per-period metrics derived from a merit-order dispatch:

- renewable share: portion of demand met by solar plus battery discharge
- peak reduction: how far renewables pulled a peak-sized demand below the
  peak threshold
- grid stress reduction: share of demand not drawn from the grid

``impact_summary`` aggregates a sequence of periods (e.g. a day-ahead plan)
for reports and the API.
"""
from __future__ import annotations

from typing import Any, Dict, Sequence

from greenload.data_pipeline.schemas import OptimizationResult


def renewable_pct(demand: float, solar_used: float, battery_discharge: float) -> float:
    if demand <= 0:
        return 0.0
    return (solar_used + battery_discharge) / demand * 100.0


def peak_reduction_pct(demand: float, solar_used: float, battery_discharge: float, threshold: float) -> float:
    """Non-zero only when demand exceeds the threshold and renewables bring it back under."""
    net_demand = demand - solar_used - battery_discharge
    if demand > threshold and net_demand < threshold:
        return (demand - net_demand) / demand * 100.0
    return 0.0


def grid_stress_reduction_pct(grid_kwh: float, demand: float) -> float:
    if demand <= 0:
        return 0.0
    return (1 - grid_kwh / demand) * 100.0


def impact_summary(periods: Sequence[OptimizationResult]) -> Dict[str, Any]:
    """Aggregate cost, energy and carbon over a sequence of dispatch periods.

    Returns:
        Dictionary containing:
        - total_cost: Sum of per-period grid cost
        - grid_kwh / solar_kwh / battery_discharge_kwh: Energy served by source
        - carbon_saved_kg: Sum of avoided emissions
        - renewable_pct: Energy-weighted renewable share (None when no demand)
    """
    grid = sum(p.grid_kwh for p in periods)
    solar = sum(p.solar_kwh for p in periods)
    discharge = sum(p.battery_discharge_kwh for p in periods)
    served = grid + solar + discharge
    return {
        "periods": len(periods),
        "total_cost": round(sum(p.cost for p in periods), 2),
        "grid_kwh": round(grid, 2),
        "solar_kwh": round(solar, 2),
        "battery_discharge_kwh": round(discharge, 2),
        "carbon_saved_kg": round(sum(p.carbon_saved_kg for p in periods), 2),
        "renewable_pct": round((solar + discharge) / served * 100.0, 1) if served > 0 else None,
    }
