"""Monitoring: building performance metrics over the most recent day."""
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict

from greenload.data_pipeline.schemas import OptimizationResult, Sample
from greenload.utils.rounding import round_kwh, round_pct, round_price

METRICS_WINDOW = 24


class BuildingMetrics(BaseModel):
    total_consumption_kwh: float
    peak_demand_kwh: float
    load_factor: float
    energy_intensity_kwh_m2: Optional[float] = None
    carbon_footprint_kg: float
    cost_per_kwh: Optional[float] = None
    renewable_pct: float
    battery_utilization_pct: Optional[float] = None

    model_config = ConfigDict(frozen=True)


def building_metrics(
    history: Sequence[Sample],
    optimization: Optional[OptimizationResult] = None,
    floor_area_m2: Optional[float] = None,
    battery_level: Optional[float] = None,
    battery_capacity: Optional[float] = None,
    carbon_intensity: float = 0.8,
) -> BuildingMetrics:
    """Summarise the last 24 samples; optional inputs unlock the optional metrics."""
    if not history:
        raise ValueError("history is empty")
    window = history[-METRICS_WINDOW:]
    kwh = np.array([s.consumption_kwh for s in window], dtype=float)
    solar = np.array([s.solar_generation_kwh or 0.0 for s in window], dtype=float)

    total = float(kwh.sum())
    peak = float(kwh.max())
    load_factor = float(kwh.mean()) / peak if peak > 0 else 0.0
    non_solar = float(np.clip(kwh - solar, 0.0, None).sum())

    intensity = None
    if floor_area_m2 is not None and floor_area_m2 > 0:
        intensity = round_price(total / floor_area_m2)

    cost_per_kwh = None
    if optimization is not None:
        served = optimization.grid_kwh + optimization.solar_kwh + optimization.battery_discharge_kwh
        cost_per_kwh = round_price(optimization.cost / served) if served > 0 else 0.0

    utilization = None
    if battery_level is not None and battery_capacity:
        utilization = round_pct(battery_level / battery_capacity * 100)

    return BuildingMetrics(
        total_consumption_kwh=round_kwh(total),
        peak_demand_kwh=round_kwh(peak),
        load_factor=round_price(load_factor),
        energy_intensity_kwh_m2=intensity,
        carbon_footprint_kg=round_kwh(non_solar * carbon_intensity),
        cost_per_kwh=cost_per_kwh,
        renewable_pct=round_pct(float(solar.sum()) / total * 100) if total > 0 else 0.0,
        battery_utilization_pct=utilization,
    )
