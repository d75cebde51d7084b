"""API router: optimize."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from greenload.data_pipeline.schemas import (
    FlexibleLoad,
    LoadShiftPlan,
    OptimizationResult,
    PriceResponse,
    TimeOfUse,
)
from greenload.optimizer import EnergyOptimizer, get_scenario, impact_summary
from services.api.config import get_optimization_config

router = APIRouter()


class OptimizeRequest(BaseModel):
    demand_kwh: float
    solar_available_kwh: float
    grid_price: Optional[float] = None
    battery_level_kwh: Optional[float] = None
    time_of_use: Optional[TimeOfUse] = None
    scenario: Optional[str] = Field(None, description="Named scenario; explicit fields override it")


class OptimizeResponse(BaseModel):
    result: OptimizationResult
    next_battery_level_kwh: float


class DayAheadRequest(BaseModel):
    demands_kwh: List[float]
    solar_forecasts_kwh: List[float]
    grid_prices: List[float]
    tou_schedule: Optional[List[TimeOfUse]] = None
    initial_battery_level_kwh: Optional[float] = None


class DayAheadResponse(BaseModel):
    periods: List[OptimizationResult]
    final_battery_level_kwh: float
    summary: Dict[str, Any]


class LoadShiftRequest(BaseModel):
    flexible_loads: Optional[List[FlexibleLoad]] = Field(None, description="Defaults to the configured loads")
    demands_kwh: List[float]
    solar_forecasts_kwh: List[float]
    grid_prices: List[float]


class PriceResponseRequest(BaseModel):
    current_price: float
    average_price: float
    demand_kwh: float
    solar_kwh: float
    battery_level_kwh: float


def _optimizer() -> EnergyOptimizer:
    return EnergyOptimizer.from_config(get_optimization_config())


@router.post("", response_model=OptimizeResponse)
def optimize(req: OptimizeRequest):
    cfg = get_optimization_config()
    optimizer = _optimizer()
    try:
        grid_price, tou, level = req.grid_price, req.time_of_use, req.battery_level_kwh
        if req.scenario is not None:
            preset = get_scenario(req.scenario, cfg.tariff)
            grid_price = preset.grid_price if grid_price is None else grid_price
            tou = preset.time_of_use if tou is None else tou
            level = preset.battery_level_kwh if level is None else level
        level = cfg.battery.initial_level_kwh if level is None else level

        result = optimizer.optimize(
            req.demand_kwh,
            req.solar_available_kwh,
            grid_price=grid_price,
            battery_level=level,
            tou_period=tou or "mid-peak",
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return OptimizeResponse(result=result, next_battery_level_kwh=optimizer.next_battery_level(level, result))


@router.post("/day-ahead", response_model=DayAheadResponse)
def optimize_day_ahead(req: DayAheadRequest):
    cfg = get_optimization_config()
    level = cfg.battery.initial_level_kwh if req.initial_battery_level_kwh is None else req.initial_battery_level_kwh
    try:
        plan = _optimizer().optimize_day_ahead(
            req.demands_kwh,
            req.solar_forecasts_kwh,
            req.grid_prices,
            tou_schedule=req.tou_schedule,
            initial_battery_level=level,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return DayAheadResponse(
        periods=plan.periods,
        final_battery_level_kwh=plan.final_battery_level_kwh,
        summary=impact_summary(plan.periods),
    )


@router.post("/load-shifting", response_model=LoadShiftPlan)
def optimize_load_shifting(req: LoadShiftRequest):
    loads = req.flexible_loads if req.flexible_loads is not None else get_optimization_config().flexible_loads
    try:
        return _optimizer().optimize_load_shifting(
            loads, req.demands_kwh, req.solar_forecasts_kwh, req.grid_prices
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/price-response", response_model=PriceResponse)
def price_response(req: PriceResponseRequest):
    try:
        return _optimizer().respond_to_price(
            req.current_price, req.average_price, req.demand_kwh, req.solar_kwh, req.battery_level_kwh
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
