"""API router: monitor."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from greenload.data_pipeline.schemas import OptimizationResult, Sample, TimeOfUse
from greenload.forecasting import InsufficientHistoryError
from greenload.monitoring import BuildingMetrics, building_metrics
from greenload.pipeline.run import PipelineConfig, run_pipeline
from services.api.config import (
    get_alert_config,
    get_anomaly_config,
    get_forecast_config,
    get_optimization_config,
)

router = APIRouter()


class CycleRequest(BaseModel):
    history: List[Sample]
    scenario: Optional[str] = None
    grid_price: Optional[float] = None
    time_of_use: Optional[TimeOfUse] = None
    battery_level_kwh: Optional[float] = None


class MetricsRequest(BaseModel):
    history: List[Sample]
    optimization: Optional[OptimizationResult] = None
    battery_level_kwh: Optional[float] = None


def _pipeline_config() -> PipelineConfig:
    return PipelineConfig(
        forecast=get_forecast_config(),
        optimization=get_optimization_config(),
        anomaly=get_anomaly_config(),
        alerts=get_alert_config(),
    )


@router.post("")
def monitor_cycle(req: CycleRequest) -> Dict[str, Any]:
    """Forecast, dispatch, anomaly scan, alerts and metrics in one call."""
    try:
        return run_pipeline(
            req.history,
            _pipeline_config(),
            scenario=req.scenario,
            grid_price=req.grid_price,
            tou_period=req.time_of_use,
            battery_level=req.battery_level_kwh,
        )
    except InsufficientHistoryError as exc:
        raise HTTPException(
            status_code=422,
            detail={"error": "insufficient_history", "available": exc.available, "required": exc.required},
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/metrics", response_model=BuildingMetrics)
def metrics(req: MetricsRequest):
    opt_cfg = get_optimization_config()
    try:
        return building_metrics(
            req.history,
            optimization=req.optimization,
            floor_area_m2=get_alert_config().floor_area_m2,
            battery_level=req.battery_level_kwh,
            battery_capacity=opt_cfg.battery.capacity_kwh,
            carbon_intensity=opt_cfg.tariff.carbon_intensity_kg_per_kwh,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
