"""API router: forecast."""
from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from greenload.data_pipeline.schemas import ForecastResult, Sample
from greenload.forecasting import Forecaster, InsufficientHistoryError
from services.api.config import get_forecast_config

router = APIRouter()


class ForecastRequest(BaseModel):
    history: List[Sample] = Field(..., description="Samples ordered by timestamp, oldest first")
    include_components: bool = False


class ForecastResponse(BaseModel):
    forecast: ForecastResult
    components: Optional[Dict[str, float]] = None


@router.post("", response_model=ForecastResponse)
def post_forecast(req: ForecastRequest):
    forecaster = Forecaster(get_forecast_config())
    try:
        result = forecaster.forecast(req.history)
        components = forecaster.components(req.history) if req.include_components else None
    except InsufficientHistoryError as exc:
        raise HTTPException(
            status_code=422,
            detail={"error": "insufficient_history", "available": exc.available, "required": exc.required},
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ForecastResponse(forecast=result, components=components)
