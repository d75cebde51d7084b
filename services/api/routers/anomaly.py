"""API router: anomaly."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from greenload.anomaly import AnomalyDetector, anomaly_stats
from greenload.data_pipeline.schemas import AnomalyRecord, AnomalySummary, Sample, Sensitivity
from services.api.config import get_anomaly_config

router = APIRouter()


class AnomalyRequest(BaseModel):
    history: List[Sample]
    sensitivity: Optional[Sensitivity] = None
    window_size: Optional[int] = Field(None, description="Trailing window for the statistical and contextual detectors")
    flagged_only: bool = False


class AnomalyResponse(BaseModel):
    records: List[AnomalyRecord]
    summary: AnomalySummary


@router.post("", response_model=AnomalyResponse)
def post_anomalies(req: AnomalyRequest):
    try:
        detector = AnomalyDetector(sensitivity=req.sensitivity, config=get_anomaly_config())
        records = detector.detect(req.history, window_size=req.window_size)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    summary = anomaly_stats(records)
    if req.flagged_only:
        records = [r for r in records if r.is_anomaly]
    return AnomalyResponse(records=records, summary=summary)
