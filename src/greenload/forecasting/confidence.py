"""Forecasting: confidence score for the ensemble estimate."""
from __future__ import annotations

import numpy as np
import pandas as pd

from greenload.utils.config import ForecastConfig

STABILITY_WEIGHT = 0.3
COMPLETENESS_WEIGHT = 0.2
CONSISTENCY_WEIGHT = 0.3
WEATHER_WEIGHT = 0.2

WEATHER_WINDOW = 6


def recent_variability(values: np.ndarray) -> float:
    """Mean absolute step change between consecutive values."""
    if len(values) < 2:
        return 0.0
    return float(np.mean(np.abs(np.diff(values))))


def weather_consistency(recent: pd.DataFrame) -> float:
    """1.0 for steady weather over the last few samples, falling towards 0."""
    if len(recent) < WEATHER_WINDOW:
        return 0.5
    tail = recent.tail(WEATHER_WINDOW)
    temp_change = float(np.mean(np.abs(np.diff(tail["temperature_c"].to_numpy(dtype=float)))))
    irr_change = float(np.mean(np.abs(np.diff(tail["irradiance_wm2"].to_numpy(dtype=float)))))
    temp_score = max(0.0, 1 - temp_change / 10)
    irr_score = max(0.0, 1 - irr_change / 500)
    return (temp_score + irr_score) / 2


def forecast_confidence(df: pd.DataFrame, cfg: ForecastConfig) -> float:
    """Weighted stability/completeness/consistency score clamped to the configured band."""
    recent = df.tail(cfg.min_history)
    values = recent["consumption_kwh"].to_numpy(dtype=float)

    mean = float(values.mean())
    std = float(values.std())
    stability = max(0.0, 1 - std / mean) if mean > 0 else 0.0
    completeness = min(1.0, len(recent) / cfg.min_history)
    consistency = 1 - recent_variability(values) / 100

    score = (
        stability * STABILITY_WEIGHT
        + completeness * COMPLETENESS_WEIGHT
        + consistency * CONSISTENCY_WEIGHT
        + weather_consistency(recent) * WEATHER_WEIGHT
    )
    return min(cfg.confidence_max, max(cfg.confidence_min, score))
