"""
Forecasting: Ensemble next-period demand and solar forecaster.

Four independent demand estimates are blended with fixed weights:

    demand = 0.35 * historical + 0.25 * trend + 0.25 * weather + 0.15 * occupancy

- historical: recency-weighted mean of the same (hour, weekday) slot
- trend: least-squares extrapolation of the last 24 samples
- weather: mean consumption of recent samples with similar weather
- occupancy: projected occupancy for the upcoming hour mapped to load

Solar availability comes from a separate persistence model
(``forecasting.solar``) and the confidence score from
``forecasting.confidence``. No model is trained: every call works directly
on the caller's history.

Usage:
    >>> from greenload.forecasting import Forecaster
    >>> result = Forecaster().forecast(history)  # history: list[Sample], >= 48 items
    >>> result.next_period_demand_kwh
"""
from __future__ import annotations

from typing import Optional, Sequence

import pandas as pd

from greenload.data_pipeline.history import history_to_frame
from greenload.data_pipeline.schemas import ForecastResult, Sample, UncertaintyBand
from greenload.forecasting.baselines import (
    historical_pattern_forecast,
    occupancy_forecast,
    trend_forecast,
    weather_similarity_forecast,
)
from greenload.forecasting.confidence import forecast_confidence
from greenload.forecasting.solar import forecast_solar_generation
from greenload.utils.config import ForecastConfig
from greenload.utils.logging import get_logger
from greenload.utils.rounding import round_kwh

log = get_logger(__name__)


class InsufficientHistoryError(ValueError):
    """Raised when the history is too short to forecast from."""

    def __init__(self, available: int, required: int):
        super().__init__(f"Need at least {required} samples to forecast, got {available}")
        self.available = available
        self.required = required


class Forecaster:
    def __init__(self, config: Optional[ForecastConfig] = None):
        self.config = config or ForecastConfig()

    def components(self, history: Sequence[Sample]) -> dict[str, float]:
        """Return the four raw sub-forecasts keyed by ensemble weight name."""
        self._check_history(history)
        return self._components(history_to_frame(history))

    def _components(self, df: pd.DataFrame) -> dict[str, float]:
        return {
            "historical": historical_pattern_forecast(df, self.config),
            "trend": trend_forecast(df, self.config),
            "weather": weather_similarity_forecast(df, self.config),
            "occupancy": occupancy_forecast(df, self.config),
        }

    def forecast(self, history: Sequence[Sample]) -> ForecastResult:
        cfg = self.config
        self._check_history(history)
        df = history_to_frame(history)
        parts = self._components(df)
        weights = cfg.weights.model_dump()
        demand = sum(weights[name] * value for name, value in parts.items())

        latest = df.iloc[-1]
        solar = forecast_solar_generation(
            float(latest["irradiance_wm2"]),
            float(latest["temperature_c"]),
            int(latest["hour"]),
            cfg.solar,
        )
        confidence = forecast_confidence(df, cfg)

        floor = cfg.demand_floor_kwh
        band = UncertaintyBand(
            lower_kwh=round_kwh(max(floor, min(parts.values()))),
            upper_kwh=round_kwh(max(floor, max(parts.values()))),
        )
        log.debug(
            "forecast components historical=%.2f trend=%.2f weather=%.2f occupancy=%.2f",
            parts["historical"], parts["trend"], parts["weather"], parts["occupancy"],
        )
        return ForecastResult(
            next_period_demand_kwh=max(floor, round_kwh(demand)),
            solar_available_kwh=max(0.0, round_kwh(solar)),
            confidence=round(confidence, 3),
            horizon_hours=1,
            uncertainty_band=band,
        )

    def _check_history(self, history: Sequence[Sample]) -> None:
        if len(history) < self.config.min_history:
            raise InsufficientHistoryError(len(history), self.config.min_history)
