"""Forecasting: demand sub-forecasts combined by the ensemble.

Each function takes the calendar-featured history frame (see
``greenload.data_pipeline.history.history_to_frame``) and returns a single
next-period demand estimate in kWh.
"""
from __future__ import annotations

import math

import numpy as np
import pandas as pd

from greenload.utils.config import ForecastConfig

TARGET = "consumption_kwh"


def historical_pattern_forecast(df: pd.DataFrame, cfg: ForecastConfig) -> float:
    """Recency-weighted mean of past samples in the latest sample's (hour, weekday) slot."""
    latest = df.iloc[-1]
    hour, dow = int(latest["hour"]), int(latest["dayofweek"])

    similar = df.loc[(df["hour"] == hour) & (df["dayofweek"] == dow), TARGET].to_numpy(dtype=float)
    if len(similar) < cfg.pattern_min_matches:
        same_hour = df.loc[df["hour"] == hour, TARGET].to_numpy(dtype=float)
        return float(same_hour.mean()) if len(same_hour) else float(latest[TARGET])

    recent = similar[-cfg.pattern_lookback:]
    weights = cfg.pattern_decay ** np.arange(len(recent))
    return float(np.average(recent, weights=weights))


def trend_forecast(df: pd.DataFrame, cfg: ForecastConfig) -> float:
    """Least-squares line over the trailing window, extrapolated one step ahead."""
    y = df[TARGET].tail(cfg.trend_window).to_numpy(dtype=float)
    n = len(y)
    if n < 2:
        return float(y[-1])
    x = np.arange(n, dtype=float)
    slope, intercept = np.polyfit(x, y, 1)
    return float(intercept + slope * n)


def weather_similarity_forecast(df: pd.DataFrame, cfg: ForecastConfig) -> float:
    """Mean consumption of recent samples with weather close to the latest sample."""
    latest = df.iloc[-1]
    recent = df.tail(cfg.weather_window)
    mask = (
        ((recent["temperature_c"] - latest["temperature_c"]).abs() < cfg.temp_tolerance_c)
        & ((recent["irradiance_wm2"] - latest["irradiance_wm2"]).abs() < cfg.irradiance_tolerance_wm2)
    )
    if int(mask.sum()) < cfg.weather_min_matches:
        return float(latest[TARGET])
    return float(recent.loc[mask, TARGET].mean())


def projected_occupancy(hour: int, is_weekend: bool) -> float:
    """Sinusoidal occupancy profile: weekday 7-19 business day, weekend 9-17 reduced."""
    if not is_weekend and 7 <= hour <= 19:
        return min(1.0, 0.1 + 0.9 * math.sin(math.pi * (hour - 7) / 12))
    if is_weekend and 9 <= hour <= 17:
        return 0.3 + 0.2 * math.sin(math.pi * (hour - 9) / 8)
    return 0.0


def occupancy_forecast(df: pd.DataFrame, cfg: ForecastConfig) -> float:
    """Base load plus the occupancy-driven load for the upcoming hour."""
    latest = df.iloc[-1]
    next_hour = (int(latest["hour"]) + 1) % 24
    occupancy = projected_occupancy(next_hour, bool(latest["is_weekend"]))
    return cfg.base_load_kwh + occupancy * cfg.occupancy_load_kwh
