"""Serving configuration helpers for the API layer."""
from __future__ import annotations

from functools import lru_cache

from greenload.utils.config import (
    AlertConfig,
    AnomalyConfig,
    ForecastConfig,
    OptimizationConfig,
    load_alert_config,
    load_anomaly_config,
    load_forecast_config,
    load_optimization_config,
)


@lru_cache(maxsize=1)
def get_forecast_config() -> ForecastConfig:
    return load_forecast_config()


@lru_cache(maxsize=1)
def get_optimization_config() -> OptimizationConfig:
    return load_optimization_config()


@lru_cache(maxsize=1)
def get_anomaly_config() -> AnomalyConfig:
    return load_anomaly_config()


@lru_cache(maxsize=1)
def get_alert_config() -> AlertConfig:
    return load_alert_config()


def clear_config_cache() -> None:
    """Forget cached configs, e.g. after ``GREENLOAD_CONFIG_DIR`` changes."""
    for loader in (get_forecast_config, get_optimization_config, get_anomaly_config, get_alert_config):
        loader.cache_clear()
