"""
Forecasting: next-hour solar generation.

A persistence model blended with a clear-sky time-of-day profile:

    irradiance = w * I_now + (1 - w) * I_clear * sin(pi * (h - 6) / 12)

where ``h`` is the upcoming hour. Short-term cloud cover tends to persist, so
the estimate is damped when the current irradiance is already low. The
irradiance is converted to kWh with a fixed PV array (efficiency × area) and
a linear temperature derating above the reference cell temperature.
"""
from __future__ import annotations

import math

from greenload.utils.config import SolarPanelConfig


def temperature_derating(temperature_c: float, cfg: SolarPanelConfig) -> float:
    return max(cfg.min_derating, 1 - (temperature_c - cfg.reference_temp_c) * cfg.temp_coefficient)


def predicted_irradiance(current_irradiance: float, next_hour: int, cfg: SolarPanelConfig) -> float:
    """Irradiance (W/m²) expected for ``next_hour``; 0 outside daylight hours."""
    if next_hour < cfg.daylight_start_hour or next_hour > cfg.daylight_end_hour:
        return 0.0
    span = cfg.daylight_end_hour - cfg.daylight_start_hour
    time_of_day = math.sin(math.pi * (next_hour - cfg.daylight_start_hour) / span)
    irradiance = (
        current_irradiance * cfg.persistence_weight
        + cfg.clear_sky_irradiance_wm2 * time_of_day * (1 - cfg.persistence_weight)
    )
    if current_irradiance < cfg.cloud_threshold_wm2:
        irradiance *= cfg.cloud_damping
    return irradiance


def forecast_solar_generation(
    current_irradiance: float,
    temperature_c: float,
    current_hour: int,
    cfg: SolarPanelConfig,
) -> float:
    """PV output (kWh) for the hour following ``current_hour``."""
    next_hour = (current_hour + 1) % 24
    irradiance = predicted_irradiance(current_irradiance, next_hour, cfg)
    if irradiance == 0.0:
        return 0.0
    return (irradiance / 1000) * cfg.panel_area_m2 * cfg.panel_efficiency * temperature_derating(temperature_c, cfg)
