"""
Data Pipeline: Pydantic Schemas for Samples and Engine Results.

This module defines the data contracts shared by the three engines:

1. **Sample**: one metered observation (consumption, weather, occupancy)
2. **ForecastResult**: next-period demand and solar estimate
3. **OptimizationResult**: merit-order dispatch of one period
4. **AnomalyRecord**: per-sample anomaly verdict

All models are frozen: a Sample never changes once created and results carry
no identity beyond their values. Optional fields are declared explicitly
with ``Optional[...]`` so that missing values are visible in the type.

Usage:
    >>> from greenload.data_pipeline.schemas import Sample
    >>> s = Sample.model_validate({"timestamp": "2024-01-01T08:00:00", "consumption_kwh": 31.2,
    ...                            "temperature_c": 12.0, "irradiance_wm2": 150.0,
    ...                            "wind_speed_ms": 3.1, "occupancy_fraction": 0.4})
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TimeOfUse = Literal["peak", "mid-peak", "off-peak"]
Severity = Literal["low", "medium", "high"]
AnomalyType = Literal["spike", "drop", "sustained", "pattern"]
Sensitivity = Literal["low", "medium", "high"]
PriceAction = Literal["use_battery", "charge_battery", "reduce_load", "maintain"]

SEVERITY_SCORES: Dict[str, int] = {"low": 1, "medium": 2, "high": 3}


class Sample(BaseModel):
    """
    A single building observation.

    Attributes:
        timestamp: ISO 8601 timestamp; wall-clock hour and weekday drive the
            calendar-based forecasts and baselines
        consumption_kwh: Metered consumption for the period (kWh)
        temperature_c: Outdoor temperature (°C)
        irradiance_wm2: Global horizontal irradiance (W/m²)
        wind_speed_ms: Wind speed (m/s)
        occupancy_fraction: Share of nominal occupancy, 0..1
        solar_generation_kwh: Measured PV output, when metered
    """
    timestamp: datetime = Field(..., description="ISO timestamp")
    consumption_kwh: float = Field(..., description="Consumption in kWh")
    temperature_c: float = Field(..., description="Outdoor temperature in °C")
    irradiance_wm2: float = Field(..., ge=0, description="Irradiance in W/m²")
    wind_speed_ms: float = Field(..., ge=0, description="Wind speed in m/s")
    occupancy_fraction: float = Field(..., ge=0, le=1, description="Occupancy fraction 0..1")
    solar_generation_kwh: Optional[float] = Field(None, ge=0, description="Measured solar generation in kWh")

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)


class UncertaintyBand(BaseModel):
    lower_kwh: float
    upper_kwh: float

    model_config = ConfigDict(frozen=True)


class ForecastResult(BaseModel):
    """Next-period demand and solar estimate."""
    next_period_demand_kwh: float = Field(..., ge=5)
    solar_available_kwh: float = Field(..., ge=0)
    confidence: float = Field(..., ge=0.65, le=0.98)
    horizon_hours: int = 1
    uncertainty_band: Optional[UncertaintyBand] = None

    model_config = ConfigDict(frozen=True)


class OptimizationResult(BaseModel):
    """Dispatch of one period across solar, battery and grid."""
    grid_kwh: float
    solar_kwh: float
    battery_discharge_kwh: float
    battery_charge_kwh: float
    excess_solar_kwh: float
    cost: float
    carbon_saved_kg: float
    renewable_pct: float = Field(..., ge=0, le=100)
    peak_reduction_pct: float = Field(..., ge=0, le=100)
    grid_stress_reduction_pct: float = Field(..., ge=0, le=100)
    time_of_use: TimeOfUse
    effective_price: float
    battery_level_kwh: Optional[float] = None

    model_config = ConfigDict(frozen=True)


class DayAheadPlan(BaseModel):
    periods: List[OptimizationResult]
    final_battery_level_kwh: float

    model_config = ConfigDict(frozen=True)


class FlexibleLoad(BaseModel):
    """A deferrable load that may run in any of ``allowed_hours``.

    ``default_hour`` is the slot the load runs in when left alone; it falls
    back to the first allowed hour and may lie outside the allowed window.
    """
    name: str
    kwh: float = Field(..., ge=0)
    allowed_hours: List[int] = Field(..., min_length=1)
    default_hour: Optional[int] = Field(None, ge=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("allowed_hours")
    @classmethod
    def _non_negative_hours(cls, value: List[int]) -> List[int]:
        if any(h < 0 for h in value):
            raise ValueError("allowed_hours must be non-negative period indices")
        return value

    @property
    def baseline_hour(self) -> int:
        return self.allowed_hours[0] if self.default_hour is None else self.default_hour


class ShiftedLoad(BaseModel):
    name: str
    original_hour: int
    optimal_hour: int
    savings: float

    model_config = ConfigDict(frozen=True)


class LoadShiftPlan(BaseModel):
    shifted_loads: List[ShiftedLoad]
    total_savings: float

    model_config = ConfigDict(frozen=True)


class PriceResponse(BaseModel):
    action: PriceAction
    recommendation: str
    potential_savings: float

    model_config = ConfigDict(frozen=True)


class AnomalyRecord(BaseModel):
    """Anomaly verdict for one scored sample."""
    timestamp: datetime
    value: float
    is_anomaly: bool
    severity: Severity
    type: Optional[AnomalyType] = None
    confidence: Optional[float] = Field(None, ge=0, le=1)

    model_config = ConfigDict(frozen=True)


class AnomalyTypeCounts(BaseModel):
    spike: int = 0
    drop: int = 0
    sustained: int = 0
    pattern: int = 0


class AnomalySummary(BaseModel):
    total: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    types: AnomalyTypeCounts = Field(default_factory=AnomalyTypeCounts)
