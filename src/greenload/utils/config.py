"""Utilities: config validation models and helpers."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional, Type, TypeVar

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from greenload.data_pipeline.schemas import FlexibleLoad, Sensitivity, TimeOfUse

DEFAULT_CONFIG_DIR = "configs"

# Hour-of-day -> TOU period. Evening peak 17-21, overnight off-peak.
DEFAULT_TOU_SCHEDULE: List[TimeOfUse] = (
    ["off-peak"] * 7 + ["mid-peak"] * 10 + ["peak"] * 5 + ["off-peak"] * 2
)


class ForecastWeights(BaseModel):
    """Ensemble weights for the four demand sub-forecasts."""
    historical: float = 0.35
    trend: float = 0.25
    weather: float = 0.25
    occupancy: float = 0.15

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_sum(self) -> "ForecastWeights":
        total = self.historical + self.trend + self.weather + self.occupancy
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"forecast weights must sum to 1.0, got {total:.4f}")
        return self


class SolarPanelConfig(BaseModel):
    """Persistence solar model and PV array parameters."""
    panel_efficiency: float = Field(0.18, gt=0, le=1)
    panel_area_m2: float = Field(100.0, gt=0)
    clear_sky_irradiance_wm2: float = 800.0
    persistence_weight: float = Field(0.8, ge=0, le=1)
    cloud_threshold_wm2: float = 200.0
    cloud_damping: float = Field(0.7, ge=0, le=1)
    reference_temp_c: float = 25.0
    temp_coefficient: float = 0.004
    min_derating: float = 0.7
    daylight_start_hour: int = 6
    daylight_end_hour: int = 18

    model_config = ConfigDict(extra="allow")


class ForecastConfig(BaseModel):
    """Schema for configs/forecast.yaml."""
    min_history: int = Field(48, ge=1)
    weights: ForecastWeights = Field(default_factory=ForecastWeights)
    pattern_lookback: int = 10
    pattern_decay: float = 1.1
    pattern_min_matches: int = 3
    trend_window: int = 24
    weather_window: int = 48
    temp_tolerance_c: float = 3.0
    irradiance_tolerance_wm2: float = 100.0
    weather_min_matches: int = 3
    base_load_kwh: float = 25.0
    occupancy_load_kwh: float = 15.0
    demand_floor_kwh: float = 5.0
    confidence_min: float = 0.65
    confidence_max: float = 0.98
    solar: SolarPanelConfig = Field(default_factory=SolarPanelConfig)

    model_config = ConfigDict(extra="allow")


class BatteryConfig(BaseModel):
    """Battery storage parameters (construction-time)."""
    capacity_kwh: float = Field(50.0, gt=0)
    round_trip_efficiency: float = Field(0.95, gt=0, le=1)
    initial_level_kwh: float = Field(25.0, ge=0)

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="after")
    def _check_initial_level(self) -> "BatteryConfig":
        if self.initial_level_kwh > self.capacity_kwh:
            raise ValueError("initial_level_kwh cannot exceed capacity_kwh")
        return self


class ScenarioConfig(BaseModel):
    """Named operating scenario (grid price, TOU period, battery level)."""
    grid_price: float = Field(..., ge=0)
    time_of_use: TimeOfUse
    battery_level_kwh: float = Field(..., ge=0)


def _default_scenarios() -> Dict[str, ScenarioConfig]:
    return {
        "optimal": ScenarioConfig(grid_price=0.08, time_of_use="off-peak", battery_level_kwh=45),
        "standard": ScenarioConfig(grid_price=0.12, time_of_use="mid-peak", battery_level_kwh=25),
        "peak_crisis": ScenarioConfig(grid_price=0.25, time_of_use="peak", battery_level_kwh=10),
        "night_charge": ScenarioConfig(grid_price=0.06, time_of_use="off-peak", battery_level_kwh=5),
    }


class TariffConfig(BaseModel):
    """Time-of-use pricing and dispatch thresholds."""
    base_grid_price: float = Field(0.12, ge=0)
    multipliers: Dict[TimeOfUse, float] = Field(
        default_factory=lambda: {"peak": 1.8, "mid-peak": 1.0, "off-peak": 0.6}
    )
    discharge_price_threshold: float = 0.15
    peak_threshold_kwh: float = 40.0
    carbon_intensity_kg_per_kwh: float = 0.8
    schedule: List[TimeOfUse] = Field(default_factory=lambda: list(DEFAULT_TOU_SCHEDULE))
    scenarios: Dict[str, ScenarioConfig] = Field(default_factory=_default_scenarios)

    model_config = ConfigDict(extra="allow")

    @field_validator("schedule")
    @classmethod
    def _check_schedule(cls, value: List[TimeOfUse]) -> List[TimeOfUse]:
        if len(value) != 24:
            raise ValueError(f"schedule must list 24 hourly periods, got {len(value)}")
        return value

    @field_validator("multipliers")
    @classmethod
    def _check_multipliers(cls, value: Dict[TimeOfUse, float]) -> Dict[TimeOfUse, float]:
        missing = {"peak", "mid-peak", "off-peak"} - set(value)
        if missing:
            raise ValueError(f"multipliers missing periods: {sorted(missing)}")
        return value


class OptimizationConfig(BaseModel):
    """Schema for configs/optimization.yaml."""
    battery: BatteryConfig = Field(default_factory=BatteryConfig)
    tariff: TariffConfig = Field(default_factory=TariffConfig)
    flexible_loads: List[FlexibleLoad] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")


class ZCutoffs(BaseModel):
    """Statistical z-score cutoffs, checked in high -> medium -> low order."""
    high: float
    medium: float
    low: float


def _default_z_profiles() -> Dict[Sensitivity, ZCutoffs]:
    return {
        "low": ZCutoffs(high=2.0, medium=2.5, low=3.0),
        "medium": ZCutoffs(high=1.8, medium=2.2, low=2.8),
        "high": ZCutoffs(high=1.5, medium=2.0, low=2.5),
    }


class SeverityThresholds(BaseModel):
    high: float
    medium: float
    low: float = 0.0


class ContextualConfig(BaseModel):
    temp_tolerance_c: float = 5.0
    occupancy_tolerance: float = 0.2
    business_start_hour: int = 8
    business_end_hour: int = 18
    min_matches: int = 3
    iqr_multiplier: float = 1.5
    severity: SeverityThresholds = Field(
        default_factory=lambda: SeverityThresholds(high=0.4, medium=0.25)
    )


class EquipmentConfig(BaseModel):
    window: int = Field(6, ge=1)
    min_samples: int = 3
    drop_ratio: float = 0.4
    spike_ratio: float = 2.0
    sustained_high_ratio: float = 1.3
    sustained_low_ratio: float = 0.7


class AnomalyConfig(BaseModel):
    """Schema for configs/anomaly.yaml."""
    sensitivity: Sensitivity = "medium"
    window_size: int = Field(48, ge=1)
    min_start_index: int = 24
    z_profiles: Dict[Sensitivity, ZCutoffs] = Field(default_factory=_default_z_profiles)
    std_epsilon: float = 0.001
    pattern: SeverityThresholds = Field(
        default_factory=lambda: SeverityThresholds(high=0.5, medium=0.3, low=0.2)
    )
    contextual: ContextualConfig = Field(default_factory=ContextualConfig)
    equipment: EquipmentConfig = Field(default_factory=EquipmentConfig)
    normal_confidence: float = 0.95
    max_confidence: float = 0.98

    model_config = ConfigDict(extra="allow")


class AlertThresholds(BaseModel):
    """Caller-owned thresholds for system alerts."""
    high_demand_kwh: float = 60.0
    low_confidence: float = 0.7
    battery_critical_kwh: float = 10.0
    battery_full_kwh: float = 45.0
    excess_solar_kwh: float = 5.0
    peak_grid_kwh: float = 20.0
    anomaly_lookback_hours: float = 1.0


class AlertConfig(BaseModel):
    """Schema for configs/alerts.yaml."""
    thresholds: AlertThresholds = Field(default_factory=AlertThresholds)
    floor_area_m2: Optional[float] = None

    model_config = ConfigDict(extra="allow")


CONFIG_MODELS: dict[str, Type[BaseModel]] = {
    "forecast.yaml": ForecastConfig,
    "optimization.yaml": OptimizationConfig,
    "anomaly.yaml": AnomalyConfig,
    "alerts.yaml": AlertConfig,
}

ModelT = TypeVar("ModelT", bound=BaseModel)


def _load_yaml(path: Path) -> dict:
    """Read a YAML file into a dict, defaulting to empty."""
    payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    return payload or {}


def config_dir(path: str | Path | None = None) -> Path:
    return Path(path or os.getenv("GREENLOAD_CONFIG_DIR", DEFAULT_CONFIG_DIR))


def load_config(name: str, directory: str | Path | None = None) -> BaseModel:
    """Load and validate a registered config file; defaults when the file is absent."""
    model = CONFIG_MODELS.get(name)
    if model is None:
        raise KeyError(f"No config schema registered for {name}")
    path = config_dir(directory) / name
    if not path.exists():
        return model()
    return model.model_validate(_load_yaml(path))


def load_forecast_config(directory: str | Path | None = None) -> ForecastConfig:
    return load_config("forecast.yaml", directory)


def load_optimization_config(directory: str | Path | None = None) -> OptimizationConfig:
    return load_config("optimization.yaml", directory)


def load_anomaly_config(directory: str | Path | None = None) -> AnomalyConfig:
    return load_config("anomaly.yaml", directory)


def load_alert_config(directory: str | Path | None = None) -> AlertConfig:
    return load_config("alerts.yaml", directory)


def validate_config(path: Path) -> None:
    """Validate a config file if a schema is registered."""
    model = CONFIG_MODELS.get(path.name)
    if not model:
        return
    payload = _load_yaml(path)
    model.model_validate(payload)
