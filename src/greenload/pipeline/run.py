"""Pipeline orchestration: run one forecast -> dispatch -> detection cycle.

Steps run strictly in sequence; the battery level is read once at the start
and the updated level is handed back in the report, never mutated mid-run.

Usage:
    python -m greenload.pipeline.run --history data/building.csv --scenario peak_crisis
    python -m greenload.pipeline.run --history data/building.csv --grid-price 0.2 --tou peak \
        --battery-level 30 --out reports/pipeline_report.json
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Optional, Sequence

from greenload.anomaly import AnomalyDetector, anomaly_stats
from greenload.data_pipeline.history import load_history
from greenload.data_pipeline.schemas import Sample
from greenload.forecasting import Forecaster
from greenload.monitoring import build_system_alerts, building_metrics, write_pipeline_report
from greenload.optimizer import EnergyOptimizer, get_scenario, period_for_hour
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
from greenload.utils.logging import setup_logging

log = logging.getLogger("greenload.pipeline")


@dataclass
class PipelineConfig:
    forecast: ForecastConfig = field(default_factory=ForecastConfig)
    optimization: OptimizationConfig = field(default_factory=OptimizationConfig)
    anomaly: AnomalyConfig = field(default_factory=AnomalyConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)

    @classmethod
    def load(cls, directory: str | Path | None = None) -> "PipelineConfig":
        return cls(
            forecast=load_forecast_config(directory),
            optimization=load_optimization_config(directory),
            anomaly=load_anomaly_config(directory),
            alerts=load_alert_config(directory),
        )


def run_pipeline(
    history: Sequence[Sample],
    cfg: Optional[PipelineConfig] = None,
    scenario: Optional[str] = None,
    grid_price: Optional[float] = None,
    tou_period: Optional[str] = None,
    battery_level: Optional[float] = None,
) -> dict[str, Any]:
    """Run the full cycle on ``history`` and return a JSON-ready report payload.

    Explicit ``grid_price`` / ``tou_period`` / ``battery_level`` override the
    named ``scenario``; anything still unset falls back to the tariff base
    price, the TOU period of the forecast hour and the configured initial
    battery level.
    """
    cfg = cfg or PipelineConfig()
    tariff = cfg.optimization.tariff

    if scenario is not None:
        preset = get_scenario(scenario, tariff)
        grid_price = preset.grid_price if grid_price is None else grid_price
        tou_period = preset.time_of_use if tou_period is None else tou_period
        battery_level = preset.battery_level_kwh if battery_level is None else battery_level

    forecast = Forecaster(cfg.forecast).forecast(history)
    log.info("Forecast: demand=%.2f kWh solar=%.2f kWh confidence=%.3f",
             forecast.next_period_demand_kwh, forecast.solar_available_kwh, forecast.confidence)

    optimizer = EnergyOptimizer.from_config(cfg.optimization)
    if grid_price is None:
        grid_price = tariff.base_grid_price
    if tou_period is None:
        tou_period = period_for_hour(history[-1].timestamp.hour + 1, tariff)
    if battery_level is None:
        battery_level = cfg.optimization.battery.initial_level_kwh

    dispatch = optimizer.optimize(
        forecast.next_period_demand_kwh,
        forecast.solar_available_kwh,
        grid_price=grid_price,
        battery_level=battery_level,
        tou_period=tou_period,
    )
    next_level = optimizer.next_battery_level(battery_level, dispatch)

    records = AnomalyDetector(config=cfg.anomaly).detect(history)
    summary = anomaly_stats(records)

    alerts = build_system_alerts(forecast, dispatch, records, battery_level, cfg.alerts.thresholds)
    metrics = building_metrics(
        history,
        optimization=dispatch,
        floor_area_m2=cfg.alerts.floor_area_m2,
        battery_level=next_level,
        battery_capacity=optimizer.battery_capacity,
        carbon_intensity=tariff.carbon_intensity_kg_per_kwh,
    )

    forecast_time = history[-1].timestamp + timedelta(hours=forecast.horizon_hours)
    return {
        "generated_at": datetime.now().isoformat(),
        "samples": len(history),
        "forecast_for": forecast_time.isoformat(),
        "forecast": forecast.model_dump(mode="json"),
        "dispatch": dispatch.model_dump(mode="json"),
        "battery_level_kwh": {"start": battery_level, "end": next_level},
        "anomalies": {
            "summary": summary.model_dump(mode="json"),
            "flagged": [r.model_dump(mode="json") for r in records if r.is_anomaly],
        },
        "alerts": [a.model_dump(mode="json") for a in alerts],
        "metrics": metrics.model_dump(mode="json"),
    }


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="GreenLoad forecasting, dispatch and anomaly cycle")
    parser.add_argument("--history", required=True, help="CSV/JSON/parquet history of building samples")
    parser.add_argument("--config-dir", default=None, help="Directory holding forecast/optimization/anomaly/alerts YAML")
    parser.add_argument("--scenario", default=None, help="Named tariff scenario from optimization.yaml")
    parser.add_argument("--grid-price", type=float, default=None, help="Base grid price ($/kWh)")
    parser.add_argument("--tou", default=None, choices=["peak", "mid-peak", "off-peak"], help="Time-of-use period")
    parser.add_argument("--battery-level", type=float, default=None, help="Battery state of charge (kWh)")
    parser.add_argument("--out", default="reports/pipeline_report.json", help="Report path (.json or .md)")
    args = parser.parse_args(argv)

    setup_logging()

    cfg = PipelineConfig.load(args.config_dir)
    history = load_history(args.history)
    payload = run_pipeline(
        history,
        cfg,
        scenario=args.scenario,
        grid_price=args.grid_price,
        tou_period=args.tou,
        battery_level=args.battery_level,
    )
    out = write_pipeline_report(payload, args.out)
    log.info("Pipeline complete: %d alert(s), report written to %s", len(payload["alerts"]), out)


if __name__ == "__main__":
    main()
