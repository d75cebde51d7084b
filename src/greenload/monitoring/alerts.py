"""
Monitoring: System Alerts for Operators.

Turns one pipeline cycle (forecast, dispatch and anomaly scan) into a short
list of operator-facing alerts. The rules are pure: every threshold comes
from the caller's :class:`AlertThresholds` (``configs/alerts.yaml``) and the
anomaly look-back is measured from an explicit reference time, so the same
inputs always yield the same alerts.

Alert codes:
    - ``high_demand``: forecast demand above the configured ceiling
    - ``low_confidence``: forecast confidence below the floor
    - ``battery_critical`` / ``battery_full``: battery state of charge
    - ``peak_grid_usage``: heavy grid import while the tariff is at peak
    - ``anomalies_detected``: recent high-severity anomalies

Usage:
    >>> from greenload.monitoring.alerts import build_system_alerts
    >>> alerts = build_system_alerts(forecast, optimization, records, battery_level=32.0)
    >>> [a.code for a in alerts]
    ['high_demand']
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from greenload.data_pipeline.schemas import AnomalyRecord, ForecastResult, OptimizationResult
from greenload.utils.config import AlertThresholds
from greenload.utils.logging import get_logger

log = get_logger(__name__)

AlertLevel = Literal["info", "warning", "critical"]


class SystemAlert(BaseModel):
    code: str
    level: AlertLevel
    message: str

    model_config = ConfigDict(frozen=True)


def recent_high_severity(
    records: Sequence[AnomalyRecord],
    lookback_hours: float,
    reference_time: Optional[datetime] = None,
) -> List[AnomalyRecord]:
    """High-severity anomalies strictly newer than ``reference_time - lookback_hours``."""
    if not records:
        return []
    if reference_time is None:
        reference_time = max(r.timestamp for r in records)
    cutoff = reference_time - timedelta(hours=lookback_hours)
    return [r for r in records if r.is_anomaly and r.severity == "high" and r.timestamp > cutoff]


def build_system_alerts(
    forecast: ForecastResult,
    optimization: OptimizationResult,
    anomalies: Sequence[AnomalyRecord],
    battery_level: float,
    thresholds: Optional[AlertThresholds] = None,
    reference_time: Optional[datetime] = None,
) -> List[SystemAlert]:
    """
    Evaluate the alert rules for one cycle.

    Args:
        forecast: Result of the forecaster for the next period
        optimization: Dispatch computed for the current period
        anomalies: Records from the anomaly scan
        battery_level: Battery state of charge (kWh) the dispatch started from
        thresholds: Alert limits; defaults match ``configs/alerts.yaml``
        reference_time: "Now" for the anomaly look-back; defaults to the
            newest anomaly record

    Returns:
        Alerts in rule order; an empty list when everything is nominal.
    """
    t = thresholds or AlertThresholds()
    alerts: List[SystemAlert] = []

    if forecast.next_period_demand_kwh > t.high_demand_kwh:
        alerts.append(SystemAlert(code="high_demand", level="warning",
                                  message="High demand forecast - consider load shifting"))

    if forecast.confidence < t.low_confidence:
        alerts.append(SystemAlert(code="low_confidence", level="info",
                                  message="Low forecast confidence - weather conditions changing"))

    if battery_level < t.battery_critical_kwh:
        alerts.append(SystemAlert(code="battery_critical", level="critical",
                                  message="Battery level critically low"))
    elif battery_level > t.battery_full_kwh and optimization.excess_solar_kwh > t.excess_solar_kwh:
        alerts.append(SystemAlert(code="battery_full", level="info",
                                  message="Battery full - excess solar available for grid export"))

    if optimization.time_of_use == "peak" and optimization.grid_kwh > t.peak_grid_kwh:
        alerts.append(SystemAlert(code="peak_grid_usage", level="warning",
                                  message="High grid usage during peak hours - consider battery discharge"))

    recent = recent_high_severity(anomalies, t.anomaly_lookback_hours, reference_time)
    if recent:
        alerts.append(SystemAlert(code="anomalies_detected", level="critical",
                                  message=f"{len(recent)} high-severity anomalies detected"))

    if alerts:
        codes = [a.code for a in alerts]
        log.warning("Raised %d system alert(s): %s", len(alerts), ", ".join(codes), extra={"alert_codes": codes})
    return alerts
