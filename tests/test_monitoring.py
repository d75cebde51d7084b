"""
Tests for Monitoring: System Alerts and Building Metrics.

Alert rules are evaluated on hand-built dispatch results so each rule can
be toggled in isolation; metrics are checked on a flat 24-hour history.
"""
import json
from datetime import datetime, timedelta

import pytest

from conftest import make_history
from greenload.data_pipeline.schemas import AnomalyRecord, ForecastResult
from greenload.monitoring import build_system_alerts, building_metrics, write_pipeline_report
from greenload.monitoring.alerts import recent_high_severity
from greenload.optimizer import EnergyOptimizer
from greenload.utils.config import AlertThresholds

NOW = datetime(2024, 1, 3, 12, 0)


def _forecast(demand=30.0, confidence=0.9):
    return ForecastResult(next_period_demand_kwh=demand, solar_available_kwh=0.0, confidence=confidence)


def _codes(alerts):
    return [a.code for a in alerts]


def test_nominal_cycle_has_no_alerts():
    dispatch = EnergyOptimizer().optimize(30, 0, battery_level=25, tou_period="mid-peak")

    assert build_system_alerts(_forecast(), dispatch, [], battery_level=25) == []


def test_high_demand_and_low_confidence():
    dispatch = EnergyOptimizer().optimize(65, 0, battery_level=25, tou_period="mid-peak")

    alerts = build_system_alerts(_forecast(demand=65, confidence=0.68), dispatch, [], battery_level=25)

    assert _codes(alerts) == ["high_demand", "low_confidence"]
    assert [a.level for a in alerts] == ["warning", "info"]


def test_battery_critical_and_peak_grid_usage():
    dispatch = EnergyOptimizer().optimize(70, 0, battery_level=5, tou_period="peak")

    alerts = build_system_alerts(_forecast(demand=70), dispatch, [], battery_level=5)

    assert "battery_critical" in _codes(alerts)
    assert "peak_grid_usage" in _codes(alerts)
    assert dispatch.grid_kwh == 65.0


def test_battery_full_needs_excess_solar():
    optimizer = EnergyOptimizer()
    sunny = optimizer.optimize(10, 30, battery_level=48, tou_period="mid-peak")
    cloudy = optimizer.optimize(10, 10, battery_level=48, tou_period="mid-peak")

    assert "battery_full" in _codes(build_system_alerts(_forecast(), sunny, [], battery_level=48))
    assert build_system_alerts(_forecast(), cloudy, [], battery_level=48) == []


def test_recent_high_severity_anomalies_are_counted():
    records = [
        AnomalyRecord(timestamp=NOW - timedelta(minutes=30), value=90.0, is_anomaly=True,
                      severity="high", type="spike", confidence=0.95),
        AnomalyRecord(timestamp=NOW - timedelta(hours=2), value=90.0, is_anomaly=True,
                      severity="high", type="spike", confidence=0.95),
        AnomalyRecord(timestamp=NOW, value=40.0, is_anomaly=True,
                      severity="medium", type="pattern", confidence=0.8),
    ]
    dispatch = EnergyOptimizer().optimize(30, 0, battery_level=25, tou_period="mid-peak")

    alerts = build_system_alerts(_forecast(), dispatch, records, battery_level=25)

    assert _codes(alerts) == ["anomalies_detected"]
    assert alerts[0].level == "critical"
    assert alerts[0].message.startswith("1 high-severity")
    # a wider window picks up the older spike too
    assert len(recent_high_severity(records, lookback_hours=3, reference_time=NOW)) == 2


def test_thresholds_are_caller_owned():
    dispatch = EnergyOptimizer().optimize(30, 0, battery_level=25, tou_period="mid-peak")
    strict = AlertThresholds(high_demand_kwh=20.0, battery_critical_kwh=30.0)

    alerts = build_system_alerts(_forecast(), dispatch, [], battery_level=25, thresholds=strict)

    assert _codes(alerts) == ["high_demand", "battery_critical"]


def test_building_metrics_on_flat_day():
    history = make_history(30, consumption=lambda i, ts: 10.0, solar=lambda i, ts: 2.0)

    metrics = building_metrics(history, floor_area_m2=100.0, battery_level=25.0, battery_capacity=50.0)

    assert metrics.total_consumption_kwh == 240.0
    assert metrics.peak_demand_kwh == 10.0
    assert metrics.load_factor == 1.0
    assert metrics.energy_intensity_kwh_m2 == pytest.approx(2.4)
    assert metrics.carbon_footprint_kg == pytest.approx(153.6)
    assert metrics.renewable_pct == 20.0
    assert metrics.battery_utilization_pct == 50.0
    assert metrics.cost_per_kwh is None


def test_building_metrics_cost_per_kwh():
    history = make_history(24, consumption=lambda i, ts: 40.0)
    dispatch = EnergyOptimizer().optimize(40, 0, grid_price=0.12, battery_level=25, tou_period="off-peak")

    metrics = building_metrics(history, optimization=dispatch)

    assert metrics.cost_per_kwh == pytest.approx(0.072)
    assert metrics.energy_intensity_kwh_m2 is None
    assert metrics.battery_utilization_pct is None


def test_building_metrics_requires_history():
    with pytest.raises(ValueError):
        building_metrics([])


def test_write_pipeline_report(tmp_path):
    payload = {"alerts": [], "generated_at": NOW}

    json_path = write_pipeline_report(payload, tmp_path / "out" / "report.json")
    md_path = write_pipeline_report(payload, tmp_path / "report.md")

    assert json.loads(json_path.read_text(encoding="utf-8"))["alerts"] == []
    assert md_path.read_text(encoding="utf-8").startswith("# Pipeline Report")
