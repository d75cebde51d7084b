"""
Tests for the end-to-end pipeline cycle and its CLI.

Running Tests:
    pytest tests/test_pipeline_run.py -v

See Also:
    - src/greenload/pipeline/run.py: The module being tested
"""
import json

import pandas as pd
import pytest

from conftest import flat_history
from greenload.forecasting import InsufficientHistoryError
from greenload.pipeline.run import PipelineConfig, main, run_pipeline


def _write_csv(history, path):
    pd.DataFrame([s.model_dump(mode="json") for s in history]).to_csv(path, index=False)


def test_run_pipeline_payload(week_history):
    payload = run_pipeline(week_history)

    assert payload["samples"] == 168
    assert payload["forecast"]["next_period_demand_kwh"] >= 5.0
    assert payload["dispatch"]["time_of_use"] == "off-peak"  # forecast hour is midnight
    assert payload["battery_level_kwh"]["start"] == 25.0
    assert 0.0 <= payload["battery_level_kwh"]["end"] <= 50.0
    assert payload["anomalies"]["summary"]["total"] == len(payload["anomalies"]["flagged"])
    assert payload["metrics"]["peak_demand_kwh"] > 0
    json.dumps(payload)


def test_scenario_sets_price_period_and_battery(week_history):
    payload = run_pipeline(week_history, PipelineConfig(), scenario="peak_crisis")

    assert payload["dispatch"]["time_of_use"] == "peak"
    assert payload["dispatch"]["effective_price"] == pytest.approx(0.45)
    assert payload["battery_level_kwh"]["start"] == 10


def test_explicit_arguments_override_scenario(week_history):
    payload = run_pipeline(week_history, scenario="peak_crisis", battery_level=40.0, tou_period="mid-peak")

    assert payload["dispatch"]["time_of_use"] == "mid-peak"
    assert payload["battery_level_kwh"]["start"] == 40.0


def test_spike_in_history_raises_anomaly_alert():
    payload = run_pipeline(flat_history(last=91.5))

    assert payload["anomalies"]["summary"]["high"] == 1
    assert "anomalies_detected" in [a["code"] for a in payload["alerts"]]


def test_short_history_raises(week_history):
    with pytest.raises(InsufficientHistoryError):
        run_pipeline(week_history[:10])


def test_cli_writes_report(tmp_path, week_history, configs_dir):
    history_path = tmp_path / "history.csv"
    out_path = tmp_path / "reports" / "cycle.json"
    _write_csv(week_history, history_path)

    main([
        "--history", str(history_path),
        "--config-dir", str(configs_dir),
        "--scenario", "optimal",
        "--out", str(out_path),
    ])

    report = json.loads(out_path.read_text(encoding="utf-8"))
    assert report["samples"] == 168
    assert report["dispatch"]["time_of_use"] == "off-peak"
    assert report["metrics"]["energy_intensity_kwh_m2"] is not None


def test_cli_rejects_unknown_period(tmp_path):
    with pytest.raises(SystemExit):
        main(["--history", str(tmp_path / "h.csv"), "--tou", "shoulder"])
