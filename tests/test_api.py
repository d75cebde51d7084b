"""
API integration tests.

Every engine is exercised through its HTTP route with the repo's configs;
invalid input must surface as 422 rather than a server error.
"""
from conftest import as_payload, flat_history


def test_health_and_ready(api_client):
    assert api_client.get("/health").json() == {"status": "ok"}

    ready = api_client.get("/ready").json()
    assert ready["status"] == "ok"
    assert ready["checks"]["forecast.yaml"] == "ok"


def test_forecast_route(api_client, week_history):
    resp = api_client.post("/forecast", json={"history": as_payload(week_history), "include_components": True})

    assert resp.status_code == 200
    body = resp.json()
    assert body["forecast"]["next_period_demand_kwh"] >= 5.0
    assert 0.65 <= body["forecast"]["confidence"] <= 0.98
    assert set(body["components"]) == {"historical", "trend", "weather", "occupancy"}


def test_forecast_route_short_history(api_client, week_history):
    resp = api_client.post("/forecast", json={"history": as_payload(week_history[:47])})

    assert resp.status_code == 422
    assert resp.json()["detail"] == {"error": "insufficient_history", "available": 47, "required": 48}


def test_optimize_route(api_client):
    resp = api_client.post(
        "/optimize",
        json={"demand_kwh": 50, "solar_available_kwh": 30, "grid_price": 0.12,
              "battery_level_kwh": 25, "time_of_use": "peak"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["result"]["grid_kwh"] == 0.0
    assert body["result"]["battery_discharge_kwh"] == 20.0
    assert body["next_battery_level_kwh"] == 5.0


def test_optimize_route_with_scenario(api_client):
    resp = api_client.post("/optimize", json={"demand_kwh": 40, "solar_available_kwh": 0, "scenario": "night_charge"})

    assert resp.status_code == 200
    result = resp.json()["result"]
    assert result["time_of_use"] == "off-peak"
    assert result["effective_price"] == 0.036


def test_optimize_route_rejects_bad_input(api_client):
    negative = api_client.post("/optimize", json={"demand_kwh": -5, "solar_available_kwh": 0})
    unknown = api_client.post("/optimize", json={"demand_kwh": 5, "solar_available_kwh": 0, "scenario": "nope"})

    assert negative.status_code == 422
    assert unknown.status_code == 422


def test_day_ahead_route(api_client):
    resp = api_client.post(
        "/optimize/day-ahead",
        json={"demands_kwh": [30.0] * 24, "solar_forecasts_kwh": [0.0] * 24, "grid_prices": [0.12] * 24},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert len(body["periods"]) == 24
    assert body["summary"]["periods"] == 24
    assert all(0.0 <= p["battery_level_kwh"] <= 50.0 for p in body["periods"])


def test_day_ahead_route_length_mismatch(api_client):
    resp = api_client.post(
        "/optimize/day-ahead",
        json={"demands_kwh": [30.0] * 24, "solar_forecasts_kwh": [0.0] * 23, "grid_prices": [0.12] * 24},
    )

    assert resp.status_code == 422


def test_load_shifting_route_uses_configured_loads(api_client):
    prices = [0.2] * 24
    prices[12] = 0.05
    resp = api_client.post(
        "/optimize/load-shifting",
        json={"demands_kwh": [20.0] * 24, "solar_forecasts_kwh": [0.0] * 24, "grid_prices": prices},
    )

    assert resp.status_code == 200
    loads = {s["name"]: s for s in resp.json()["shifted_loads"]}
    assert loads["hvac_precool"]["optimal_hour"] == 12
    assert loads["hvac_precool"]["original_hour"] == 17
    assert loads["water_heating"]["optimal_hour"] == 12


def test_price_response_route(api_client):
    resp = api_client.post(
        "/optimize/price-response",
        json={"current_price": 0.3, "average_price": 0.15, "demand_kwh": 40, "solar_kwh": 0,
              "battery_level_kwh": 20},
    )

    assert resp.status_code == 200
    assert resp.json()["action"] == "use_battery"

    bad = api_client.post(
        "/optimize/price-response",
        json={"current_price": 0.3, "average_price": 0, "demand_kwh": 40, "solar_kwh": 0,
              "battery_level_kwh": 20},
    )
    assert bad.status_code == 422


def test_anomaly_route(api_client):
    resp = api_client.post("/anomaly", json={"history": as_payload(flat_history(last=91.5)), "flagged_only": True})

    assert resp.status_code == 200
    body = resp.json()
    assert body["summary"]["total"] == 1
    assert body["summary"]["types"]["spike"] == 1
    assert len(body["records"]) == 1
    assert body["records"][0]["severity"] == "high"


def test_anomaly_route_rejects_bad_window(api_client, week_history):
    resp = api_client.post("/anomaly", json={"history": as_payload(week_history), "window_size": 0})

    assert resp.status_code == 422


def test_monitor_cycle_route(api_client, week_history):
    resp = api_client.post("/monitor", json={"history": as_payload(week_history), "scenario": "standard"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["dispatch"]["time_of_use"] == "mid-peak"
    assert "alerts" in body and "metrics" in body


def test_monitor_metrics_route(api_client, week_history):
    resp = api_client.post("/monitor/metrics", json={"history": as_payload(week_history), "battery_level_kwh": 25})

    assert resp.status_code == 200
    body = resp.json()
    assert body["battery_utilization_pct"] == 50.0
    assert body["energy_intensity_kwh_m2"] is not None
