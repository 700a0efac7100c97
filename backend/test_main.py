"""API tests against the FastAPI app."""

import pytest
from fastapi.testclient import TestClient

from main import app

client = TestClient(app)

SUMMER_NOON = "2025-06-21T12:00:00"


def test_presets() -> None:
    response = client.get("/presets")
    assert response.status_code == 200
    body = response.json()
    assert body["defaults"] == {"u_value": "high", "ventilation": "background", "leti_target": "residential"}
    assert body["ventilation"]["passivhaus"]["heat_recovery_efficiency"] == 0.85
    assert body["leti_targets"]["residential"]["kg_co2e_m2_year"] == 35.0


def test_snapshot_defaults() -> None:
    response = client.post("/snapshot", json={"time": SUMMER_NOON})
    assert response.status_code == 200
    body = response.json()
    snapshot = body["snapshot"]
    assert snapshot["solar_gain_by_face"]["south"] > 0
    assert snapshot["solar_gain_by_face"]["north"] == 0.0
    assert body["ventilation"]["ach_total"] == pytest.approx(0.3)
    assert body["weather_source"] == "synthetic"
    assert body["sun_times"]["mode"] == "normal"
    assert set(body["faces"]) == {"north", "east", "south", "west"}


def test_snapshot_respects_indoor_temperature_and_outdoor_override() -> None:
    response = client.post(
        "/snapshot",
        json={"time": "2025-01-15T03:00:00", "outdoor_c": 0.0, "indoor_c": 21.0, "ventilation": {"preset": "open"}},
    )
    body = response.json()
    assert body["snapshot"]["outdoor_c"] == 0.0
    assert body["snapshot"]["indoor_c"] == 21.0
    assert body["comfort"] == "comfortable"
    assert body["ventilation_loss_w"] > body["fabric_loss_w"]


def test_simulate_day() -> None:
    response = client.post("/simulate/day", json={"day": "2025-06-21", "step_minutes": 30})
    assert response.status_code == 200
    body = response.json()
    assert len(body["records"]) == 49
    summary = body["summary"]
    assert summary["comfortable_hours"] + summary["heating_hours"] + summary["cooling_hours"] == pytest.approx(24.0)
    assert body["cost"]["floor_area_m2"] == pytest.approx(2.4 * 4.8)


def test_simulate_day_rejects_zero_step() -> None:
    response = client.post("/simulate/day", json={"day": "2025-06-21", "step_minutes": 0})
    assert response.status_code == 422


def test_simulate_annual_without_series() -> None:
    response = client.post("/simulate/annual", json={"include_series": False, "pv": {"area_m2": 2.0}})
    assert response.status_code == 200
    body = response.json()
    assert "records" not in body
    stats = body["statistics"]
    assert stats["total_hours"] == 8760
    assert sum(b["hours"] for b in stats["histogram"]) == 8760
    assert body["solar_kwh"] > 0
    assert body["dataset_validation"] is None
    assert set(body["meets_leti_target"]) == {"residential", "office", "retail", "hotel"}


def test_manual_ventilation() -> None:
    response = client.post(
        "/ventilation/manual",
        json={
            "openings": {"segments": {"south:0": 2}, "fixed_wind_ms": 3.0},
            "indoor_c": 22.0,
            "outdoor_c": 12.0,
            "target_ach": 2.0,
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["natural_ventilation"]["mode"] == "single-sided"
    assert body["ach_total"] > 0.3
    assert body["draught"]["risk"] in {"low", "slight", "moderate", "high"}
    assert body["required_opening"]["area_m2"] > 0


def test_opened_area() -> None:
    response = client.post("/windows/opened-area", json={"segments": {"south:0": True, "north:0": 2}})
    assert response.status_code == 200
    body = response.json()
    assert body["open_leaf_count"] == 1
    assert body["total_leaf_count"] == 1
    assert body["total_open_area_m2"] > 0
