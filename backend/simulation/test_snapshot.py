"""Tests for the instantaneous heat balance."""

from datetime import datetime

import pytest

from core.models import BuildingParams, Face, FaceConfig, Location, Rooflight
from simulation.config import DEFAULT
from simulation.snapshot import IlluminanceLevel, classify_illuminance, compute_snapshot, desk_illuminance
from simulation.solar import Radiation
from simulation.windows import build_windows

BRISTOL = Location(latitude=51.517, longitude=-2.583)
NOON = datetime(2025, 6, 21, 12, 0)
MIDNIGHT = datetime(2025, 6, 21, 0, 0)


def _room(**faces: FaceConfig) -> BuildingParams:
    params = BuildingParams(location=BRISTOL)
    windows = build_windows({Face(name): face for name, face in faces.items()}, params.geometry)
    return BuildingParams(location=BRISTOL, windows=windows)


def test_steady_state_strictly_falls_with_air_change() -> None:
    params = BuildingParams(location=BRISTOL, internal_gain_w=980.0)
    temps = [compute_snapshot(params, MIDNIGHT, 20.0, ach_total=ach).steady_state_c for ach in (0.3, 3.0, 6.0)]
    assert temps[0] > temps[1] > temps[2]


def test_unglazed_room_has_no_solar_gain() -> None:
    snap = compute_snapshot(_room(south=FaceConfig(glazing=0.0)), NOON, 20.0)
    assert snap.solar_gain_w == 0.0
    assert all(gain == 0.0 for gain in snap.solar_gain_by_face.values())
    assert snap.illuminance_lux == 0


def test_south_glazing_collects_noon_sun() -> None:
    snap = compute_snapshot(_room(south=FaceConfig(glazing=0.5)), NOON, 20.0)
    assert snap.solar_gain_by_face[Face.SOUTH] > 0
    assert snap.solar_gain_by_face[Face.NORTH] == 0.0
    assert snap.solar_gain_w == pytest.approx(sum(snap.solar_gain_by_face.values()))
    assert snap.steady_state_c > 20.0


def test_measured_radiation_overrides_clear_sky() -> None:
    params = _room(south=FaceConfig(glazing=0.5))
    dark = compute_snapshot(params, NOON, 20.0, radiation=Radiation(dni=0.0, dhi=0.0, ghi=0.0))
    assert dark.solar_gain_w == 0.0
    patchy = compute_snapshot(params, NOON, 20.0, radiation=Radiation(dni=float("nan"), dhi=-5.0, ghi=300.0))
    assert patchy.radiation.dhi == 0.0
    assert patchy.radiation.dni > 0


def test_rooflight_adds_gain_and_conductance() -> None:
    base = BuildingParams(location=BRISTOL)
    with_rooflight = BuildingParams(location=BRISTOL, rooflight=Rooflight(area_m2=1.0))
    plain = compute_snapshot(base, NOON, 20.0)
    lit = compute_snapshot(with_rooflight, NOON, 20.0)
    assert lit.rooflight_gain_w > 0
    assert lit.fabric.rooflight == pytest.approx(base.envelope.u_window)
    assert lit.fabric.roof_area == pytest.approx(plain.fabric.roof_area - 1.0)


def test_heat_recovery_reduces_ventilation_conductance() -> None:
    params = BuildingParams(location=BRISTOL)
    plain = compute_snapshot(params, MIDNIGHT, 5.0, ach_total=0.4)
    recovered = compute_snapshot(params, MIDNIGHT, 5.0, ach_total=0.4, heat_recovery_efficiency=0.85)
    assert recovered.ventilation_ua == pytest.approx(plain.ventilation_ua * 0.15)


def test_losses_follow_indoor_temperature() -> None:
    snap = compute_snapshot(BuildingParams(location=BRISTOL), MIDNIGHT, 5.0, indoor_c=21.0)
    assert snap.delta_t == pytest.approx(16.0)
    assert snap.total_loss_w == pytest.approx(snap.total_ua * 16.0)
    assert sum(snap.element_losses().values()) == pytest.approx(snap.fabric_loss_w)


def test_snapshot_is_deterministic() -> None:
    params = _room(south=FaceConfig(glazing=0.5, overhang=0.5), west=FaceConfig(glazing=0.3))
    assert compute_snapshot(params, NOON, 18.0, ach_total=1.0) == compute_snapshot(params, NOON, 18.0, ach_total=1.0)


# -----------------------------------------------------------------------------
# Daylight
# -----------------------------------------------------------------------------


def test_desk_illuminance_scales_with_glazing() -> None:
    small = desk_illuminance(500.0, 1.0, 11.52, 0.4, 4.8)
    large = desk_illuminance(500.0, 3.0, 11.52, 0.4, 4.8)
    assert 0 < small < large
    assert desk_illuminance(0.0, 3.0, 11.52, 0.4, 4.8) == 0


def test_illuminance_classes() -> None:
    daylight = DEFAULT.daylight
    assert classify_illuminance(50) is IlluminanceLevel.DIM
    assert classify_illuminance(daylight.dim_lux) is IlluminanceLevel.ADEQUATE
    assert classify_illuminance(400) is IlluminanceLevel.GOOD
    assert classify_illuminance(700) is IlluminanceLevel.BRIGHT
    assert classify_illuminance(5000) is IlluminanceLevel.VERY_BRIGHT
