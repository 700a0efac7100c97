"""Tests for the day and annual drivers of the room model."""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime

import pytest

from analysis.statistics import annual_statistics
from core.models import BuildingParams, ComfortState, Face, FaceConfig, Location
from data.weather import (
    HOURS_PER_YEAR,
    Forcing,
    HourlyWeather,
    SyntheticProfile,
    SyntheticWeather,
    WeatherDataset,
    WeatherSource,
    make_weather_source,
)
from simulation.config import SimConfig
from simulation.integrator import evaluate_step, simulate_annual, simulate_day, typical_year_time
from simulation.snapshot import compute_snapshot
from simulation.solar import Radiation
from simulation.ventilation import VentilationStrategy
from simulation.windows import build_windows

BRISTOL = Location(latitude=51.517, longitude=-2.583)
WEATHER = SyntheticWeather(SyntheticProfile(location=BRISTOL))
MIDSUMMER = date(2025, 6, 21)


@dataclass(frozen=True)
class ConstantWeather:
    """Fixed outdoor temperature in darkness."""

    outdoor_c: float = 10.0

    def forcing_at(self, when_local: datetime) -> Forcing:
        return Forcing(
            outdoor_c=self.outdoor_c,
            radiation=Radiation(dni=0.0, dhi=0.0, ghi=0.0),
            wind_ms=2.0,
            sky_cover_tenths=None,
            source="constant",
        )


def _glazed_room() -> BuildingParams:
    params = BuildingParams(location=BRISTOL)
    faces = {Face.SOUTH: FaceConfig(glazing=0.6), Face.WEST: FaceConfig(glazing=0.3)}
    return BuildingParams(location=BRISTOL, windows=build_windows(faces, params.geometry))


# -----------------------------------------------------------------------------
# Day driver
# -----------------------------------------------------------------------------


def test_day_has_one_record_per_step_plus_midnight() -> None:
    result = simulate_day(_glazed_room(), MIDSUMMER, WEATHER, VentilationStrategy(), step_minutes=10, spinup_days=1)
    assert len(result.records) == 145
    assert result.records[0].time == datetime(2025, 6, 21, 0, 0)
    assert result.records[-1].time == datetime(2025, 6, 22, 0, 0)
    assert result.records[0].day_fraction == 0.0
    assert result.records[-1].day_fraction == pytest.approx(1.0)


def test_day_rejects_non_positive_step() -> None:
    with pytest.raises(ValueError):
        simulate_day(_glazed_room(), MIDSUMMER, WEATHER, VentilationStrategy(), step_minutes=0)


def test_room_at_steady_state_stays_there() -> None:
    params = BuildingParams(location=BRISTOL)
    weather = ConstantWeather(outdoor_c=10.0)
    steady = compute_snapshot(params, datetime(2025, 1, 1), 10.0, radiation=Radiation(0.0, 0.0, 0.0)).steady_state_c
    result = simulate_day(
        params, date(2025, 1, 15), weather, VentilationStrategy(), spinup_days=0, start_indoor_c=steady
    )
    assert all(r.indoor_c == pytest.approx(steady) for r in result.records)


def test_indoor_relaxes_towards_outdoor_without_gains() -> None:
    params = BuildingParams(location=BRISTOL, internal_gain_w=0.0)
    result = simulate_day(
        params, date(2025, 1, 15), ConstantWeather(5.0), VentilationStrategy(), spinup_days=0, start_indoor_c=20.0
    )
    temps = [r.indoor_c for r in result.records]
    assert all(later < earlier for earlier, later in zip(temps, temps[1:]))
    assert temps[-1] > 5.0


def test_demand_matches_comfort_state() -> None:
    result = simulate_day(_glazed_room(), date(2025, 1, 15), WEATHER, VentilationStrategy(), spinup_days=1)
    for record in result.records:
        assert record.heating_w >= 0 and record.cooling_w >= 0
        if record.status is not ComfortState.HEATING:
            assert record.heating_w == 0.0
        if record.status is not ComfortState.COOLING:
            assert record.cooling_w == 0.0


def test_night_purge_opens_at_night_only() -> None:
    result = simulate_day(
        _glazed_room(), MIDSUMMER, WEATHER, VentilationStrategy(night_purge=True), step_minutes=60, spinup_days=1
    )
    by_hour = {r.time.hour: r for r in result.records[:-1]}
    assert by_hour[23].vent_active
    assert by_hour[2].ach_total == pytest.approx(6.0)
    assert not by_hour[12].vent_active


def test_vent_change_at_midnight_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    afternoon_purge = SimConfig(night_start_hour=12, night_end_hour=0)
    with caplog.at_level(logging.DEBUG, logger="simulation.integrator"):
        result = simulate_day(
            _glazed_room(),
            MIDSUMMER,
            WEATHER,
            VentilationStrategy(night_purge=True),
            step_minutes=60,
            spinup_days=1,
            cfg=afternoon_purge,
        )
    assert not result.records[0].vent_active
    assert "[Vent] OFF @ 00:00" in caplog.text


def test_step_evaluation_matches_day_record() -> None:
    params = _glazed_room()
    result = simulate_day(params, MIDSUMMER, WEATHER, VentilationStrategy(adaptive=True), step_minutes=30, spinup_days=1)
    record = result.records[24]
    ev = evaluate_step(params, VentilationStrategy(adaptive=True), WEATHER, record.time, record.indoor_c)
    assert ev.snapshot.solar_gain_w == pytest.approx(record.solar_gain_w)
    assert ev.ventilation.ach_total == pytest.approx(record.ach_total)
    assert ev.ventilation.base.reason is record.adaptive_reason  # type: ignore[union-attr]


# -----------------------------------------------------------------------------
# Annual driver
# -----------------------------------------------------------------------------


def test_typical_year_time_wraps() -> None:
    assert typical_year_time(0) == datetime(2025, 1, 1, 0, 0)
    assert typical_year_time(-1) == datetime(2025, 12, 31, 23, 0)
    assert typical_year_time(8760) == datetime(2025, 1, 1, 0, 0)


def test_annual_run_covers_the_year_and_is_repeatable() -> None:
    params = _glazed_room()
    first = simulate_annual(params, WEATHER, VentilationStrategy(), spinup_hours=24)
    second = simulate_annual(params, WEATHER, VentilationStrategy(), spinup_hours=24)
    assert len(first.records) == 8760
    assert first.records == second.records

    stats = annual_statistics(first.records)
    assert stats.hours_in_comfort + stats.heating_hours + stats.cooling_hours == 8760
    assert sum(b.hours for b in stats.histogram) == 8760
    assert stats.ghi_kwh_m2 > 0
    assert stats.tilted_plane_kwh_m2 > 0
    assert stats.peak_time.month in (4, 5, 6, 7, 8, 9)
    assert stats.min_time.month in (11, 12, 1, 2, 3)


# -----------------------------------------------------------------------------
# Gaps in an hourly dataset
# -----------------------------------------------------------------------------


def _gappy_dataset_weather() -> WeatherSource:
    hours = [HourlyWeather(5.0, 0.0, 0.0, 0.0, wind_ms=2.0)] * HOURS_PER_YEAR
    hours[219] = HourlyWeather(math.nan, 0.0, 0.0, math.nan, wind_ms=2.0)
    hours[220] = HourlyWeather(math.inf, 0.0, 0.0, math.nan, wind_ms=2.0)
    return make_weather_source(SyntheticProfile(location=BRISTOL), WeatherDataset(hours=tuple(hours), name="gappy"))


def _all_finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def test_day_through_dataset_gap_stays_finite() -> None:
    weather = _gappy_dataset_weather()
    result = simulate_day(_glazed_room(), date(2025, 1, 11), weather, VentilationStrategy(), step_minutes=60, spinup_days=1)
    for record in result.records:
        assert _all_finite(record.indoor_c, record.outdoor_c, record.ghi, record.heating_w, record.cooling_w)
    assert any(r.status is ComfortState.HEATING for r in result.records)


def test_annual_through_dataset_gap_stays_finite() -> None:
    result = simulate_annual(_glazed_room(), _gappy_dataset_weather(), VentilationStrategy(), spinup_hours=24)
    for record in result.records:
        assert _all_finite(record.indoor_c, record.outdoor_c, record.ghi, record.heating_w, record.cooling_w)
    gap = result.records[219:221]
    assert all(r.ghi == 0.0 for r in gap)
