"""Forward-Euler integration of the 1R1C room model.

Both drivers share ``evaluate_step``: ventilation policy -> snapshot ->
temperature derivative. Each step depends on the previous indoor
temperature, so the loops are strictly sequential.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from analysis.thermal.rc_model import steady_hvac_demand, temperature_derivative
from core.models import BuildingParams, ComfortState
from data.weather import HOURS_PER_YEAR, Forcing, WeatherSource
from simulation.config import DEFAULT, SimConfig
from simulation.shading import plane_irradiance_tilted
from simulation.snapshot import Snapshot, compute_snapshot
from simulation.ventilation import (
    AdaptiveReason,
    AdaptiveVentilation,
    MvhrMode,
    MvhrVentilation,
    VentilationDecision,
    VentilationStrategy,
    decide_ventilation,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepEvaluation:
    forcing: Forcing
    ventilation: VentilationDecision
    snapshot: Snapshot
    derivative_k_per_s: float

    @property
    def total_ua(self) -> float:
        return self.snapshot.total_ua

    @property
    def passive_gain_w(self) -> float:
        return self.snapshot.passive_gain_w


def evaluate_step(
    params: BuildingParams,
    strategy: VentilationStrategy,
    weather: WeatherSource,
    when_local: datetime,
    indoor_c: float,
    cfg: SimConfig = DEFAULT,
) -> StepEvaluation:
    """Evaluate ventilation, heat balance and dT/dt at the current indoor temperature."""
    forcing = weather.forcing_at(when_local)
    decision = decide_ventilation(
        strategy,
        indoor_c,
        forcing.outdoor_c,
        when_local.hour,
        params.geometry,
        wind_ms=forcing.wind_ms,
        cfg=cfg,
    )
    snapshot = compute_snapshot(
        params,
        when_local,
        forcing.outdoor_c,
        ach_total=decision.ach_total,
        heat_recovery_efficiency=decision.effective_heat_recovery,
        radiation=forcing.radiation,
        indoor_c=indoor_c,
        cfg=cfg,
    )
    derivative = temperature_derivative(
        cfg.thermal_capacitance_j_per_k,
        snapshot.passive_gain_w,
        indoor_c,
        forcing.outdoor_c,
        snapshot.total_ua,
    )
    return StepEvaluation(forcing=forcing, ventilation=decision, snapshot=snapshot, derivative_k_per_s=derivative)


def _adaptive_reason(decision: VentilationDecision) -> AdaptiveReason | None:
    match decision.base:
        case AdaptiveVentilation(reason=reason):
            return reason
    return None


def _mvhr_mode(decision: VentilationDecision) -> MvhrMode | None:
    match decision.base:
        case MvhrVentilation(mode=mode):
            return mode
    return None


# ---------------------------------------------------------------------------
# Day driver
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StepRecord:
    """One output point of a day simulation."""

    time: datetime
    day_fraction: float
    indoor_c: float
    outdoor_c: float
    dni: float
    dhi: float
    ghi: float
    sun_altitude_deg: float
    sun_azimuth_deg: float
    solar_gain_w: float
    fabric_loss_w: float
    ventilation_loss_w: float
    status: ComfortState
    heating_w: float
    cooling_w: float
    ventilation_helpful: bool
    wind_ms: float
    vent_active: bool
    ach_window: float
    ach_total: float
    manual_open_ach: float
    manual_mode: str | None
    adaptive_reason: AdaptiveReason | None
    mvhr_mode: MvhrMode | None
    mvhr_bypass_active: bool
    effective_heat_recovery: float
    illuminance_lux: int


@dataclass(frozen=True)
class DaySimulation:
    records: tuple[StepRecord, ...]
    step_minutes: int


def simulate_day(
    params: BuildingParams,
    day: date,
    weather: WeatherSource,
    strategy: VentilationStrategy,
    *,
    step_minutes: int | None = None,
    spinup_days: int | None = None,
    start_indoor_c: float | None = None,
    cfg: SimConfig = DEFAULT,
) -> DaySimulation:
    """Simulate one local day after a multi-day spin-up.

    The spin-up ends at local midnight so the recorded day starts free of
    initial-condition bias. Records are emitted at every step from 00:00 to
    the following midnight inclusive.

    Args:
        params: Room, envelope, glazing and site.
        day: Local calendar day to record.
        weather: Forcing source.
        strategy: Ventilation configuration.
        step_minutes: Integration step; defaults to the configured step.
        spinup_days: Days simulated before ``day``; defaults to the configured value.
        start_indoor_c: Initial indoor temperature; defaults to the outdoor
            temperature at the start of spin-up.
        cfg: Simulation tunables.

    Returns:
        DaySimulation with one record per step.
    """
    step = step_minutes if step_minutes is not None else cfg.step_minutes
    if step <= 0:
        raise ValueError(f"step_minutes must be positive, got {step}")
    spinup = spinup_days if spinup_days is not None else cfg.spinup_days
    dt_seconds = step * 60
    steps_per_day = round(24 * 60 / step)
    band = cfg.comfort_band

    day_start = datetime(day.year, day.month, day.day)
    t = day_start - timedelta(days=max(0, spinup))
    indoor = start_indoor_c if start_indoor_c is not None else weather.forcing_at(t).outdoor_c

    vent_was_active: bool | None = None
    for _ in range(max(0, spinup) * steps_per_day):
        ev = evaluate_step(params, strategy, weather, t, indoor, cfg)
        vent_was_active = ev.ventilation.vent_active
        indoor += ev.derivative_k_per_s * dt_seconds
        t += timedelta(seconds=dt_seconds)

    records: list[StepRecord] = []
    t = day_start
    for i in range(steps_per_day + 1):
        ev = evaluate_step(params, strategy, weather, t, indoor, cfg)
        vent = ev.ventilation
        if vent_was_active is not None and vent.vent_active != vent_was_active:
            logger.debug(
                "[Vent] %s @ %s | Tin=%.1fC Tout=%.1fC ACH=%.2f",
                "ON" if vent.vent_active else "OFF",
                t.strftime("%H:%M"),
                indoor,
                ev.forcing.outdoor_c,
                vent.ach_total,
            )
        vent_was_active = vent.vent_active

        status = band.classify(indoor)
        demand = steady_hvac_demand(status, band, ev.total_ua, ev.forcing.outdoor_c, ev.passive_gain_w)
        records.append(
            StepRecord(
                time=t,
                day_fraction=i / steps_per_day,
                indoor_c=indoor,
                outdoor_c=ev.forcing.outdoor_c,
                dni=ev.snapshot.radiation.dni,
                dhi=ev.snapshot.radiation.dhi,
                ghi=ev.snapshot.radiation.ghi,
                sun_altitude_deg=ev.snapshot.sun.altitude,
                sun_azimuth_deg=ev.snapshot.sun.azimuth,
                solar_gain_w=ev.snapshot.solar_gain_w,
                fabric_loss_w=ev.snapshot.fabric_loss_w,
                ventilation_loss_w=ev.snapshot.ventilation_loss_w,
                status=status,
                heating_w=demand.heating_w,
                cooling_w=demand.cooling_w,
                ventilation_helpful=status is ComfortState.COOLING and ev.forcing.outdoor_c < indoor - 1,
                wind_ms=ev.forcing.wind_ms,
                vent_active=vent.vent_active,
                ach_window=vent.ach_window,
                ach_total=vent.ach_total,
                manual_open_ach=vent.manual_open_ach,
                manual_mode=vent.manual.mode.value if vent.manual is not None else None,
                adaptive_reason=_adaptive_reason(vent),
                mvhr_mode=_mvhr_mode(vent),
                mvhr_bypass_active=_mvhr_mode(vent) is MvhrMode.SUMMER_BYPASS,
                effective_heat_recovery=vent.effective_heat_recovery,
                illuminance_lux=ev.snapshot.illuminance_lux,
            )
        )
        indoor += ev.derivative_k_per_s * dt_seconds
        t += timedelta(seconds=dt_seconds)

    return DaySimulation(records=tuple(records), step_minutes=step)


# ---------------------------------------------------------------------------
# Annual driver
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PvPlane:
    """Orientation of a notional PV array used to total plane-of-array irradiance."""

    tilt_deg: float = 0.0
    azimuth_deg: float = 180.0
    ground_albedo: float = 0.2


@dataclass(frozen=True)
class AnnualRecord:
    hour: int
    time: datetime
    indoor_c: float
    outdoor_c: float
    ghi: float
    pv_plane_w_m2: float
    solar_gain_w: float
    vent_active: bool
    ach_total: float
    status: ComfortState
    heating_w: float
    cooling_w: float


@dataclass(frozen=True)
class AnnualSimulation:
    records: tuple[AnnualRecord, ...]
    pv: PvPlane


def typical_year_time(hour_index: int, cfg: SimConfig = DEFAULT) -> datetime:
    """Local time of an hour in the model year; indices wrap modulo 8760."""
    return datetime(cfg.model_year, 1, 1) + timedelta(hours=hour_index % HOURS_PER_YEAR)


def simulate_annual(
    params: BuildingParams,
    weather: WeatherSource,
    strategy: VentilationStrategy,
    *,
    pv: PvPlane | None = None,
    spinup_hours: int | None = None,
    start_indoor_c: float | None = None,
    cfg: SimConfig = DEFAULT,
) -> AnnualSimulation:
    """Hourly simulation of the full model year after a spin-up.

    The spin-up runs over the last hours of the typical year so the first
    January hour starts from a settled temperature.
    """
    pv = pv or PvPlane()
    spinup = spinup_hours if spinup_hours is not None else cfg.annual_spinup_hours
    dt_seconds = 3600
    band = cfg.comfort_band

    t0 = typical_year_time(-spinup, cfg)
    indoor = start_indoor_c if start_indoor_c is not None else weather.forcing_at(t0).outdoor_c
    for hour in range(-spinup, 0):
        ev = evaluate_step(params, strategy, weather, typical_year_time(hour, cfg), indoor, cfg)
        indoor += ev.derivative_k_per_s * dt_seconds

    records: list[AnnualRecord] = []
    for hour in range(HOURS_PER_YEAR):
        when = typical_year_time(hour, cfg)
        ev = evaluate_step(params, strategy, weather, when, indoor, cfg)
        status = band.classify(indoor)
        demand = steady_hvac_demand(status, band, ev.total_ua, ev.forcing.outdoor_c, ev.passive_gain_w)
        pv_plane = plane_irradiance_tilted(
            pv.tilt_deg, pv.azimuth_deg, ev.snapshot.sun, ev.forcing.radiation, pv.ground_albedo
        )
        records.append(
            AnnualRecord(
                hour=hour,
                time=when,
                indoor_c=indoor,
                outdoor_c=ev.forcing.outdoor_c,
                ghi=ev.snapshot.radiation.ghi,
                pv_plane_w_m2=pv_plane.total,
                solar_gain_w=ev.snapshot.solar_gain_w,
                vent_active=ev.ventilation.vent_active,
                ach_total=ev.ventilation.ach_total,
                status=status,
                heating_w=demand.heating_w,
                cooling_w=demand.cooling_w,
            )
        )
        indoor += ev.derivative_k_per_s * dt_seconds

    logger.info("Annual simulation complete: %d hours after %d spin-up hours", len(records), spinup)
    return AnnualSimulation(records=tuple(records), pv=pv)
