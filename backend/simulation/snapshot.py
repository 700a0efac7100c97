"""Instantaneous heat balance of the room.

``compute_snapshot`` is a pure function: gains, losses, conductances and
the steady-state temperature for one instant, with no state carried
between calls.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from analysis.thermal.rc_model import compute_steady_state_temperature
from core.models import FACES, BuildingParams, Face
from core.numeric import clamp01, finite_or, non_negative
from simulation.conductance import FabricConductance, assemble_fabric_conductance, ventilation_conductance
from simulation.config import DEFAULT, DaylightConfig, SimConfig
from simulation.shading import cardinal_from_azimuth, plane_irradiance_horizontal, window_effective_irradiance
from simulation.solar import Radiation, SolarPosition, clear_sky, sun_at


@dataclass(frozen=True)
class Snapshot:
    """Heat balance at one instant. Powers in W, conductances in W/K."""

    sun: SolarPosition
    radiation: Radiation
    indoor_c: float
    steady_state_c: float
    outdoor_c: float
    solar_gain_w: float
    solar_gain_by_face: dict[Face, float]
    beam_by_face: dict[Face, float]
    rooflight_gain_w: float
    internal_gain_w: float
    fabric: FabricConductance
    ventilation_ua: float
    illuminance_lux: int

    @property
    def fabric_ua(self) -> float:
        return self.fabric.total

    @property
    def total_ua(self) -> float:
        return self.fabric.total + self.ventilation_ua

    @property
    def passive_gain_w(self) -> float:
        return self.solar_gain_w + self.internal_gain_w

    @property
    def delta_t(self) -> float:
        return self.indoor_c - self.outdoor_c

    @property
    def fabric_loss_w(self) -> float:
        return self.fabric.total * self.delta_t

    @property
    def ventilation_loss_w(self) -> float:
        return self.ventilation_ua * self.delta_t

    @property
    def total_loss_w(self) -> float:
        return self.fabric_loss_w + self.ventilation_loss_w

    def element_losses(self) -> dict[str, float]:
        dt = self.delta_t
        return {
            "walls": self.fabric.walls * dt,
            "windows": self.fabric.windows * dt,
            "rooflight": self.fabric.rooflight * dt,
            "roof": self.fabric.roof * dt,
            "floor": self.fabric.floor * dt,
        }


# ---------------------------------------------------------------------------
# Daylight
# ---------------------------------------------------------------------------


class IlluminanceLevel(StrEnum):
    DIM = "dim"
    ADEQUATE = "adequate"
    GOOD = "good"
    BRIGHT = "bright"
    VERY_BRIGHT = "very_bright"


def desk_illuminance(
    ghi: float,
    window_area: float,
    floor_area: float,
    g_glass: float,
    room_depth: float,
    cfg: DaylightConfig = DEFAULT.daylight,
) -> int:
    """Rough desk-height illuminance at room centre from a daylight factor.

    DF ≈ A_window · VLT · sky factor / (A_floor · room factor), with VLT
    estimated from g and a fall-off towards the back of the room.
    """
    if not ghi > 0 or floor_area <= 0:
        return 0
    outdoor_lux = ghi * cfg.luminous_efficacy_lm_w
    vlt = min(cfg.max_vlt, g_glass * cfg.vlt_to_shgc_ratio)
    daylight_factor = window_area * vlt * cfg.sky_factor / (floor_area * cfg.room_factor)
    depth_correction = max(0.3, 1 - room_depth / 2 * 0.1)
    return round(max(0.0, outdoor_lux * daylight_factor * depth_correction))


def classify_illuminance(lux: float, cfg: DaylightConfig = DEFAULT.daylight) -> IlluminanceLevel:
    if lux < cfg.dim_lux:
        return IlluminanceLevel.DIM
    if lux < cfg.adequate_lux:
        return IlluminanceLevel.ADEQUATE
    if lux < cfg.good_lux:
        return IlluminanceLevel.GOOD
    if lux < cfg.bright_lux:
        return IlluminanceLevel.BRIGHT
    return IlluminanceLevel.VERY_BRIGHT


# ---------------------------------------------------------------------------
# Snapshot evaluator
# ---------------------------------------------------------------------------


def _sanitize_radiation(radiation: Radiation | None, sun: SolarPosition, cfg: SimConfig) -> Radiation:
    clear = clear_sky(sun.altitude, cfg)
    if radiation is None:
        return clear
    return Radiation(
        dni=non_negative(finite_or(radiation.dni, clear.dni)),
        dhi=non_negative(finite_or(radiation.dhi, clear.dhi)),
        ghi=non_negative(finite_or(radiation.ghi, clear.ghi)),
    )


def compute_snapshot(
    params: BuildingParams,
    when_local: datetime,
    outdoor_c: float,
    ach_total: float | None = None,
    heat_recovery_efficiency: float = 0.0,
    radiation: Radiation | None = None,
    indoor_c: float | None = None,
    cfg: SimConfig = DEFAULT,
) -> Snapshot:
    """Evaluate gains, losses and steady-state temperature at one instant.

    Args:
        params: Room, envelope, glazing and site.
        when_local: Local standard time.
        outdoor_c: Outdoor air temperature.
        ach_total: Total air change rate; defaults to background infiltration.
        heat_recovery_efficiency: Fraction of ventilation heat recovered (0-1).
        radiation: Measured irradiance; clear-sky values are used when absent.
        indoor_c: Actual indoor temperature for the loss breakdown. Defaults
            to the steady-state temperature.
        cfg: Simulation tunables.

    Returns:
        Snapshot of the heat balance.
    """
    geometry = params.geometry
    envelope = params.envelope
    sun = sun_at(when_local, params.location)
    rad = _sanitize_radiation(radiation, sun, cfg)

    ach = non_negative(ach_total if ach_total is not None else cfg.ach_infiltration)
    ua_vent = ventilation_conductance(ach, geometry.volume, clamp01(non_negative(heat_recovery_efficiency)), cfg)

    gain_by_face = dict.fromkeys(FACES, 0.0)
    beam_by_face = dict.fromkeys(FACES, 0.0)
    solar_gain = 0.0
    for window in params.windows:
        if window.area <= 0:
            continue
        gain = window_effective_irradiance(window, sun, rad, params.blinds, params.ground_albedo, cfg.shading)
        face_gain = gain.effective_w_m2 * envelope.g_glass * window.area
        solar_gain += face_gain
        face = cardinal_from_azimuth(window.azimuth)
        if face is not None:
            gain_by_face[face] += face_gain
            beam_by_face[face] = gain.incident.beam

    rooflight_gain = 0.0
    rooflight = params.rooflight
    if rooflight is not None and non_negative(rooflight.area_m2) > 1e-6:
        g_rooflight = rooflight.g_value if rooflight.g_value is not None else envelope.g_glass
        rooflight_gain = plane_irradiance_horizontal(sun, rad).total * g_rooflight * rooflight.area_m2
        solar_gain += rooflight_gain

    fabric = assemble_fabric_conductance(geometry, envelope, params.windows, rooflight)
    steady = compute_steady_state_temperature(
        solar_gain + params.internal_gain_w,
        outdoor_c,
        fabric.total + ua_vent,
        cfg.conductance_epsilon_w_k,
    )
    indoor = finite_or(indoor_c, steady)

    return Snapshot(
        sun=sun,
        radiation=rad,
        indoor_c=indoor,
        steady_state_c=steady,
        outdoor_c=outdoor_c,
        solar_gain_w=solar_gain,
        solar_gain_by_face=gain_by_face,
        beam_by_face=beam_by_face,
        rooflight_gain_w=rooflight_gain,
        internal_gain_w=params.internal_gain_w,
        fabric=fabric,
        ventilation_ua=ua_vent,
        illuminance_lux=desk_illuminance(
            rad.ghi, fabric.window_area, fabric.floor_area, envelope.g_glass, geometry.depth, cfg.daylight
        ),
    )
