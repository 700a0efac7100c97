"""Wind- and buoyancy-driven airflow through manually opened windows.

Each opening is treated as an orifice: Q = Cd · A · v, with the velocity
taken from the driving pressure (v = sqrt(2ΔP/ρ)) and capped at a
practical jet speed for small rooms. Wind pressure is ½ρv² on a sheltered
wind speed, scaled by an empirical coefficient for the opening
arrangement; stack pressure is ρ·g·h·ΔT/T_mean.

Openings in series (cross-flow pairs, facade-to-rooflight paths) combine
as 1/A² = 1/A₁² + 1/A₂².
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from core.models import FACES, Face
from core.numeric import finite_or, non_negative
from simulation.config import DEFAULT, SimConfig

_KELVIN = 273.15
_MIN_MEAN_AIR_TEMP_K = 260.0
_AREA_EPSILON = 1e-6
_FLOW_EPSILON = 1e-9


class NaturalVentMode(StrEnum):
    NONE = "none"
    SINGLE_SIDED = "single-sided"
    MULTI_FACE = "multi-face"
    CROSS = "cross"
    ROOF_ONLY = "roof-only"


@dataclass(frozen=True)
class NaturalVentilation:
    """Result of the opening-flow model for one set of conditions."""

    mode: NaturalVentMode
    open_faces: tuple[Face, ...]
    facade_open_area_m2: float
    roof_opening_area_m2: float
    cross_area_m2: float
    cross_pair: tuple[Face, Face] | None
    residual_area_m2: float
    wind_ms: float
    effective_wind_ms: float
    wind_pressure_pa: float
    stack_pressure_pa: float
    facade_pressure_pa: float
    roof_pressure_pa: float
    facade_flow_m3s: float
    roof_flow_m3s: float
    flow_m3s: float
    ach: float

    @property
    def total_open_area_m2(self) -> float:
        return self.facade_open_area_m2 + self.roof_opening_area_m2


def equivalent_opening_area(area_a: float, area_b: float) -> float:
    """Effective area of two openings in series; zero if either is shut."""
    a, b = non_negative(area_a), non_negative(area_b)
    if a <= _FLOW_EPSILON or b <= _FLOW_EPSILON:
        return 0.0
    return 1 / math.sqrt(1 / (a * a) + 1 / (b * b))


def pressure_driven_flow(area_m2: float, pressure_pa: float, cfg: SimConfig = DEFAULT) -> float:
    """Volume flow (m³/s) through an orifice under a pressure difference."""
    area, pressure = non_negative(area_m2), non_negative(pressure_pa)
    if area <= _FLOW_EPSILON or pressure <= _FLOW_EPSILON:
        return 0.0
    velocity = min(cfg.natural.max_opening_velocity_ms, math.sqrt(2 * pressure / cfg.rho_air))
    return cfg.natural.discharge_coefficient * area * velocity


def natural_ventilation(
    area_by_face: Mapping[Face, float],
    volume_m3: float,
    *,
    roof_opening_area_m2: float = 0.0,
    room_height_m: float | None = None,
    stack_height_m: float | None = None,
    wind_ms: float | None = None,
    indoor_c: float = 21.0,
    outdoor_c: float | None = None,
    cfg: SimConfig = DEFAULT,
) -> NaturalVentilation:
    """Airflow and ACH through the opened facade windows and rooflight.

    Args:
        area_by_face: Free opening area per facade (m²); missing faces are shut.
        volume_m3: Room volume.
        roof_opening_area_m2: Free area of an opened rooflight.
        room_height_m: Used for the default stack height and for floor area.
        stack_height_m: Height between low and high openings; defaults to a
            fraction of room height.
        wind_ms: Met-station wind speed; defaults to a typical mean.
        indoor_c: Indoor air temperature.
        outdoor_c: Outdoor air temperature; defaults to indoor (no buoyancy).

    Returns:
        NaturalVentilation describing the classified mode, pressures and flow.
    """
    nv = cfg.natural
    volume = non_negative(volume_m3)
    height = max(0.1, finite_or(room_height_m, 2.6))
    stack_height = max(nv.min_stack_height_m, finite_or(stack_height_m, height * nv.stack_height_ratio))
    wind = non_negative(finite_or(wind_ms, nv.default_wind_ms))
    effective_wind = wind * nv.wind_shelter_factor
    indoor = finite_or(indoor_c, 21.0)
    outdoor = finite_or(outdoor_c, indoor)
    roof_area = non_negative(roof_opening_area_m2)

    wind_pressure = 0.5 * cfg.rho_air * effective_wind**2
    mean_air_k = max(_MIN_MEAN_AIR_TEMP_K, _KELVIN + (indoor + outdoor) / 2)
    stack_pressure = cfg.rho_air * nv.gravity_ms2 * stack_height * abs(indoor - outdoor) / mean_air_k

    areas = {face: non_negative(area_by_face.get(face)) for face in FACES}
    facade_area = sum(areas.values())
    open_faces = tuple(face for face in FACES if areas[face] > _AREA_EPSILON)

    if volume <= 0 or facade_area + roof_area <= _AREA_EPSILON:
        return NaturalVentilation(
            mode=NaturalVentMode.NONE,
            open_faces=(),
            facade_open_area_m2=0.0,
            roof_opening_area_m2=0.0,
            cross_area_m2=0.0,
            cross_pair=None,
            residual_area_m2=0.0,
            wind_ms=wind,
            effective_wind_ms=effective_wind,
            wind_pressure_pa=wind_pressure,
            stack_pressure_pa=stack_pressure,
            facade_pressure_pa=0.0,
            roof_pressure_pa=0.0,
            facade_flow_m3s=0.0,
            roof_flow_m3s=0.0,
            flow_m3s=0.0,
            ach=0.0,
        )

    ns_area = equivalent_opening_area(areas[Face.NORTH], areas[Face.SOUTH])
    ew_area = equivalent_opening_area(areas[Face.EAST], areas[Face.WEST])
    cross_area = max(ns_area, ew_area)
    cross_pair: tuple[Face, Face] | None = None
    if cross_area > _AREA_EPSILON:
        cross_pair = (Face.NORTH, Face.SOUTH) if ns_area >= ew_area else (Face.EAST, Face.WEST)
    else:
        cross_area = 0.0

    single_sided_pressure = wind_pressure * nv.cp_single_sided
    residual_area = facade_area
    if facade_area <= _AREA_EPSILON:
        mode = NaturalVentMode.ROOF_ONLY
        residual_area = 0.0
        facade_pressure = 0.0
        facade_flow = 0.0
    elif cross_pair is not None:
        mode = NaturalVentMode.CROSS
        facade_pressure = wind_pressure * nv.cp_cross
        residual_area = max(0.0, facade_area - cross_area * 2)
        facade_flow = pressure_driven_flow(cross_area, facade_pressure, cfg) + pressure_driven_flow(
            residual_area, single_sided_pressure, cfg
        )
    elif len(open_faces) >= 2:
        mode = NaturalVentMode.MULTI_FACE
        facade_pressure = wind_pressure * nv.cp_multi_face
        facade_flow = pressure_driven_flow(facade_area, facade_pressure, cfg)
    else:
        mode = NaturalVentMode.SINGLE_SIDED
        facade_pressure = single_sided_pressure
        facade_flow = pressure_driven_flow(facade_area, facade_pressure, cfg)

    roof_pressure = 0.0
    roof_flow = 0.0
    if roof_area > _AREA_EPSILON:
        if facade_area > _AREA_EPSILON:
            roof_pressure = wind_pressure * nv.cp_roof_to_facade + stack_pressure
            roof_flow = pressure_driven_flow(equivalent_opening_area(facade_area, roof_area), roof_pressure, cfg)
        else:
            # Air must enter somewhere: assume background leakage as the make-up path.
            makeup_area = max(nv.min_makeup_area_m2, volume / height * nv.makeup_area_ratio)
            roof_pressure = wind_pressure * nv.cp_roof_only + stack_pressure
            roof_flow = pressure_driven_flow(equivalent_opening_area(roof_area, makeup_area), roof_pressure, cfg)

    if roof_flow > 0 and facade_flow > 0:
        flow = math.hypot(facade_flow, roof_flow)
    else:
        flow = facade_flow + roof_flow

    return NaturalVentilation(
        mode=mode,
        open_faces=open_faces,
        facade_open_area_m2=facade_area,
        roof_opening_area_m2=roof_area,
        cross_area_m2=cross_area,
        cross_pair=cross_pair,
        residual_area_m2=residual_area,
        wind_ms=wind,
        effective_wind_ms=effective_wind,
        wind_pressure_pa=wind_pressure,
        stack_pressure_pa=stack_pressure,
        facade_pressure_pa=facade_pressure,
        roof_pressure_pa=roof_pressure,
        facade_flow_m3s=facade_flow,
        roof_flow_m3s=roof_flow,
        flow_m3s=flow,
        ach=non_negative(flow * 3600 / volume),
    )


# ---------------------------------------------------------------------------
# Opening-area rules of thumb
# ---------------------------------------------------------------------------

_CASEMENT_AREA_M2 = 0.36  # 600 x 600 mm sash


@dataclass(frozen=True)
class OpeningAreaEstimate:
    area_m2: float
    sash_side_mm: int
    casement_percent: int


def required_opening_area(ach: float, volume_m3: float, cfg: SimConfig = DEFAULT) -> OpeningAreaEstimate:
    """Free area needed for a target ACH at the reference opening velocity."""
    flow = non_negative(ach) * non_negative(volume_m3) / 3600
    area = flow / (cfg.natural.discharge_coefficient * cfg.natural.reference_velocity_ms)
    return OpeningAreaEstimate(
        area_m2=area,
        sash_side_mm=round(math.sqrt(area) * 1000),
        casement_percent=min(100, round(area / _CASEMENT_AREA_M2 * 100)),
    )


def ach_from_opening_area(area_m2: float, volume_m3: float, cfg: SimConfig = DEFAULT) -> float:
    volume = non_negative(volume_m3)
    if volume <= 0:
        return 0.0
    flow = cfg.natural.discharge_coefficient * non_negative(area_m2) * cfg.natural.reference_velocity_ms
    return flow * 3600 / volume


# ---------------------------------------------------------------------------
# Draught comfort
# ---------------------------------------------------------------------------


class DraughtRisk(StrEnum):
    LOW = "low"
    SLIGHT = "slight"
    MODERATE = "moderate"
    HIGH = "high"


@dataclass(frozen=True)
class DraughtAssessment:
    ach_total: float
    delta_t_c: float
    apparent_cooling_c: float
    perceived_temp_c: float
    risk: DraughtRisk

    @property
    def likely_uncomfortable(self) -> bool:
        return self.apparent_cooling_c >= 1.0


def assess_draught(ach_total: float, indoor_c: float, outdoor_c: float | None, cfg: SimConfig = DEFAULT) -> DraughtAssessment:
    """Perceived cooling from window airflow, worse when the incoming air is cold."""
    ach = non_negative(ach_total)
    indoor = finite_or(indoor_c, 0.0)
    outdoor = finite_or(outdoor_c, indoor)
    delta_t = indoor - outdoor
    excess = max(0.0, ach - cfg.ach_infiltration)

    if excess <= 0.3:
        base_cooling = 0.0
    elif excess <= 2:
        base_cooling = (excess - 0.3) * 0.18
    else:
        base_cooling = 0.31 + (excess - 2) * 0.24

    temp_factor = 0.25 if delta_t <= 0 else min(1.6, 0.35 + delta_t / 10)
    apparent = min(3.5, max(0.0, base_cooling * temp_factor))

    if apparent >= 1.5:
        risk = DraughtRisk.HIGH
    elif apparent >= 0.8:
        risk = DraughtRisk.MODERATE
    elif apparent >= 0.3:
        risk = DraughtRisk.SLIGHT
    else:
        risk = DraughtRisk.LOW

    return DraughtAssessment(
        ach_total=ach,
        delta_t_c=delta_t,
        apparent_cooling_c=apparent,
        perceived_temp_c=indoor - apparent,
        risk=risk,
    )
