"""Centralised simulation tunables.

Every physical constant and control threshold the engine uses lives here.
Create a custom ``SimConfig`` to try an alternate scenario::

    cfg = SimConfig(thermal_capacitance_j_per_k=12e6)
    result = simulate_day(params, day, weather, strategy, cfg=cfg)
"""

from dataclasses import dataclass, field

from core.models import ComfortBand


@dataclass(frozen=True)
class AdaptiveVentilationConfig:
    """Temperature-seeking window control."""

    night_floor_c: float = 18.0  # stop night cooling below this
    min_benefit_c: float = 1.0  # outdoor must be this much cooler
    overheat_scale_c: float = 3.0  # overheat that drives full opening
    ach_min: float = 0.6
    ach_max: float = 6.0


@dataclass(frozen=True)
class MvhrControlConfig:
    """Scheduled boost and summer bypass for mechanical ventilation."""

    boost_ach: float = 0.8
    summer_boost_ach: float = 1.2
    morning_start_hour: int = 6
    morning_end_hour: int = 9
    evening_start_hour: int = 17
    evening_end_hour: int = 22
    bypass_benefit_c: float = 0.5


@dataclass(frozen=True)
class NaturalVentilationConfig:
    """Orifice-flow model for manually opened windows and rooflights.

    Pressure coefficients and the velocity cap are empirical.
    """

    discharge_coefficient: float = 0.6
    reference_velocity_ms: float = 0.75  # opening-area equivalence helper
    gravity_ms2: float = 9.81
    default_wind_ms: float = 2.2
    cp_single_sided: float = 0.05
    cp_multi_face: float = 0.1
    cp_cross: float = 0.35
    cp_roof_to_facade: float = 0.18
    cp_roof_only: float = 0.12
    min_stack_height_m: float = 0.5
    stack_height_ratio: float = 0.65  # of room height
    makeup_area_ratio: float = 0.004  # of floor area
    min_makeup_area_m2: float = 0.02
    wind_shelter_factor: float = 0.35  # 10 m met wind -> opening level
    max_opening_velocity_ms: float = 1.2

    # --- Operable leaves ---
    top_hung_effectiveness: float = 0.65
    turn_effectiveness: float = 0.45
    frame_profile_m: float = 0.05
    open_travel_m: float = 0.15
    max_leaf_width_m: float = 0.9


@dataclass(frozen=True)
class ShadingConfig:
    projection_m: float = 0.3  # fin / louver blade projection
    min_gap_m: float = 0.1
    max_gap_m: float = 0.6
    min_drop_altitude_deg: float = 5.0
    max_overhang_m: float = 1.5
    max_glazing: float = 0.8
    min_window_clear_height_m: float = 0.4


@dataclass(frozen=True)
class DaylightConfig:
    luminous_efficacy_lm_w: float = 115.0
    vlt_to_shgc_ratio: float = 1.6
    max_vlt: float = 0.9
    sky_factor: float = 0.4
    room_factor: float = 2.0
    dim_lux: float = 100.0
    adequate_lux: float = 300.0
    good_lux: float = 500.0
    bright_lux: float = 1000.0


@dataclass(frozen=True)
class RooflightConfig:
    edge_offset_m: float = 0.5  # clearance from inside parapet
    max_open_m: float = 0.2
    min_clear_span_m: float = 1.0


@dataclass(frozen=True)
class SimConfig:
    """All simulation tunables, grouped by category."""

    # --- Air properties ---
    rho_air: float = 1.2  # kg/m³
    cp_air: float = 1006.0  # J/kgK

    # --- Thermal mass and comfort ---
    thermal_capacitance_j_per_k: float = 6_000_000.0
    comfort_band: ComfortBand = field(default_factory=ComfortBand)
    overheat_threshold_c: float = 26.0
    severe_overheat_threshold_c: float = 28.0

    # --- Timing ---
    model_year: int = 2025
    step_minutes: int = 10
    spinup_days: int = 7
    annual_spinup_hours: int = 7 * 24
    summer_solstice_day: int = 172
    winter_solstice_day: int = 355

    # --- Ventilation ---
    ach_infiltration: float = 0.3  # background, always present
    purge_ach: float = 6.0
    night_start_hour: int = 22
    night_end_hour: int = 6
    adaptive: AdaptiveVentilationConfig = field(default_factory=AdaptiveVentilationConfig)
    mvhr: MvhrControlConfig = field(default_factory=MvhrControlConfig)
    natural: NaturalVentilationConfig = field(default_factory=NaturalVentilationConfig)

    # --- Solar / shading / daylight ---
    clear_sky_i0_w_m2: float = 1000.0
    clear_sky_tau: float = 0.75
    clear_sky_diffuse_w_m2: float = 100.0
    shading: ShadingConfig = field(default_factory=ShadingConfig)
    daylight: DaylightConfig = field(default_factory=DaylightConfig)
    rooflight: RooflightConfig = field(default_factory=RooflightConfig)

    # --- Steady-state guard ---
    conductance_epsilon_w_k: float = 1e-6

    @property
    def steps_per_day(self) -> int:
        return round(24 * 60 / self.step_minutes)

    def is_night_hour(self, hour: int) -> bool:
        return hour >= self.night_start_hour or hour < self.night_end_hour


DEFAULT = SimConfig()
