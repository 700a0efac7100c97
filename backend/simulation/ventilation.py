"""Per-step ventilation policy.

The base rate comes from exactly one control mode, picked in priority
order adaptive > MVHR-controlled > fixed preset (with optional night
purge). Manually opened windows are then added on top of whatever the
base mode chose. Nothing is remembered between steps: the decision
depends only on the current temperatures, hour and wind.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from core.models import Face, Geometry
from core.numeric import clamp01, finite_or, non_negative
from simulation.config import DEFAULT, SimConfig
from simulation.natural_ventilation import NaturalVentilation, natural_ventilation
from simulation.presets import VentilationPreset


class AdaptiveReason(StrEnum):
    COMFORTABLE = "comfortable"
    OUTDOOR_WARM = "outdoor-warm"
    NIGHT_FLOOR = "night-floor"
    DAY_COOLING = "day-cooling"
    NIGHT_COOLING = "night-cooling"


class MvhrMode(StrEnum):
    BASE = "base"
    BOOST = "boost"
    SUMMER_BYPASS = "summer-bypass"


# ---------------------------------------------------------------------------
# Base-mode outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PresetVentilation:
    """Fixed preset rate, boosted to purge rate during night purge."""

    ach_total: float
    night_purge_active: bool = False


@dataclass(frozen=True)
class AdaptiveVentilation:
    """Windows opened in proportion to overheating when outdoor air can cool."""

    ach_total: float
    reason: AdaptiveReason


@dataclass(frozen=True)
class MvhrVentilation:
    """Scheduled mechanical ventilation with summer bypass."""

    ach_total: float
    mode: MvhrMode

    @property
    def bypass_active(self) -> bool:
        return self.mode is MvhrMode.SUMMER_BYPASS


type BaseVentilation = PresetVentilation | AdaptiveVentilation | MvhrVentilation


# ---------------------------------------------------------------------------
# Strategy (what the user configured)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ManualOpenings:
    """Manually opened facade windows and rooflight."""

    area_by_face: Mapping[Face, float] = field(default_factory=dict)
    roof_opening_area_m2: float = 0.0
    stack_height_m: float | None = None
    fixed_wind_ms: float | None = None  # overrides the weather wind


@dataclass(frozen=True)
class VentilationStrategy:
    ach_total: float = 0.3
    heat_recovery_efficiency: float = 0.0
    night_purge: bool = False
    adaptive: bool = False
    mvhr_control: bool = False
    manual: ManualOpenings | None = None
    manual_open_ach: float = 0.0  # fixed extra ACH used when no openings are modelled

    @property
    def mvhr_active(self) -> bool:
        """MVHR scheduling only runs for a heat-recovery system outside adaptive mode."""
        return self.mvhr_control and not self.adaptive and self.heat_recovery_efficiency > 0

    @classmethod
    def from_preset(cls, preset: VentilationPreset, **overrides: object) -> "VentilationStrategy":
        values: dict[str, object] = {
            "ach_total": preset.ach_total,
            "heat_recovery_efficiency": preset.heat_recovery_efficiency,
            "adaptive": preset.is_adaptive,
            "mvhr_control": preset.heat_recovery_efficiency > 0,
        }
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]


@dataclass(frozen=True)
class VentilationDecision:
    """Ventilation for one step: base mode outcome plus any manual openings."""

    base: BaseVentilation
    manual: NaturalVentilation | None
    manual_open_ach: float
    ach_total: float
    ach_window: float
    effective_heat_recovery: float

    @property
    def vent_active(self) -> bool:
        return self.ach_window > 0


# ---------------------------------------------------------------------------
# Mode rules
# ---------------------------------------------------------------------------


def _is_hour_in_range(hour: int, start: int, end: int) -> bool:
    """Half-open hour window that may wrap midnight; start == end means all day."""
    hour, start, end = hour % 24, start % 24, end % 24
    if start == end:
        return True
    if start < end:
        return start <= hour < end
    return hour >= start or hour < end


def preset_ventilation(ach_total: float, hour: int, night_purge: bool, cfg: SimConfig = DEFAULT) -> PresetVentilation:
    purge_active = night_purge and cfg.is_night_hour(hour)
    target = max(ach_total, cfg.purge_ach) if purge_active else ach_total
    return PresetVentilation(ach_total=max(cfg.ach_infiltration, target), night_purge_active=purge_active)


def adaptive_ventilation(indoor_c: float, outdoor_c: float, hour: int, cfg: SimConfig = DEFAULT) -> AdaptiveVentilation:
    ac = cfg.adaptive
    night = cfg.is_night_hour(hour)
    overheat = indoor_c - cfg.comfort_band.max_c
    helpful = overheat > 0 and indoor_c - outdoor_c >= ac.min_benefit_c

    target = cfg.ach_infiltration
    if helpful and night and indoor_c <= ac.night_floor_c:
        reason = AdaptiveReason.NIGHT_FLOOR
    elif helpful:
        scale = clamp01(overheat / ac.overheat_scale_c)
        target = ac.ach_min + scale * (ac.ach_max - ac.ach_min)
        reason = AdaptiveReason.NIGHT_COOLING if night else AdaptiveReason.DAY_COOLING
    elif overheat > 0:
        reason = AdaptiveReason.OUTDOOR_WARM
    else:
        reason = AdaptiveReason.COMFORTABLE

    return AdaptiveVentilation(ach_total=max(cfg.ach_infiltration, target), reason=reason)


def mvhr_ventilation(
    indoor_c: float,
    outdoor_c: float,
    hour: int,
    base_ach: float,
    cfg: SimConfig = DEFAULT,
) -> MvhrVentilation:
    mc = cfg.mvhr
    base = max(cfg.ach_infiltration, finite_or(base_ach, cfg.ach_infiltration))
    occupied = _is_hour_in_range(hour, mc.morning_start_hour, mc.morning_end_hour) or _is_hour_in_range(
        hour, mc.evening_start_hour, mc.evening_end_hour
    )
    bypass = indoor_c > cfg.comfort_band.max_c and outdoor_c <= indoor_c - mc.bypass_benefit_c

    if bypass:
        return MvhrVentilation(ach_total=max(base, mc.summer_boost_ach), mode=MvhrMode.SUMMER_BYPASS)
    if occupied:
        return MvhrVentilation(ach_total=max(base, mc.boost_ach), mode=MvhrMode.BOOST)
    return MvhrVentilation(ach_total=base, mode=MvhrMode.BASE)


def base_ventilation(
    strategy: VentilationStrategy,
    indoor_c: float,
    outdoor_c: float,
    hour: int,
    cfg: SimConfig = DEFAULT,
) -> BaseVentilation:
    if strategy.adaptive:
        return adaptive_ventilation(indoor_c, outdoor_c, hour, cfg)
    if strategy.mvhr_active:
        return mvhr_ventilation(indoor_c, outdoor_c, hour, strategy.ach_total, cfg)
    return preset_ventilation(strategy.ach_total, hour, strategy.night_purge, cfg)


def effective_heat_recovery(
    strategy: VentilationStrategy,
    base: BaseVentilation,
    manual_open_ach: float,
) -> float:
    """Heat recovery credited this step.

    Recovery only applies to balanced mechanical ventilation, so any window
    or purge airflow and the MVHR summer bypass cancel it.
    """
    match base:
        case AdaptiveVentilation():
            return 0.0
        case MvhrVentilation(mode=MvhrMode.SUMMER_BYPASS):
            return 0.0
        case PresetVentilation(night_purge_active=True):
            return 0.0
    if manual_open_ach > 0:
        return 0.0
    return clamp01(non_negative(strategy.heat_recovery_efficiency))


def decide_ventilation(
    strategy: VentilationStrategy,
    indoor_c: float,
    outdoor_c: float,
    hour: int,
    geometry: Geometry,
    wind_ms: float | None = None,
    cfg: SimConfig = DEFAULT,
) -> VentilationDecision:
    """Total air change rate for one step.

    Args:
        strategy: Configured ventilation modes.
        indoor_c: Current indoor temperature.
        outdoor_c: Current outdoor temperature.
        hour: Local clock hour (0-23).
        geometry: Room geometry for the opening-flow model.
        wind_ms: Current wind speed, if known.
        cfg: Simulation tunables.

    Returns:
        VentilationDecision. ``ach_total`` never drops below background
        infiltration and manual openings add to the base rate.
    """
    base = base_ventilation(strategy, indoor_c, outdoor_c, hour, cfg)

    manual: NaturalVentilation | None = None
    manual_ach = non_negative(strategy.manual_open_ach)
    if strategy.manual is not None:
        openings = strategy.manual
        manual = natural_ventilation(
            openings.area_by_face,
            geometry.volume,
            roof_opening_area_m2=openings.roof_opening_area_m2,
            room_height_m=geometry.height,
            stack_height_m=openings.stack_height_m,
            wind_ms=openings.fixed_wind_ms if openings.fixed_wind_ms is not None else wind_ms,
            indoor_c=indoor_c,
            outdoor_c=outdoor_c,
            cfg=cfg,
        )
        manual_ach = manual.ach

    ach_total = base.ach_total + manual_ach
    return VentilationDecision(
        base=base,
        manual=manual,
        manual_open_ach=manual_ach,
        ach_total=ach_total,
        ach_window=max(0.0, ach_total - cfg.ach_infiltration),
        effective_heat_recovery=effective_heat_recovery(strategy, base, manual_ach),
    )
