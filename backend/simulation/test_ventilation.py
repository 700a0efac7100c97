"""Tests for the ventilation policy and the opening-flow model."""

import pytest

from core.models import Face, Geometry
from simulation.config import DEFAULT
from simulation.natural_ventilation import (
    DraughtRisk,
    NaturalVentMode,
    ach_from_opening_area,
    assess_draught,
    natural_ventilation,
    required_opening_area,
)
from simulation.presets import ventilation_preset
from simulation.ventilation import (
    AdaptiveReason,
    AdaptiveVentilation,
    ManualOpenings,
    MvhrMode,
    MvhrVentilation,
    PresetVentilation,
    VentilationStrategy,
    decide_ventilation,
)

ROOM = Geometry()


# -----------------------------------------------------------------------------
# Base modes
# -----------------------------------------------------------------------------


def test_closed_manual_openings_give_background_rate() -> None:
    strategy = VentilationStrategy(manual=ManualOpenings())
    decision = decide_ventilation(strategy, 22.0, 15.0, 14, ROOM)
    assert decision.ach_total == DEFAULT.ach_infiltration
    assert decision.ach_window == 0.0
    assert not decision.vent_active


def test_preset_rate_never_below_infiltration() -> None:
    decision = decide_ventilation(VentilationStrategy(ach_total=0.0), 20.0, 10.0, 12, ROOM)
    assert decision.ach_total == pytest.approx(DEFAULT.ach_infiltration)


def test_night_purge_only_at_night() -> None:
    strategy = VentilationStrategy(night_purge=True)
    night = decide_ventilation(strategy, 24.0, 16.0, 23, ROOM)
    day = decide_ventilation(strategy, 24.0, 16.0, 12, ROOM)
    assert night.base == PresetVentilation(ach_total=DEFAULT.purge_ach, night_purge_active=True)
    assert night.vent_active
    assert day.ach_total == pytest.approx(0.3)


def test_adaptive_opens_when_outdoor_is_cooler() -> None:
    strategy = VentilationStrategy.from_preset(ventilation_preset("adaptive"))
    decision = decide_ventilation(strategy, 26.0, 18.0, 14, ROOM)
    assert isinstance(decision.base, AdaptiveVentilation)
    assert decision.base.reason is AdaptiveReason.DAY_COOLING
    assert decision.ach_total == pytest.approx(DEFAULT.adaptive.ach_max)
    assert decision.effective_heat_recovery == 0.0


def test_adaptive_stays_shut_when_outdoor_is_warmer() -> None:
    strategy = VentilationStrategy(adaptive=True)
    decision = decide_ventilation(strategy, 25.0, 30.0, 14, ROOM)
    assert decision.base == AdaptiveVentilation(ach_total=0.3, reason=AdaptiveReason.OUTDOOR_WARM)
    comfortable = decide_ventilation(strategy, 21.0, 15.0, 14, ROOM)
    assert comfortable.base == AdaptiveVentilation(ach_total=0.3, reason=AdaptiveReason.COMFORTABLE)


def test_adaptive_rate_scales_with_overheating() -> None:
    strategy = VentilationStrategy(adaptive=True)
    mild = decide_ventilation(strategy, 24.0, 15.0, 14, ROOM)
    hot = decide_ventilation(strategy, 25.5, 15.0, 14, ROOM)
    assert DEFAULT.adaptive.ach_min < mild.ach_total < hot.ach_total < DEFAULT.adaptive.ach_max


def test_mvhr_schedule_and_bypass() -> None:
    strategy = VentilationStrategy.from_preset(ventilation_preset("passivhaus"))
    assert strategy.mvhr_active

    morning = decide_ventilation(strategy, 20.0, 5.0, 7, ROOM)
    assert morning.base == MvhrVentilation(ach_total=DEFAULT.mvhr.boost_ach, mode=MvhrMode.BOOST)
    assert morning.effective_heat_recovery == pytest.approx(0.85)

    midday = decide_ventilation(strategy, 20.0, 5.0, 12, ROOM)
    assert midday.base == MvhrVentilation(ach_total=0.4, mode=MvhrMode.BASE)

    summer = decide_ventilation(strategy, 25.0, 18.0, 12, ROOM)
    assert isinstance(summer.base, MvhrVentilation)
    assert summer.base.bypass_active
    assert summer.ach_total == pytest.approx(DEFAULT.mvhr.summer_boost_ach)
    assert summer.effective_heat_recovery == 0.0


def test_adaptive_takes_precedence_over_mvhr() -> None:
    strategy = VentilationStrategy(ach_total=0.4, heat_recovery_efficiency=0.85, mvhr_control=True, adaptive=True)
    assert not strategy.mvhr_active
    decision = decide_ventilation(strategy, 20.0, 5.0, 7, ROOM)
    assert isinstance(decision.base, AdaptiveVentilation)


def test_manual_ach_adds_to_base_and_cancels_recovery() -> None:
    strategy = VentilationStrategy(ach_total=0.4, heat_recovery_efficiency=0.85, manual_open_ach=2.0)
    decision = decide_ventilation(strategy, 22.0, 15.0, 12, ROOM)
    assert decision.ach_total == pytest.approx(2.4)
    assert decision.ach_window == pytest.approx(2.1)
    assert decision.effective_heat_recovery == 0.0


def test_modelled_openings_add_to_base() -> None:
    openings = ManualOpenings(area_by_face={Face.SOUTH: 0.3, Face.NORTH: 0.3}, fixed_wind_ms=3.0)
    strategy = VentilationStrategy(ach_total=0.6, manual=openings)
    decision = decide_ventilation(strategy, 22.0, 15.0, 12, ROOM)
    assert decision.manual is not None
    assert decision.manual.mode is NaturalVentMode.CROSS
    assert decision.ach_total == pytest.approx(0.6 + decision.manual.ach)


# -----------------------------------------------------------------------------
# Opening-flow model
# -----------------------------------------------------------------------------


def test_no_openings_no_flow() -> None:
    result = natural_ventilation({}, ROOM.volume, room_height_m=ROOM.height, wind_ms=5.0)
    assert result.mode is NaturalVentMode.NONE
    assert result.ach == 0.0


def test_cross_ventilation_beats_single_sided() -> None:
    single = natural_ventilation({Face.SOUTH: 0.6}, ROOM.volume, room_height_m=ROOM.height, wind_ms=3.0)
    cross = natural_ventilation(
        {Face.SOUTH: 0.3, Face.NORTH: 0.3}, ROOM.volume, room_height_m=ROOM.height, wind_ms=3.0
    )
    assert single.mode is NaturalVentMode.SINGLE_SIDED
    assert cross.mode is NaturalVentMode.CROSS
    assert cross.cross_pair == (Face.NORTH, Face.SOUTH)
    assert cross.ach > single.ach > 0


def test_adjacent_faces_are_multi_face() -> None:
    result = natural_ventilation({Face.SOUTH: 0.3, Face.EAST: 0.3}, ROOM.volume, room_height_m=ROOM.height)
    assert result.mode is NaturalVentMode.MULTI_FACE


def test_roof_only_flow_is_driven_by_stack() -> None:
    still = natural_ventilation(
        {}, ROOM.volume, roof_opening_area_m2=0.2, room_height_m=ROOM.height, wind_ms=0.0, indoor_c=22, outdoor_c=22
    )
    buoyant = natural_ventilation(
        {}, ROOM.volume, roof_opening_area_m2=0.2, room_height_m=ROOM.height, wind_ms=0.0, indoor_c=24, outdoor_c=10
    )
    assert buoyant.mode is NaturalVentMode.ROOF_ONLY
    assert still.ach == 0.0
    assert buoyant.ach > 0


def test_opening_area_helpers_are_inverse() -> None:
    estimate = required_opening_area(2.0, ROOM.volume)
    assert ach_from_opening_area(estimate.area_m2, ROOM.volume) == pytest.approx(2.0)
    assert ach_from_opening_area(1.0, 0.0) == 0.0


def test_draught_risk_grows_with_cold_airflow() -> None:
    assert assess_draught(0.3, 22.0, 5.0).risk is DraughtRisk.LOW
    cold = assess_draught(8.0, 22.0, 5.0)
    warm = assess_draught(8.0, 22.0, 25.0)
    assert cold.risk is DraughtRisk.HIGH
    assert cold.likely_uncomfortable
    assert warm.apparent_cooling_c < cold.apparent_cooling_c
