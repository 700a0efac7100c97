"""Tests for plane irradiance and external shading."""

import pytest

from core.models import Blinds, Face, WindowSpec
from simulation.shading import (
    blinds_factor,
    cardinal_from_azimuth,
    combined_shading_fraction,
    fins_shading_fraction,
    louvres_shading_fraction,
    overhang_shading_fraction,
    plane_irradiance_horizontal,
    plane_irradiance_tilted,
    plane_irradiance_vertical,
    window_effective_irradiance,
    window_shading_fraction,
)
from simulation.solar import Radiation, SolarPosition

HIGH_SUMMER_SUN = SolarPosition(altitude=62.0, azimuth=180.0, declination=23.4)
LOW_WINTER_SUN = SolarPosition(altitude=15.0, azimuth=180.0, declination=-23.4)
WEST_SUN = SolarPosition(altitude=30.0, azimuth=250.0, declination=10.0)
NIGHT = SolarPosition(altitude=-10.0, azimuth=0.0, declination=0.0)
RADIATION = Radiation(dni=800.0, dhi=100.0, ghi=806.0)


# -----------------------------------------------------------------------------
# Plane projections
# -----------------------------------------------------------------------------


def test_vertical_facade_facing_away_gets_no_beam() -> None:
    north = plane_irradiance_vertical(0.0, HIGH_SUMMER_SUN, RADIATION)
    south = plane_irradiance_vertical(180.0, HIGH_SUMMER_SUN, RADIATION)
    assert north.beam == 0.0
    assert south.beam > 0
    assert north.diffuse == south.diffuse == pytest.approx(50.0)


def test_horizontal_plane_zero_at_night() -> None:
    assert plane_irradiance_horizontal(NIGHT, RADIATION).total == 0.0


def test_tilted_plane_limits() -> None:
    """Tilt 0 matches the horizontal plane; tilt 90 matches a vertical facade (diffuse aside)."""
    flat = plane_irradiance_tilted(0.0, 180.0, HIGH_SUMMER_SUN, RADIATION, 0.2)
    horizontal = plane_irradiance_horizontal(HIGH_SUMMER_SUN, RADIATION)
    assert flat.beam == pytest.approx(horizontal.beam)
    assert flat.diffuse == pytest.approx(horizontal.diffuse)
    assert flat.ground == pytest.approx(0.0)

    upright = plane_irradiance_tilted(90.0, 180.0, HIGH_SUMMER_SUN, RADIATION, 0.2)
    vertical = plane_irradiance_vertical(180.0, HIGH_SUMMER_SUN, RADIATION, 0.2)
    assert upright.beam == pytest.approx(vertical.beam)
    assert upright.ground == pytest.approx(vertical.ground)


# -----------------------------------------------------------------------------
# Shading devices
# -----------------------------------------------------------------------------


def test_zero_depth_devices_never_shade() -> None:
    for sun in (HIGH_SUMMER_SUN, LOW_WINTER_SUN, WEST_SUN):
        assert overhang_shading_fraction(1.5, 0.0, sun, 180.0) == 0.0
        assert fins_shading_fraction(1.5, 0.0, sun, 180.0) == 0.0
        assert louvres_shading_fraction(1.5, 0.0, sun, 180.0) == 0.0


def test_overhang_shades_high_sun_more_than_low_sun() -> None:
    high = overhang_shading_fraction(1.5, 0.6, HIGH_SUMMER_SUN, 180.0)
    low = overhang_shading_fraction(1.5, 0.6, LOW_WINTER_SUN, 180.0)
    assert high > low > 0


def test_shading_fractions_are_clamped() -> None:
    for depth in (0.1, 0.5, 1.5, 10.0, 100.0):
        for sun in (HIGH_SUMMER_SUN, LOW_WINTER_SUN, WEST_SUN, NIGHT):
            for fraction in (
                overhang_shading_fraction(1.5, depth, sun, 180.0),
                fins_shading_fraction(1.5, depth, sun, 180.0, overhang_depth=depth),
                louvres_shading_fraction(1.5, depth, sun, 180.0, overhang_depth=depth),
            ):
                assert 0.0 <= fraction <= 1.0


def test_fins_ignore_sun_behind_facade() -> None:
    assert fins_shading_fraction(1.5, 0.5, WEST_SUN, 90.0) == 0.0


def test_combined_shading_is_multiplicative() -> None:
    assert combined_shading_fraction(0.5, 0.5) == pytest.approx(0.75)
    assert combined_shading_fraction() == 0.0
    assert combined_shading_fraction(1.0, 0.3) == pytest.approx(1.0)


def test_window_shading_combines_devices() -> None:
    bare = WindowSpec(width=1.0, height=1.5, azimuth=180.0)
    shaded = WindowSpec(width=1.0, height=1.5, azimuth=180.0, overhang_depth=0.5, h_fin_depth=0.3)
    assert window_shading_fraction(bare, HIGH_SUMMER_SUN) == 0.0
    assert window_shading_fraction(shaded, HIGH_SUMMER_SUN) > overhang_shading_fraction(1.5, 0.5, HIGH_SUMMER_SUN, 180.0)


# -----------------------------------------------------------------------------
# Blinds and effective irradiance
# -----------------------------------------------------------------------------


def test_blinds_only_act_above_threshold() -> None:
    blinds = Blinds(enabled=True, threshold_w_m2=400.0, reduction=0.5)
    assert blinds_factor(300.0, blinds) == 1.0
    assert blinds_factor(500.0, blinds) == 0.5
    assert blinds_factor(500.0, Blinds()) == 1.0


def test_effective_irradiance_never_exceeds_incident() -> None:
    window = WindowSpec(width=1.0, height=1.5, azimuth=180.0, overhang_depth=0.8)
    gain = window_effective_irradiance(window, HIGH_SUMMER_SUN, RADIATION, Blinds(), 0.2)
    assert 0 < gain.effective_w_m2 < gain.incident.total


def test_cardinal_from_azimuth() -> None:
    assert cardinal_from_azimuth(10.0) is Face.NORTH
    assert cardinal_from_azimuth(350.0) is Face.NORTH
    assert cardinal_from_azimuth(90.0) is Face.EAST
    assert cardinal_from_azimuth(200.0) is Face.SOUTH
    assert cardinal_from_azimuth(260.0) is Face.WEST
    assert cardinal_from_azimuth(float("nan")) is None
