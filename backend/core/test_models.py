"""Tests for core models and numeric helpers."""

import math

import pytest

from core.models import ComfortBand, ComfortState, Face, Geometry, Location, WindowSegmentState
from core.numeric import azimuth_offset, finite_or, non_negative, normalize_longitude


def test_window_leaf_cycle() -> None:
    state = WindowSegmentState.CLOSED
    seen = []
    for _ in range(3):
        state = state.next()
        seen.append(state)
    assert seen == [WindowSegmentState.TOP_HUNG, WindowSegmentState.TURN, WindowSegmentState.CLOSED]


def test_window_leaf_coerce_loose_input() -> None:
    assert WindowSegmentState.coerce(True) is WindowSegmentState.TOP_HUNG
    assert WindowSegmentState.coerce(False) is WindowSegmentState.CLOSED
    assert WindowSegmentState.coerce(None) is WindowSegmentState.CLOSED
    assert WindowSegmentState.coerce(1.4) is WindowSegmentState.TOP_HUNG
    assert WindowSegmentState.coerce(7) is WindowSegmentState.TURN
    assert WindowSegmentState.coerce(-3) is WindowSegmentState.CLOSED
    assert WindowSegmentState.coerce(float("nan")) is WindowSegmentState.CLOSED


def test_geometry_rejects_non_positive_dimensions() -> None:
    with pytest.raises(ValueError):
        Geometry(width=0.0)
    with pytest.raises(ValueError):
        Geometry(height=float("nan"))


def test_geometry_derived_sizes() -> None:
    room = Geometry(width=2.0, depth=5.0, height=3.0)
    assert room.floor_area == pytest.approx(10.0)
    assert room.volume == pytest.approx(30.0)
    assert room.face_area(Face.SOUTH) == pytest.approx(6.0)
    assert room.face_area(Face.EAST) == pytest.approx(15.0)


def test_location_is_normalised() -> None:
    site = Location(latitude=120.0, longitude=200.0, timezone_hours=float("inf"))
    assert site.latitude == 90.0
    assert site.longitude == pytest.approx(-160.0)
    assert site.timezone_hours == 0.0


def test_face_helpers() -> None:
    assert Face.SOUTH.azimuth == 180.0
    assert Face.EAST.opposite is Face.WEST
    assert Face.WEST.spans_depth and not Face.NORTH.spans_depth


def test_comfort_band_classification() -> None:
    band = ComfortBand(min_c=18.0, max_c=23.0)
    assert band.classify(17.9) is ComfortState.HEATING
    assert band.classify(18.0) is ComfortState.COMFORTABLE
    assert band.classify(23.0) is ComfortState.COMFORTABLE
    assert band.classify(23.1) is ComfortState.COOLING
    assert band.clamp(30.0) == 23.0


# -----------------------------------------------------------------------------
# Numeric helpers
# -----------------------------------------------------------------------------


def test_numeric_guards() -> None:
    assert finite_or(math.nan, 1.5) == 1.5
    assert finite_or("x", 2.0) == 2.0  # type: ignore[arg-type]
    assert non_negative(-4.0) == 0.0
    assert normalize_longitude(-180.0) == 180.0
    assert azimuth_offset(10.0, 350.0) == pytest.approx(20.0)
