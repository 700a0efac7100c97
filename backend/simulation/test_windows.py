"""Tests for window resolution, operable leaves and rooflight sizing."""

import pytest

from core.models import Face, FaceConfig, Geometry, WindowSegmentState
from simulation.windows import (
    build_preview_face_configs,
    build_windows,
    calculate_opened_window_area,
    clamp_window_center_ratio,
    operable_leaf_geometry,
    resolve_rooflight,
    resolve_window_opening_height,
    segment_key,
)

ROOM = Geometry(width=2.4, depth=4.8, height=2.6)


def test_unglazed_face_produces_no_window() -> None:
    faces = {Face.SOUTH: FaceConfig(glazing=0.5), Face.NORTH: FaceConfig(glazing=0.0, overhang=1.0)}
    windows = build_windows(faces, ROOM)
    assert len(windows) == 1
    assert windows[0].azimuth == 180.0
    assert windows[0].area == pytest.approx(2.4 * 0.5 * 2.6)


def test_glazing_is_capped() -> None:
    windows = build_windows({Face.EAST: FaceConfig(glazing=1.0)}, ROOM)
    assert windows[0].width == pytest.approx(4.8 * 0.8)


def test_orientation_rotates_windows() -> None:
    windows = build_windows({Face.SOUTH: FaceConfig(glazing=0.5)}, ROOM, orientation_deg=200.0)
    assert windows[0].azimuth == pytest.approx(20.0)


def test_shading_ratios_become_depths() -> None:
    window = build_windows({Face.SOUTH: FaceConfig(glazing=0.5, overhang=3.0, fin=0.5, h_fin=0.25)}, ROOM)[0]
    assert window.overhang_depth == pytest.approx(1.5)
    assert window.fin_depth == pytest.approx(1.3)
    assert window.h_fin_depth == pytest.approx(0.65)


def test_cill_lift_and_head_drop_keep_min_clear_height() -> None:
    opening = resolve_window_opening_height(2.6, cill_lift=3.0, head_drop=1.0, min_clear_height=0.4)
    assert opening.cill_lift == pytest.approx(2.2)
    assert opening.head_drop == pytest.approx(0.0)
    assert opening.effective_height == pytest.approx(0.4)


def test_center_ratio_keeps_window_on_facade() -> None:
    assert clamp_window_center_ratio(0.6, 0.9) == pytest.approx(0.4)
    assert clamp_window_center_ratio(0.6, -0.9) == pytest.approx(-0.4)


def test_preview_covers_every_face() -> None:
    previews = build_preview_face_configs({Face.SOUTH: FaceConfig(glazing=0.5)}, ROOM)
    assert set(previews) == set(Face)
    assert previews[Face.NORTH].glazing == 0.0


# -----------------------------------------------------------------------------
# Operable leaves
# -----------------------------------------------------------------------------


def test_leaf_geometry_splits_wide_windows() -> None:
    leaves = operable_leaf_geometry(2.4, FaceConfig(glazing=0.5), 2.6)
    assert leaves is not None
    assert leaves.leaf_count == 2
    assert leaves.top_hung_area_per_leaf == pytest.approx(0.525 * 0.15 * 0.65)
    assert leaves.turn_area_per_leaf == pytest.approx(0.525 * 2.5 * 0.45)
    assert operable_leaf_geometry(2.4, FaceConfig(glazing=0.0), 2.6) is None


def test_opened_area_by_leaf_state() -> None:
    faces = {Face.SOUTH: FaceConfig(glazing=0.5)}
    segments = {
        segment_key(Face.SOUTH, 0): WindowSegmentState.TOP_HUNG,
        segment_key(Face.SOUTH, 1): WindowSegmentState.TURN,
        "north:0": True,
    }
    opened = calculate_opened_window_area(faces, ROOM, segments)
    south = opened.by_face[Face.SOUTH]
    assert south.top_hung_leaf_count == 1
    assert south.turn_leaf_count == 1
    assert opened.total_open_area_m2 == pytest.approx(0.525 * 0.15 * 0.65 + 0.525 * 2.5 * 0.45)
    assert opened.area_by_face()[Face.NORTH] == 0.0
    assert opened.open_leaf_count == 2
    assert opened.total_leaf_count == 2


def test_no_segments_means_closed() -> None:
    opened = calculate_opened_window_area({Face.SOUTH: FaceConfig(glazing=0.5)}, ROOM, {})
    assert opened.total_open_area_m2 == 0.0


# -----------------------------------------------------------------------------
# Rooflight
# -----------------------------------------------------------------------------


def test_rooflight_fits_inside_parapet() -> None:
    layout = resolve_rooflight(ROOM, width=10.0, depth=10.0, open_height=1.0)
    assert layout.width == pytest.approx(1.4)
    assert layout.depth == pytest.approx(3.8)
    assert layout.open_height == pytest.approx(0.2)
    assert layout.opening_area_m2 == pytest.approx(1.4 * 0.2)
    assert layout.is_open


def test_rooflight_defaults_closed_at_minimum_span() -> None:
    layout = resolve_rooflight(ROOM)
    assert layout.width == pytest.approx(1.0)
    assert layout.opening_area_m2 == 0.0
    assert not layout.is_open
