"""Facade window resolution, operable leaves and rooflight sizing.

Face configurations arrive from the UI as ratios and offsets; this module
turns them into ``WindowSpec`` records for the thermal engine, geometry
descriptors for the 3D preview, and opened areas for the natural
ventilation model.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field

from core.models import FACES, Face, FaceConfig, Geometry, WindowSegmentState, WindowSpec
from core.numeric import clamp, clamp01, finite_or, non_negative, normalize_azimuth
from simulation.config import DEFAULT, SimConfig

_MIN_GLAZING = 0.001
_MIN_PANE_M = 0.02

type FaceState = Mapping[Face, FaceConfig]


def ratio_to_depth_m(ratio: float, room_height: float) -> float:
    return clamp01(finite_or(ratio, 0.0)) * room_height


def clamp_glazing(glazing: float, cfg: SimConfig = DEFAULT) -> float:
    return clamp(finite_or(glazing, 0.0), 0.0, cfg.shading.max_glazing)


@dataclass(frozen=True)
class WindowOpening:
    cill_lift: float
    head_drop: float
    effective_height: float


def resolve_window_opening_height(
    opening_height: float,
    cill_lift: float = 0.0,
    head_drop: float = 0.0,
    min_clear_height: float = DEFAULT.shading.min_window_clear_height_m,
) -> WindowOpening:
    """Apply cill lift and head drop without squeezing the window below its minimum clear height."""
    height = max(0.0, opening_height)
    min_clear = max(0.0, min_clear_height)
    lift = clamp(finite_or(cill_lift, 0.0), 0.0, max(0.0, height - min_clear))
    drop = clamp(finite_or(head_drop, 0.0), 0.0, max(0.0, height - lift - min_clear))
    return WindowOpening(cill_lift=lift, head_drop=drop, effective_height=max(0.0, height - lift - drop))


def clamp_window_center_ratio(glazing: float, center_ratio: float = 0.0, cfg: SimConfig = DEFAULT) -> float:
    """Keep the window inside the facade when it is slid sideways."""
    limit = max(0.0, 1 - clamp_glazing(glazing, cfg))
    return clamp(finite_or(center_ratio, 0.0), -limit, limit)


# ---------------------------------------------------------------------------
# Thermal windows and preview descriptors
# ---------------------------------------------------------------------------


def build_windows(
    face_state: FaceState,
    geometry: Geometry,
    orientation_deg: float = 0.0,
    cfg: SimConfig = DEFAULT,
) -> tuple[WindowSpec, ...]:
    """One ``WindowSpec`` per glazed facade, rotated by the building orientation."""
    windows: list[WindowSpec] = []
    for face in FACES:
        config = face_state.get(face)
        if config is None:
            continue
        glazing = clamp_glazing(config.glazing, cfg)
        if glazing <= _MIN_GLAZING:
            continue
        opening = resolve_window_opening_height(
            geometry.height, config.cill_lift, config.head_drop, cfg.shading.min_window_clear_height_m
        )
        if opening.effective_height <= _MIN_GLAZING:
            continue
        windows.append(
            WindowSpec(
                width=geometry.face_span(face) * glazing,
                height=opening.effective_height,
                azimuth=normalize_azimuth(face.azimuth + orientation_deg),
                overhang_depth=clamp(non_negative(config.overhang), 0.0, cfg.shading.max_overhang_m),
                fin_depth=ratio_to_depth_m(config.fin, geometry.height),
                h_fin_depth=ratio_to_depth_m(config.h_fin, geometry.height),
            )
        )
    return tuple(windows)


@dataclass(frozen=True)
class PreviewFace:
    """Resolved facade geometry for the 3D preview."""

    glazing: float
    overhang: float
    fin: float
    h_fin: float
    window_center_ratio: float
    cill_lift: float
    head_drop: float
    effective_height: float


def build_preview_face_configs(
    face_state: FaceState,
    geometry: Geometry,
    cfg: SimConfig = DEFAULT,
) -> dict[Face, PreviewFace]:
    previews: dict[Face, PreviewFace] = {}
    for face in FACES:
        config = face_state.get(face) or FaceConfig()
        glazing = clamp_glazing(config.glazing, cfg)
        opening = resolve_window_opening_height(
            geometry.height, config.cill_lift, config.head_drop, cfg.shading.min_window_clear_height_m
        )
        previews[face] = PreviewFace(
            glazing=glazing,
            overhang=clamp(non_negative(config.overhang), 0.0, cfg.shading.max_overhang_m),
            fin=ratio_to_depth_m(config.fin, geometry.height),
            h_fin=ratio_to_depth_m(config.h_fin, geometry.height),
            window_center_ratio=clamp_window_center_ratio(glazing, config.window_center_ratio, cfg),
            cill_lift=opening.cill_lift,
            head_drop=opening.head_drop,
            effective_height=opening.effective_height,
        )
    return previews


# ---------------------------------------------------------------------------
# Operable leaves
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LeafGeometry:
    leaf_count: int
    top_hung_area_per_leaf: float
    turn_area_per_leaf: float

    @property
    def max_opening_area(self) -> float:
        return max(self.top_hung_area_per_leaf, self.turn_area_per_leaf) * self.leaf_count

    def area_for(self, state: WindowSegmentState) -> float:
        match state:
            case WindowSegmentState.TOP_HUNG:
                return self.top_hung_area_per_leaf
            case WindowSegmentState.TURN:
                return self.turn_area_per_leaf
            case WindowSegmentState.CLOSED:
                return 0.0


def operable_leaf_geometry(
    face_span: float,
    config: FaceConfig,
    room_height: float,
    cfg: SimConfig = DEFAULT,
) -> LeafGeometry | None:
    """Split a facade window into leaves no wider than the maximum leaf width."""
    glazing = clamp_glazing(config.glazing, cfg)
    if glazing <= _MIN_GLAZING:
        return None
    opening = resolve_window_opening_height(
        room_height, config.cill_lift, config.head_drop, cfg.shading.min_window_clear_height_m
    )
    window_height = opening.effective_height
    if window_height <= _MIN_GLAZING:
        return None

    nv = cfg.natural
    window_width = face_span * glazing
    frame = min(nv.frame_profile_m, window_width * 0.45, window_height * 0.45)
    clear_width = max(_MIN_PANE_M, window_width - frame * 2)
    clear_height = max(_MIN_PANE_M, window_height - frame * 2)
    leaf_count = max(1, math.ceil(clear_width / nv.max_leaf_width_m))
    mullion = frame if leaf_count > 1 else 0.0
    leaf_width = max(_MIN_PANE_M, (clear_width - mullion * (leaf_count - 1)) / leaf_count)
    travel = min(nv.open_travel_m, clear_height)

    return LeafGeometry(
        leaf_count=leaf_count,
        top_hung_area_per_leaf=max(0.0, leaf_width * travel * nv.top_hung_effectiveness),
        turn_area_per_leaf=max(0.0, leaf_width * clear_height * nv.turn_effectiveness),
    )


def segment_key(face: Face, leaf_index: int) -> str:
    return f"{face.value}:{leaf_index}"


@dataclass
class FaceOpening:
    open_area_m2: float = 0.0
    top_hung_area_m2: float = 0.0
    turn_area_m2: float = 0.0
    top_hung_leaf_count: int = 0
    turn_leaf_count: int = 0
    total_leaf_count: int = 0

    @property
    def open_leaf_count(self) -> int:
        return self.top_hung_leaf_count + self.turn_leaf_count


@dataclass
class OpenedWindowArea:
    by_face: dict[Face, FaceOpening] = field(default_factory=dict)

    @property
    def total_open_area_m2(self) -> float:
        return sum(opening.open_area_m2 for opening in self.by_face.values())

    @property
    def open_leaf_count(self) -> int:
        return sum(opening.open_leaf_count for opening in self.by_face.values())

    @property
    def total_leaf_count(self) -> int:
        return sum(opening.total_leaf_count for opening in self.by_face.values())

    def area_by_face(self) -> dict[Face, float]:
        return {face: self.by_face[face].open_area_m2 if face in self.by_face else 0.0 for face in FACES}


def calculate_opened_window_area(
    face_state: FaceState,
    geometry: Geometry,
    segments: Mapping[str, WindowSegmentState | bool | float],
    cfg: SimConfig = DEFAULT,
) -> OpenedWindowArea:
    """Free opening area per facade given each leaf's state.

    ``segments`` is keyed ``"<face>:<leaf index>"``; missing keys are closed.
    """
    result = OpenedWindowArea()
    for face in FACES:
        opening = FaceOpening()
        result.by_face[face] = opening
        config = face_state.get(face)
        if config is None:
            continue
        leaves = operable_leaf_geometry(geometry.face_span(face), config, geometry.height, cfg)
        if leaves is None:
            continue

        opening.total_leaf_count = leaves.leaf_count
        for leaf_index in range(leaves.leaf_count):
            state = WindowSegmentState.coerce(segments.get(segment_key(face, leaf_index)))
            area = leaves.area_for(state)
            opening.open_area_m2 += area
            if state is WindowSegmentState.TOP_HUNG:
                opening.top_hung_leaf_count += 1
                opening.top_hung_area_m2 += area
            elif state is WindowSegmentState.TURN:
                opening.turn_leaf_count += 1
                opening.turn_area_m2 += area
    return result


# ---------------------------------------------------------------------------
# Rooflight
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RooflightLayout:
    width: float
    depth: float
    max_width: float
    max_depth: float
    open_height: float
    opening_area_m2: float

    @property
    def area_m2(self) -> float:
        return self.width * self.depth

    @property
    def is_open(self) -> bool:
        return self.open_height > 1e-6


def resolve_rooflight(
    geometry: Geometry,
    width: float | None = None,
    depth: float | None = None,
    open_height: float | None = None,
    cfg: SimConfig = DEFAULT,
) -> RooflightLayout:
    """Fit a rooflight inside the parapet and size its hinged opening."""
    rc = cfg.rooflight
    max_width = max(rc.min_clear_span_m, geometry.width - rc.edge_offset_m * 2)
    max_depth = max(rc.min_clear_span_m, geometry.depth - rc.edge_offset_m * 2)
    resolved_width = clamp(finite_or(width, rc.min_clear_span_m), rc.min_clear_span_m, max_width)
    resolved_depth = clamp(finite_or(depth, rc.min_clear_span_m), rc.min_clear_span_m, max_depth)
    lift = clamp(finite_or(open_height, 0.0), 0.0, rc.max_open_m)
    return RooflightLayout(
        width=resolved_width,
        depth=resolved_depth,
        max_width=max_width,
        max_depth=max_depth,
        open_height=lift,
        opening_area_m2=max(0.0, resolved_width * lift),
    )
