"""Envelope and ventilation conductance assembly.

Conductances are U·A products in W/K. The room is a single box: four
facades, a roof (less any rooflight) and a ground floor.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from core.models import FACES, Envelope, Face, Geometry, Rooflight, WindowSpec
from core.numeric import clamp01, non_negative
from simulation.config import DEFAULT, SimConfig
from simulation.shading import cardinal_from_azimuth


@dataclass(frozen=True)
class FabricConductance:
    """Fabric areas (m²) and conductances (W/K) by element."""

    opaque_wall_area: float
    window_area: float
    rooflight_area: float
    roof_area: float
    floor_area: float
    walls: float
    windows: float
    rooflight: float
    roof: float
    floor: float

    @property
    def total(self) -> float:
        return self.walls + self.windows + self.rooflight + self.roof + self.floor


def opaque_wall_areas(geometry: Geometry, windows: Iterable[WindowSpec]) -> dict[Face, float]:
    """Gross facade areas less the glazing bucketed onto each facade."""
    areas = {face: geometry.face_area(face) for face in FACES}
    for window in windows:
        face = cardinal_from_azimuth(window.azimuth)
        if face is not None:
            areas[face] = max(0.0, areas[face] - window.area)
    return areas


def assemble_fabric_conductance(
    geometry: Geometry,
    envelope: Envelope,
    windows: Iterable[WindowSpec],
    rooflight: Rooflight | None = None,
) -> FabricConductance:
    windows = tuple(windows)
    window_area = sum(window.area for window in windows)
    wall_area = sum(max(0.0, area) for area in opaque_wall_areas(geometry, windows).values())

    rooflight_area = non_negative(rooflight.area_m2) if rooflight else 0.0
    u_rooflight = envelope.u_window
    if rooflight is not None and rooflight.u_value is not None:
        u_rooflight = rooflight.u_value

    floor_area = geometry.floor_area
    roof_area = max(0.0, floor_area - rooflight_area)

    return FabricConductance(
        opaque_wall_area=wall_area,
        window_area=window_area,
        rooflight_area=rooflight_area,
        roof_area=roof_area,
        floor_area=floor_area,
        walls=envelope.u_wall * wall_area,
        windows=envelope.u_window * window_area,
        rooflight=u_rooflight * rooflight_area,
        roof=envelope.u_roof * roof_area,
        floor=envelope.u_floor * floor_area,
    )


def ventilation_conductance(
    ach: float,
    volume_m3: float,
    heat_recovery_efficiency: float = 0.0,
    cfg: SimConfig = DEFAULT,
) -> float:
    """Air-exchange conductance ρ·cp·ACH·V/3600, less any recovered heat."""
    recovered = clamp01(non_negative(heat_recovery_efficiency))
    return cfg.rho_air * cfg.cp_air * non_negative(ach) * non_negative(volume_m3) / 3600 * (1 - recovered)
