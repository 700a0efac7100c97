"""Irradiance projection onto glazing and external shading attenuation."""

import math
from typing import NamedTuple

from core.models import Blinds, Face, WindowSpec
from core.numeric import azimuth_offset, clamp, clamp01, non_negative
from simulation.config import DEFAULT, ShadingConfig
from simulation.solar import Radiation, SolarPosition


class PlaneIrradiance(NamedTuple):
    """Incident irradiance on a surface, split by source (W/m²)."""

    beam: float
    diffuse: float
    ground: float

    @property
    def total(self) -> float:
        return self.beam + self.diffuse + self.ground


ZERO_PLANE = PlaneIrradiance(0.0, 0.0, 0.0)


# ---------------------------------------------------------------------------
# Plane projections
# ---------------------------------------------------------------------------


def plane_irradiance_vertical(
    surface_azimuth_deg: float,
    sun: SolarPosition,
    radiation: Radiation,
    ground_albedo: float = 0.2,
) -> PlaneIrradiance:
    """Isotropic-sky irradiance on a vertical facade."""
    d_az = math.radians(abs(azimuth_offset(sun.azimuth, surface_azimuth_deg)))
    cos_theta = max(0.0, math.cos(math.radians(sun.altitude)) * math.cos(d_az))
    return PlaneIrradiance(
        beam=radiation.dni * cos_theta,
        diffuse=0.5 * radiation.dhi,
        ground=0.5 * radiation.ghi * ground_albedo,
    )


def plane_irradiance_horizontal(sun: SolarPosition, radiation: Radiation) -> PlaneIrradiance:
    """Irradiance on an upward-facing horizontal surface such as a rooflight."""
    if sun.altitude <= 0:
        return ZERO_PLANE
    sin_alt = max(0.0, math.sin(math.radians(sun.altitude)))
    return PlaneIrradiance(beam=radiation.dni * sin_alt, diffuse=radiation.dhi, ground=0.0)


def plane_irradiance_tilted(
    tilt_deg: float,
    surface_azimuth_deg: float,
    sun: SolarPosition,
    radiation: Radiation,
    ground_albedo: float = 0.2,
) -> PlaneIrradiance:
    """Irradiance on an arbitrary tilted plane (0 = horizontal, 90 = vertical)."""
    beta = math.radians(clamp(tilt_deg, 0.0, 90.0))
    alt = math.radians(sun.altitude)
    d_az = math.radians(abs(azimuth_offset(sun.azimuth, surface_azimuth_deg)))
    cos_theta = math.sin(alt) * math.cos(beta) + math.cos(alt) * math.sin(beta) * math.cos(d_az)
    return PlaneIrradiance(
        beam=non_negative(radiation.dni) * max(0.0, cos_theta),
        diffuse=non_negative(radiation.dhi) * (1 + math.cos(beta)) / 2,
        ground=non_negative(radiation.ghi) * non_negative(ground_albedo) * (1 - math.cos(beta)) / 2,
    )


# ---------------------------------------------------------------------------
# External shading
# ---------------------------------------------------------------------------


def profile_angle(altitude_deg: float, sun_azimuth_deg: float, surface_azimuth_deg: float) -> float:
    """Sun altitude projected onto the vertical plane normal to the facade."""
    d_az = math.radians(abs(azimuth_offset(sun_azimuth_deg, surface_azimuth_deg)))
    return math.degrees(math.atan(math.tan(math.radians(altitude_deg)) / math.cos(d_az)))


def overhang_shading_fraction(window_height: float, depth_m: float, sun: SolarPosition, surface_azimuth_deg: float) -> float:
    if depth_m <= 0 or sun.altitude <= 0:
        return 0.0
    phi = profile_angle(sun.altitude, sun.azimuth, surface_azimuth_deg)
    shadow = depth_m * math.tan(math.radians(phi))
    if not math.isfinite(shadow) or shadow <= 0:
        return 0.0
    return clamp01(shadow / window_height)


def _blade_gap(depth_m: float, window_height: float, cfg: ShadingConfig) -> float:
    """Spacing between blades; deeper settings pack the blades closer."""
    ratio = clamp01(min(1.0, depth_m / max(0.001, window_height)))
    return cfg.max_gap_m - ratio * (cfg.max_gap_m - cfg.min_gap_m)


def _offset_drop_factor(
    shading: float,
    overhang_depth: float,
    angle_deg: float,
    window_height: float,
    cfg: ShadingConfig,
) -> float:
    """Discount blades carried on an overhang frame, clear of the glass.

    Their shadows fall further and partly miss the window at low sun.
    """
    if overhang_depth <= 1:
        return shading
    distance = overhang_depth - cfg.projection_m / 2
    drop = distance / math.tan(math.radians(max(cfg.min_drop_altitude_deg, angle_deg)))
    return shading * max(0.0, 1 - drop / (window_height * 1.5))


def fins_shading_fraction(
    window_height: float,
    fin_depth_m: float,
    sun: SolarPosition,
    surface_azimuth_deg: float,
    overhang_depth: float = 0.0,
    cfg: ShadingConfig = DEFAULT.shading,
) -> float:
    """Vertical brise-soleil: shadow width from azimuth offset over blade gap."""
    if fin_depth_m <= 0:
        return 0.0
    d_az = azimuth_offset(sun.azimuth, surface_azimuth_deg)
    if abs(d_az) >= 90:
        return 0.0

    gap = _blade_gap(fin_depth_m, window_height, cfg)
    shadow_width = abs(cfg.projection_m * math.tan(math.radians(d_az)))
    shading = _offset_drop_factor(shadow_width / gap, overhang_depth, sun.altitude, window_height, cfg)
    return clamp01(shading)


def louvres_shading_fraction(
    window_height: float,
    louvre_depth_m: float,
    sun: SolarPosition,
    surface_azimuth_deg: float,
    overhang_depth: float = 0.0,
    cfg: ShadingConfig = DEFAULT.shading,
) -> float:
    """Horizontal louvres: shadow depth from profile angle over slat gap."""
    if louvre_depth_m <= 0 or sun.altitude <= 0:
        return 0.0
    if abs(azimuth_offset(sun.azimuth, surface_azimuth_deg)) >= 90:
        return 0.0

    gap = _blade_gap(louvre_depth_m, window_height, cfg)
    phi = profile_angle(sun.altitude, sun.azimuth, surface_azimuth_deg)
    if phi <= 0:
        return 0.0
    shadow_depth = cfg.projection_m * math.tan(math.radians(phi))
    shading = _offset_drop_factor(shadow_depth / gap, overhang_depth, phi, window_height, cfg)
    return clamp01(shading)


def combined_shading_fraction(*fractions: float) -> float:
    """Independent shading devices combine multiplicatively on the unshaded part."""
    unshaded = 1.0
    for fraction in fractions:
        unshaded *= 1 - fraction
    return clamp01(1 - unshaded)


def window_shading_fraction(window: WindowSpec, sun: SolarPosition, cfg: ShadingConfig = DEFAULT.shading) -> float:
    return combined_shading_fraction(
        overhang_shading_fraction(window.height, window.overhang_depth, sun, window.azimuth),
        fins_shading_fraction(window.height, window.fin_depth, sun, window.azimuth, window.overhang_depth, cfg),
        louvres_shading_fraction(window.height, window.h_fin_depth, sun, window.azimuth, window.overhang_depth, cfg),
    )


def blinds_factor(incident_w_m2: float, blinds: Blinds) -> float:
    """Transmission multiplier for automatic blinds, driven by unshaded incident irradiance."""
    if blinds.enabled and incident_w_m2 > blinds.threshold_w_m2:
        return 1 - blinds.reduction
    return 1.0


class WindowGain(NamedTuple):
    incident: PlaneIrradiance
    shading_fraction: float
    effective_w_m2: float


def window_effective_irradiance(
    window: WindowSpec,
    sun: SolarPosition,
    radiation: Radiation,
    blinds: Blinds,
    ground_albedo: float,
    cfg: ShadingConfig = DEFAULT.shading,
) -> WindowGain:
    """Irradiance reaching the glass after external shading and blinds."""
    incident = plane_irradiance_vertical(window.azimuth, sun, radiation, ground_albedo)
    shading = window_shading_fraction(window, sun, cfg)
    shaded_total = incident.beam * (1 - shading) + incident.diffuse + incident.ground
    return WindowGain(
        incident=incident,
        shading_fraction=shading,
        effective_w_m2=shaded_total * blinds_factor(incident.total, blinds),
    )


def cardinal_from_azimuth(azimuth_deg: float) -> Face | None:
    """Bucket an azimuth to the nearest cardinal facade."""
    if not math.isfinite(azimuth_deg):
        return None
    az = azimuth_deg % 360
    if az < 45 or az >= 315:
        return Face.NORTH
    if az < 135:
        return Face.EAST
    if az < 225:
        return Face.SOUTH
    return Face.WEST
