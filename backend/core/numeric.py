"""Small numeric helpers shared by the engine.

Every engine entry point accepts arbitrary live input, so values are
clamped or substituted rather than rejected.
"""

import math


def finite_or(value: float | None, default: float) -> float:
    """Return ``value`` if it is a finite number, otherwise ``default``."""
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def clamp(value: float, lower: float, upper: float) -> float:
    return min(upper, max(lower, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def non_negative(value: float | None) -> float:
    """Clamp to zero, treating non-finite input as zero."""
    return max(0.0, finite_or(value, 0.0))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def normalize_azimuth(azimuth_deg: float) -> float:
    """Wrap an azimuth into [0, 360)."""
    return azimuth_deg % 360.0


def azimuth_offset(sun_azimuth_deg: float, surface_azimuth_deg: float) -> float:
    """Signed angle from a surface normal to the sun, in (-180, 180]."""
    return (sun_azimuth_deg - surface_azimuth_deg + 540.0) % 360.0 - 180.0


def normalize_longitude(longitude_deg: float) -> float:
    """Wrap a longitude into (-180, 180]."""
    if not math.isfinite(longitude_deg):
        return 0.0
    wrapped = (longitude_deg + 180.0) % 360.0 - 180.0
    return 180.0 if wrapped == -180.0 else wrapped


def clamp_latitude(latitude_deg: float) -> float:
    return clamp(finite_or(latitude_deg, 0.0), -90.0, 90.0)
