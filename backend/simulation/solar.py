"""Solar geometry and clear-sky irradiance.

Sun position follows the low-precision almanac algorithm (Julian date ->
ecliptic longitude -> declination and hour angle); it is accurate to a
fraction of a degree, which is plenty for planning-grade gains.

All instants passed to ``solar_position`` are naive UTC datetimes. The rest
of the engine works in local standard time and converts with ``to_utc``.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from typing import NamedTuple

from scipy.optimize import brentq

from core.models import Location
from simulation.config import DEFAULT, SimConfig

_J2000 = 2451545.0


class SolarPosition(NamedTuple):
    altitude: float  # degrees above horizon, negative at night
    azimuth: float  # degrees clockwise from north, 0-360
    declination: float


class Radiation(NamedTuple):
    """Irradiance components in W/m²."""

    dni: float
    dhi: float
    ghi: float


ZERO_RADIATION = Radiation(0.0, 0.0, 0.0)


def to_utc(local_standard: datetime, timezone_hours: float) -> datetime:
    """Convert a local standard (no daylight saving) time to UTC."""
    return local_standard - timedelta(hours=timezone_hours)


def _decimal_hours(when: datetime) -> float:
    return when.hour + when.minute / 60 + (when.second + when.microsecond / 1e6) / 3600


def local_solar_hour(when_utc: datetime, longitude_deg: float) -> float:
    """Approximate local solar hour (no equation of time), in [0, 24)."""
    return (_decimal_hours(when_utc) + longitude_deg / 15) % 24


def julian_date(when_utc: datetime) -> float:
    year, month, day = when_utc.year, when_utc.month, when_utc.day
    if month <= 2:
        year -= 1
        month += 12
    a = year // 100
    b = 2 - a + a // 4
    return (
        math.floor(365.25 * (year + 4716))
        + math.floor(30.6001 * (month + 1))
        + day
        + b
        - 1524.5
        + _decimal_hours(when_utc) / 24
    )


def solar_position(when_utc: datetime, latitude_deg: float, longitude_deg: float = 0.0) -> SolarPosition:
    """Sun altitude, azimuth and declination for a UTC instant."""
    lat = math.radians(latitude_deg)
    n = julian_date(when_utc) - _J2000

    mean_longitude = (280.46 + 0.9856474 * n) % 360
    mean_anomaly = math.radians((357.528 + 0.9856003 * n) % 360)
    ecliptic_longitude = math.radians(
        (mean_longitude + 1.915 * math.sin(mean_anomaly) + 0.02 * math.sin(2 * mean_anomaly)) % 360
    )
    obliquity = math.radians(23.439 - 0.0000004 * n)

    sin_dec = math.sin(obliquity) * math.sin(ecliptic_longitude)
    cos_dec = math.sqrt(1 - sin_dec * sin_dec)

    gmst = (18.697374558 + 24.06570982441908 * n) % 24
    lst = (gmst + longitude_deg / 15) % 24
    right_ascension = math.degrees(
        math.atan2(math.sin(ecliptic_longitude) * math.cos(obliquity), math.cos(ecliptic_longitude))
    )
    hour_angle = math.radians((lst * 15 - right_ascension) % 360)

    altitude = math.asin(math.sin(lat) * sin_dec + math.cos(lat) * cos_dec * math.cos(hour_angle))
    azimuth = math.atan2(
        -math.sin(hour_angle) * cos_dec,
        math.cos(lat) * sin_dec - math.sin(lat) * cos_dec * math.cos(hour_angle),
    )

    return SolarPosition(
        altitude=math.degrees(altitude),
        azimuth=math.degrees(azimuth) % 360,
        declination=math.degrees(math.asin(sin_dec)),
    )


def sun_at(when_local: datetime, location: Location) -> SolarPosition:
    """Sun position for a local standard time at ``location``."""
    return solar_position(to_utc(when_local, location.timezone_hours), location.latitude, location.longitude)


# ---------------------------------------------------------------------------
# Clear-sky irradiance
# ---------------------------------------------------------------------------


def clear_sky_beam_normal(altitude_deg: float, cfg: SimConfig = DEFAULT) -> float:
    """Direct-normal irradiance from a single-layer optical-depth model."""
    if altitude_deg <= 0:
        return 0.0
    air_mass = 1 / math.sin(math.radians(altitude_deg))
    return cfg.clear_sky_i0_w_m2 * cfg.clear_sky_tau**air_mass


def clear_sky(altitude_deg: float, cfg: SimConfig = DEFAULT) -> Radiation:
    if altitude_deg <= 0:
        return ZERO_RADIATION
    sin_alt = math.sin(math.radians(altitude_deg))
    dni = clear_sky_beam_normal(altitude_deg, cfg)
    dhi = cfg.clear_sky_diffuse_w_m2 * sin_alt
    return Radiation(dni=dni, dhi=dhi, ghi=max(0.0, dni * sin_alt + dhi))


def cloud_adjusted(altitude_deg: float, sky_cover_tenths: float | None, cfg: SimConfig = DEFAULT) -> Radiation:
    """Clear-sky components attenuated for total sky cover (0-10 tenths).

    Cloud removes beam and brightens the diffuse sky; without a cover value
    the clear-sky components are returned unchanged.
    """
    clear = clear_sky(altitude_deg, cfg)
    if altitude_deg <= 0 or sky_cover_tenths is None:
        return clear

    cloud = min(10.0, max(0.0, sky_cover_tenths)) / 10
    beam_factor = max(0.08, 1 - 0.8 * cloud**1.4)
    diffuse_factor = 0.65 + 0.9 * cloud
    dni = max(0.0, clear.dni * beam_factor)
    dhi = max(0.0, clear.dhi * diffuse_factor)
    ghi = max(0.0, dni * max(0.0, math.sin(math.radians(altitude_deg))) + dhi)
    return Radiation(dni=dni, dhi=dhi, ghi=ghi)


# ---------------------------------------------------------------------------
# Sunrise / sunset
# ---------------------------------------------------------------------------


class SunMode(StrEnum):
    NORMAL = "normal"
    POLAR_DAY = "day"
    POLAR_NIGHT = "night"


@dataclass(frozen=True)
class SunWindow:
    mode: SunMode
    start: datetime
    end: datetime


_SCAN_STEP_MINUTES = 2


def day_sun_times(day_start_local: datetime, location: Location) -> SunWindow:
    """Daylight window for the local day beginning at ``day_start_local``.

    A coarse two-minute scan finds the horizon crossings, then each one is
    refined with a bracketing root solve. Days with no sunrise or no sunset
    report the whole day as polar night or polar day.
    """

    def altitude_at(minutes: float) -> float:
        return sun_at(day_start_local + timedelta(minutes=minutes), location).altitude

    def crossing(lo: float, hi: float, f_lo: float, f_hi: float) -> datetime:
        if f_lo == 0 or f_hi == 0:
            root = lo if f_lo == 0 else hi
        else:
            root = brentq(altitude_at, lo, hi, xtol=1e-3)
        return day_start_local + timedelta(minutes=root)

    sunrise: datetime | None = None
    sunset: datetime | None = None
    prev_minutes = 0
    prev_alt = altitude_at(0)
    ever_above = prev_alt > 0

    for minutes in range(_SCAN_STEP_MINUTES, 24 * 60 + 1, _SCAN_STEP_MINUTES):
        alt = altitude_at(minutes)
        if sunrise is None and prev_alt <= 0 < alt:
            sunrise = crossing(prev_minutes, minutes, prev_alt, alt)
        if sunset is None and alt <= 0 < prev_alt:
            sunset = crossing(prev_minutes, minutes, prev_alt, alt)
        ever_above = ever_above or alt > 0
        prev_minutes, prev_alt = minutes, alt

    day_end = day_start_local + timedelta(days=1)
    if not ever_above:
        return SunWindow(SunMode.POLAR_NIGHT, day_start_local, day_end)
    if sunrise is None or sunset is None:
        return SunWindow(SunMode.POLAR_DAY, day_start_local, day_end)
    return SunWindow(SunMode.NORMAL, sunrise, sunset)
