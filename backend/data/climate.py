"""Rough climatology for locations without a weather file.

Gives a synthetic profile a plausible starting point from latitude,
longitude and elevation alone. It is a teaching aid, not a climate
database.
"""

import math
from dataclasses import dataclass

from core.models import Location
from core.numeric import clamp, clamp_latitude, finite_or, normalize_longitude
from data.weather import SyntheticProfile

MIN_TIMEZONE_HOURS = -12
MAX_TIMEZONE_HOURS = 14


def clamp_timezone_hours(timezone_hours: float) -> int:
    return int(clamp(round(finite_or(timezone_hours, MIN_TIMEZONE_HOURS)), MIN_TIMEZONE_HOURS, MAX_TIMEZONE_HOURS))


def estimate_timezone_from_longitude(longitude_deg: float) -> int:
    return clamp_timezone_hours(normalize_longitude(longitude_deg) / 15)


def location_from_coordinates(
    latitude_deg: float,
    longitude_deg: float,
    timezone_hours: float | None = None,
) -> Location:
    """Build a ``Location``, estimating the timezone from longitude when not given."""
    longitude = normalize_longitude(finite_or(longitude_deg, 0.0))
    if timezone_hours is None or not math.isfinite(timezone_hours):
        tz = estimate_timezone_from_longitude(longitude)
    else:
        tz = clamp_timezone_hours(timezone_hours)
    return Location(latitude=clamp_latitude(latitude_deg), longitude=longitude, timezone_hours=tz)


@dataclass(frozen=True)
class Climatology:
    location: Location
    elevation_m: float
    summer_peak_c: float
    winter_peak_c: float
    diurnal_range_c: float
    mean_wind_ms: float
    cloud_cover_tenths: float

    def profile(self) -> SyntheticProfile:
        return SyntheticProfile(
            location=self.location,
            summer_peak_c=self.summer_peak_c,
            winter_peak_c=self.winter_peak_c,
            diurnal_range_c=self.diurnal_range_c,
            mean_wind_ms=self.mean_wind_ms,
            cloud_cover_tenths=self.cloud_cover_tenths,
        )


def infer_climatology(
    latitude_deg: float,
    longitude_deg: float,
    elevation_m: float = 0.0,
    timezone_hours: float | None = None,
) -> Climatology:
    """Estimate seasonal temperatures, wind and cloud from position.

    Temperature falls with latitude and elevation (lapse rate 6.5 K/km);
    a longitude-dependent continentality term widens the seasonal and
    diurnal swings and trades off against maritime wind and cloud.
    """
    location = location_from_coordinates(latitude_deg, longitude_deg, timezone_hours)
    elevation = max(0.0, finite_or(elevation_m, 0.0))
    abs_lat = abs(location.latitude)

    continentality = abs(math.sin(math.radians(location.longitude * 1.2 + location.latitude * 0.35)))
    maritime = 1 - continentality

    annual_mean = 28 - abs_lat * 0.42 - elevation * 0.0065
    seasonal_range = clamp(4 + abs_lat * (0.25 + continentality * 0.16), 3, 26)
    diurnal_range = clamp(5 + abs_lat * 0.045 + continentality * 3.4 + elevation / 1000 * 1.1, 4, 18)
    mean_wind = clamp(1.2 + abs_lat * 0.025 + maritime * 1.4 + continentality * 0.4, 0.8, 10)
    cloud = clamp(2.8 + maritime * 3.4 + abs_lat * 0.03, 1, 9.5)

    return Climatology(
        location=location,
        elevation_m=elevation,
        summer_peak_c=round(annual_mean + seasonal_range / 2, 2),
        winter_peak_c=round(annual_mean - seasonal_range / 2, 2),
        diurnal_range_c=round(diurnal_range, 2),
        mean_wind_ms=round(mean_wind, 2),
        cloud_cover_tenths=round(cloud, 1),
    )


def manual_profile(
    base: Climatology,
    summer_peak_c: float | None = None,
    winter_peak_c: float | None = None,
    diurnal_range_c: float = 8.0,
    mean_wind_ms: float = 2.2,
    cloud_cover_tenths: float = 4.0,
) -> SyntheticProfile:
    """Override inferred values with user input, keeping summer warmer than winter."""
    summer = finite_or(summer_peak_c, base.summer_peak_c)
    winter = finite_or(winter_peak_c, base.winter_peak_c)
    return SyntheticProfile(
        location=base.location,
        summer_peak_c=max(summer, winter + 0.5),
        winter_peak_c=min(winter, summer - 0.5),
        diurnal_range_c=clamp(finite_or(diurnal_range_c, 2.0), 2, 20),
        mean_wind_ms=clamp(finite_or(mean_wind_ms, 0.1), 0.1, 15),
        cloud_cover_tenths=clamp(finite_or(cloud_cover_tenths, 0.0), 0, 10),
    )
