"""Weather forcing for the thermal engine.

Two sources share one protocol: a synthetic periodic climate built from a
handful of location parameters, and a typical-year hourly dataset (8760
rows, as parsed from an EPW file by the caller). A dataset of any other
length is rejected and the synthetic climate is used instead.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import NamedTuple, Protocol

import numpy as np

from core.models import Location
from core.numeric import clamp, finite_or, lerp, non_negative
from simulation.config import DEFAULT, SimConfig
from simulation.solar import Radiation, cloud_adjusted, local_solar_hour, sun_at, to_utc

logger = logging.getLogger(__name__)

HOURS_PER_YEAR = 8760
_DAYS_PER_YEAR = 365


class HourlyWeather(NamedTuple):
    dry_bulb_c: float
    dni_wh_m2: float
    dhi_wh_m2: float
    ghi_wh_m2: float
    wind_ms: float | None = None
    sky_cover_tenths: float | None = None


@dataclass(frozen=True)
class WeatherDataset:
    """Typical-year hourly records in local standard time, starting 1 Jan 00:00."""

    hours: tuple[HourlyWeather, ...]
    timezone_hours: float = 0.0
    name: str = ""


class Forcing(NamedTuple):
    """Boundary conditions at one instant."""

    outdoor_c: float
    radiation: Radiation
    wind_ms: float
    sky_cover_tenths: float | None
    source: str


class WeatherSource(Protocol):
    """Anything that can supply forcing for a local standard time."""

    def forcing_at(self, when_local: datetime) -> Forcing: ...


# ---------------------------------------------------------------------------
# Synthetic climate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SyntheticProfile:
    location: Location
    summer_peak_c: float = 23.0
    winter_peak_c: float = 6.0
    diurnal_range_c: float = 8.0
    mean_wind_ms: float | None = None
    cloud_cover_tenths: float | None = None


def annual_peak_temperature(day_of_year: int, profile: SyntheticProfile, cfg: SimConfig = DEFAULT) -> float:
    """Daily maximum following a cosine that peaks at the local summer solstice."""
    mean = (profile.summer_peak_c + profile.winter_peak_c) / 2
    amplitude = (profile.summer_peak_c - profile.winter_peak_c) / 2
    peak_day = cfg.summer_solstice_day if profile.location.latitude >= 0 else cfg.winter_solstice_day
    return mean + amplitude * math.cos(2 * math.pi * (day_of_year - peak_day) / _DAYS_PER_YEAR)


def synthetic_outdoor_temperature(when_local: datetime, profile: SyntheticProfile, cfg: SimConfig = DEFAULT) -> float:
    """Diurnal cosine below the daily peak, warmest at 15:00 solar time."""
    daily_peak = annual_peak_temperature(when_local.timetuple().tm_yday, profile, cfg)
    amplitude = (profile.diurnal_range_c or 0.0) / 2
    hour = local_solar_hour(to_utc(when_local, profile.location.timezone_hours), profile.location.longitude)
    return daily_peak - amplitude + amplitude * math.cos(2 * math.pi * (hour - 15) / 24)


def synthetic_wind_speed(when_local: datetime, profile: SyntheticProfile, cfg: SimConfig = DEFAULT) -> float:
    """Mean wind with a daytime breeze and a windier winter, clamped to 0.3-12 m/s."""
    hour = local_solar_hour(to_utc(when_local, profile.location.timezone_hours), profile.location.longitude)
    day = when_local.timetuple().tm_yday
    mean = finite_or(profile.mean_wind_ms, cfg.natural.default_wind_ms)
    diurnal = max(0.0, math.sin((hour - 6) * math.pi / 12))
    seasonal = math.cos(2 * math.pi * (day - cfg.winter_solstice_day) / _DAYS_PER_YEAR)
    return clamp(mean + 0.7 * diurnal + 0.5 * seasonal, 0.3, 12.0)


@dataclass(frozen=True)
class SyntheticWeather:
    profile: SyntheticProfile
    cfg: SimConfig = field(default=DEFAULT)
    source_name: str = "synthetic"

    def forcing_at(self, when_local: datetime) -> Forcing:
        cloud = self.profile.cloud_cover_tenths
        if cloud is not None:
            cloud = clamp(cloud, 0.0, 10.0)
        altitude = sun_at(when_local, self.profile.location).altitude
        return Forcing(
            outdoor_c=synthetic_outdoor_temperature(when_local, self.profile, self.cfg),
            radiation=cloud_adjusted(altitude, cloud, self.cfg),
            wind_ms=synthetic_wind_speed(when_local, self.profile, self.cfg),
            sky_cover_tenths=cloud,
            source=self.source_name,
        )


# ---------------------------------------------------------------------------
# Hourly dataset
# ---------------------------------------------------------------------------


def _lerp_optional(a: float | None, b: float | None, t: float) -> float | None:
    if a is None or b is None or not (math.isfinite(a) and math.isfinite(b)):
        return None
    return lerp(a, b, t)


def _lerp_temperature(a: float, b: float, t: float) -> float | None:
    """Interpolate, holding the finite neighbour when the other is missing."""
    finite = [v for v in (a, b) if math.isfinite(v)]
    if len(finite) == 2:
        return lerp(a, b, t)
    return finite[0] if finite else None


@dataclass(frozen=True)
class DatasetWeather:
    """Interpolated hourly dataset; missing wind comes from the synthetic profile."""

    dataset: WeatherDataset
    fallback: SyntheticProfile
    cfg: SimConfig = field(default=DEFAULT)

    def forcing_at(self, when_local: datetime) -> Forcing:
        hours = self.dataset.hours
        n = len(hours)
        hour_float = when_local.hour + when_local.minute / 60 + when_local.second / 3600
        base_hour = math.floor(hour_float)
        frac = hour_float - base_hour
        idx0 = ((when_local.timetuple().tm_yday - 1) * 24 + base_hour) % n
        h0, h1 = hours[idx0], hours[(idx0 + 1) % n]

        wind = _lerp_optional(h0.wind_ms, h1.wind_ms, frac)
        if wind is None:
            wind = synthetic_wind_speed(when_local, self.fallback, self.cfg)
        outdoor = _lerp_temperature(h0.dry_bulb_c, h1.dry_bulb_c, frac)
        if outdoor is None:
            outdoor = synthetic_outdoor_temperature(when_local, self.fallback, self.cfg)

        return Forcing(
            outdoor_c=outdoor,
            radiation=Radiation(
                dni=non_negative(lerp(h0.dni_wh_m2, h1.dni_wh_m2, frac)),
                dhi=non_negative(lerp(h0.dhi_wh_m2, h1.dhi_wh_m2, frac)),
                ghi=non_negative(lerp(h0.ghi_wh_m2, h1.ghi_wh_m2, frac)),
            ),
            wind_ms=wind,
            sky_cover_tenths=_lerp_optional(h0.sky_cover_tenths, h1.sky_cover_tenths, frac),
            source="epw",
        )


def make_weather_source(
    profile: SyntheticProfile,
    dataset: WeatherDataset | None = None,
    cfg: SimConfig = DEFAULT,
) -> WeatherSource:
    """Use the dataset when it is a full typical year, otherwise the synthetic climate."""
    if dataset is None:
        return SyntheticWeather(profile, cfg)
    if len(dataset.hours) != HOURS_PER_YEAR:
        logger.warning(
            "Weather dataset %r has %d hours, expected %d; using synthetic weather",
            dataset.name,
            len(dataset.hours),
            HOURS_PER_YEAR,
        )
        return SyntheticWeather(profile, cfg)
    return DatasetWeather(dataset, profile, cfg)


# ---------------------------------------------------------------------------
# Dataset validation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatasetValidation:
    t_min: float
    t_max: float
    ghi_min: float
    ghi_max: float
    january_mean_c: float
    july_mean_c: float
    midsummer_peak_hour: int
    midsummer_peak_ghi: float

    @property
    def seasonal_check_pass(self) -> bool:
        return self.january_mean_c < self.july_mean_c

    @property
    def midday_peak_pass(self) -> bool:
        return 10 <= self.midsummer_peak_hour <= 15


def validate_dataset(dataset: WeatherDataset, cfg: SimConfig = DEFAULT) -> DatasetValidation:
    """Sanity statistics: temperature and GHI range, seasonal ordering, solar noon."""
    temps = np.array([h.dry_bulb_c for h in dataset.hours], dtype=np.float64)
    ghi = np.array([h.ghi_wh_m2 for h in dataset.hours], dtype=np.float64)
    finite_temps = temps[np.isfinite(temps)]
    finite_ghi = ghi[np.isfinite(ghi)]

    july_start = (182 - 1) * 24
    january = temps[: 31 * 24]
    july = temps[july_start : july_start + 31 * 24]

    midsummer_start = (cfg.summer_solstice_day - 1) * 24
    midsummer = ghi[midsummer_start : midsummer_start + 24]
    peak_hour = int(np.argmax(midsummer)) if midsummer.size else 0

    return DatasetValidation(
        t_min=float(finite_temps.min()) if finite_temps.size else math.nan,
        t_max=float(finite_temps.max()) if finite_temps.size else math.nan,
        ghi_min=float(finite_ghi.min()) if finite_ghi.size else math.nan,
        ghi_max=float(finite_ghi.max()) if finite_ghi.size else math.nan,
        january_mean_c=float(january.mean()) if january.size else 0.0,
        july_mean_c=float(july.mean()) if july.size else 0.0,
        midsummer_peak_hour=peak_hour,
        midsummer_peak_ghi=float(midsummer[peak_hour]) if midsummer.size else -1.0,
    )
