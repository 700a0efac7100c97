"""Annual and daily comfort statistics.

Aggregation over a finished run. The hourly records only need the fields
described by ``HourlySample``, so this module does not depend on the
integrator.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

import numpy as np
from numpy.typing import NDArray

from core.models import ComfortState
from simulation.config import DEFAULT, SimConfig

HOURS_PER_WEEK = 7 * 24

MONTH_SHORT = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Inner edges; the first and last bins are open-ended.
TEMPERATURE_BIN_EDGES = (16.0, 18.0, 20.0, 22.0, 24.0, 26.0, 28.0, 30.0)


class HourlySample(Protocol):
    @property
    def time(self) -> datetime: ...
    @property
    def indoor_c(self) -> float: ...
    @property
    def outdoor_c(self) -> float: ...
    @property
    def ghi(self) -> float: ...
    @property
    def pv_plane_w_m2(self) -> float: ...
    @property
    def status(self) -> ComfortState: ...
    @property
    def heating_w(self) -> float: ...
    @property
    def cooling_w(self) -> float: ...


class DaySample(Protocol):
    @property
    def status(self) -> ComfortState: ...
    @property
    def heating_w(self) -> float: ...
    @property
    def cooling_w(self) -> float: ...


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HistogramBin:
    band: str
    hours: int


@dataclass(frozen=True)
class MonthlyOverheating:
    month: str
    over_26: int
    over_28: int


@dataclass(frozen=True)
class WeekPoint:
    hour: int
    clock: str
    indoor_c: float
    outdoor_c: float


@dataclass(frozen=True)
class WeekSeries:
    index: int
    range_label: str
    points: tuple[WeekPoint, ...]


@dataclass(frozen=True)
class WorstWeek:
    series: WeekSeries
    overheating_hours: int


@dataclass(frozen=True)
class WinterWeek:
    series: WeekSeries
    mean_outdoor_c: float


@dataclass(frozen=True)
class AnnualStatistics:
    """Summary of one annual run. Energies are thermal (kWh), irradiation in kWh/m²."""

    total_hours: int
    hours_in_comfort: int
    heating_hours: int
    cooling_hours: int
    overheating_hours_26: int
    overheating_hours_28: int
    too_cold_hours: int
    heating_degree_hours: float
    cooling_degree_hours: float
    heating_energy_kwh: float
    cooling_energy_kwh: float
    ghi_kwh_m2: float
    tilted_plane_kwh_m2: float
    peak_indoor_c: float
    peak_time: datetime
    min_indoor_c: float
    min_time: datetime
    histogram: tuple[HistogramBin, ...]
    monthly: tuple[MonthlyOverheating, ...]
    worst_week: WorstWeek
    winter_week: WinterWeek


@dataclass(frozen=True)
class DaySummary:
    comfortable_hours: float
    heating_hours: float
    cooling_hours: float
    heating_energy_kwh: float
    cooling_energy_kwh: float


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


def _bin_label(i: int) -> str:
    edges = TEMPERATURE_BIN_EDGES
    if i == 0:
        return f"<{edges[0]:g}°C"
    if i == len(edges):
        return f">{edges[-1]:g}°C"
    return f"{edges[i - 1]:g}-{edges[i]:g}°C"


def temperature_histogram(temperatures: Sequence[float] | NDArray[np.float64]) -> tuple[HistogramBin, ...]:
    """Count samples per 2 K band, lower edge inclusive.

    Every sample lands in exactly one bin; non-finite values are counted in
    the open top bin.
    """
    temps = np.asarray(temperatures, dtype=np.float64)
    idx = np.digitize(temps, TEMPERATURE_BIN_EDGES, right=False)
    counts = np.bincount(idx, minlength=len(TEMPERATURE_BIN_EDGES) + 1)
    return tuple(HistogramBin(band=_bin_label(i), hours=int(c)) for i, c in enumerate(counts))


def week_count(total_hours: int) -> int:
    return math.ceil(total_hours / HOURS_PER_WEEK)


def _month_day(when: datetime) -> str:
    return f"{MONTH_SHORT[when.month - 1]} {when.day}"


def week_series(records: Sequence[HourlySample], index: int) -> WeekSeries:
    """Extract one 168-hour block (the last one may be shorter) for charting.

    Raises:
        ValueError: If ``index`` is outside the run.
    """
    n_weeks = week_count(len(records))
    if not 0 <= index < n_weeks:
        raise ValueError(f"Week index {index} out of range [0, {n_weeks})")
    start = index * HOURS_PER_WEEK
    block = records[start : min(start + HOURS_PER_WEEK, len(records))]
    first, last = _month_day(block[0].time), _month_day(block[-1].time)
    return WeekSeries(
        index=index,
        range_label=first if first == last else f"{first} - {last}",
        points=tuple(
            WeekPoint(hour=i, clock=r.time.strftime("%H:%M"), indoor_c=r.indoor_c, outdoor_c=r.outdoor_c)
            for i, r in enumerate(block)
        ),
    )


def _non_negative_finite(values: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.where(np.isfinite(values), np.maximum(values, 0.0), 0.0)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def annual_statistics(
    records: Sequence[HourlySample],
    cfg: SimConfig = DEFAULT,
    step_hours: float = 1.0,
) -> AnnualStatistics:
    """Aggregate an hourly run into comfort, energy and chart data.

    Args:
        records: Hourly samples in time order, starting 1 Jan 00:00.
        cfg: Supplies the comfort band and overheating thresholds.
        step_hours: Duration represented by each sample.

    Returns:
        AnnualStatistics. Ties for peak/minimum temperature and for the
        worst/coldest week go to the earliest occurrence.

    Raises:
        ValueError: If ``records`` is empty.
    """
    if not records:
        raise ValueError("Cannot aggregate an empty run")
    band = cfg.comfort_band
    n = len(records)

    indoor = np.array([r.indoor_c for r in records], dtype=np.float64)
    outdoor = np.array([r.outdoor_c for r in records], dtype=np.float64)
    ghi = _non_negative_finite(np.array([r.ghi for r in records], dtype=np.float64))
    pv = _non_negative_finite(np.array([r.pv_plane_w_m2 for r in records], dtype=np.float64))
    heating_w = np.array([r.heating_w for r in records], dtype=np.float64)
    cooling_w = np.array([r.cooling_w for r in records], dtype=np.float64)
    states = [r.status for r in records]

    over_26 = indoor > cfg.overheat_threshold_c
    over_28 = indoor > cfg.severe_overheat_threshold_c

    peak_idx = int(np.argmax(indoor))
    min_idx = int(np.argmin(indoor))

    months = np.array([r.time.month - 1 for r in records], dtype=np.intp)
    monthly_26 = np.bincount(months, weights=over_26, minlength=12)
    monthly_28 = np.bincount(months, weights=over_28, minlength=12)

    n_weeks = week_count(n)
    weeks = np.arange(n) // HOURS_PER_WEEK
    weekly_over = np.bincount(weeks, weights=over_26, minlength=n_weeks)
    weekly_outdoor = np.bincount(weeks, weights=outdoor, minlength=n_weeks) / np.maximum(
        1, np.bincount(weeks, minlength=n_weeks)
    )
    worst = int(np.argmax(weekly_over))
    coldest = int(np.argmin(weekly_outdoor))

    return AnnualStatistics(
        total_hours=n,
        hours_in_comfort=states.count(ComfortState.COMFORTABLE),
        heating_hours=states.count(ComfortState.HEATING),
        cooling_hours=states.count(ComfortState.COOLING),
        overheating_hours_26=int(over_26.sum()),
        overheating_hours_28=int(over_28.sum()),
        too_cold_hours=int((indoor < band.min_c).sum()),
        heating_degree_hours=float(np.maximum(0.0, band.min_c - indoor).sum() * step_hours),
        cooling_degree_hours=float(np.maximum(0.0, indoor - band.max_c).sum() * step_hours),
        heating_energy_kwh=float(heating_w.sum() * step_hours / 1000),
        cooling_energy_kwh=float(cooling_w.sum() * step_hours / 1000),
        ghi_kwh_m2=float(ghi.sum() * step_hours / 1000),
        tilted_plane_kwh_m2=float(pv.sum() * step_hours / 1000),
        peak_indoor_c=float(indoor[peak_idx]),
        peak_time=records[peak_idx].time,
        min_indoor_c=float(indoor[min_idx]),
        min_time=records[min_idx].time,
        histogram=temperature_histogram(indoor),
        monthly=tuple(
            MonthlyOverheating(month=label, over_26=int(monthly_26[i]), over_28=int(monthly_28[i]))
            for i, label in enumerate(MONTH_SHORT)
        ),
        worst_week=WorstWeek(series=week_series(records, worst), overheating_hours=int(weekly_over[worst])),
        winter_week=WinterWeek(series=week_series(records, coldest), mean_outdoor_c=float(weekly_outdoor[coldest])),
    )


def summarize_day(records: Sequence[DaySample], step_minutes: int) -> DaySummary | None:
    """Hours per comfort state and HVAC energy for a day series.

    The final record is the following midnight and is excluded. Returns
    None when there is nothing to summarise.
    """
    if len(records) <= 1:
        return None
    step_hours = step_minutes / 60
    body = records[:-1]
    return DaySummary(
        comfortable_hours=sum(step_hours for r in body if r.status is ComfortState.COMFORTABLE),
        heating_hours=sum(step_hours for r in body if r.status is ComfortState.HEATING),
        cooling_hours=sum(step_hours for r in body if r.status is ComfortState.COOLING),
        heating_energy_kwh=sum(r.heating_w * step_hours for r in body) / 1000,
        cooling_energy_kwh=sum(r.cooling_w * step_hours for r in body) / 1000,
    )
