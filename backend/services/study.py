"""Comfort study service.

Composes the engine pieces a client usually wants together:
1. Day study: day simulation, comfort/energy summary and daily cost + carbon
2. Annual study: hourly run, annual statistics and annual cost + carbon

The simulation itself is stateless, so the service is plain functions.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from analysis.cost_carbon import DEFAULT_ASSUMPTIONS, CostCarbonAssumptions, CostCarbonSummary, cost_carbon_summary
from analysis.statistics import AnnualStatistics, DaySummary, annual_statistics, summarize_day
from core.models import BuildingParams
from data.weather import WeatherSource
from simulation.config import DEFAULT, SimConfig
from simulation.integrator import AnnualSimulation, DaySimulation, PvPlane, simulate_annual, simulate_day
from simulation.ventilation import VentilationStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PvArray:
    """On-site PV; with zero area no generation is credited."""

    plane: PvPlane = field(default_factory=PvPlane)
    area_m2: float = 0.0
    module_efficiency: float = 0.2

    def energy_kwh(self, plane_irradiation_kwh_m2: float) -> float:
        return max(0.0, plane_irradiation_kwh_m2 * self.area_m2 * self.module_efficiency)


@dataclass(frozen=True)
class DayStudy:
    simulation: DaySimulation
    summary: DaySummary | None
    cost: CostCarbonSummary | None


@dataclass(frozen=True)
class AnnualStudy:
    simulation: AnnualSimulation
    statistics: AnnualStatistics
    solar_kwh: float
    cost: CostCarbonSummary


def run_day_study(
    params: BuildingParams,
    day: date,
    weather: WeatherSource,
    strategy: VentilationStrategy,
    *,
    step_minutes: int | None = None,
    cfg: SimConfig = DEFAULT,
    assumptions: CostCarbonAssumptions = DEFAULT_ASSUMPTIONS,
) -> DayStudy:
    simulation = simulate_day(params, day, weather, strategy, step_minutes=step_minutes, cfg=cfg)
    summary = summarize_day(simulation.records, simulation.step_minutes)
    cost = None
    if summary is not None:
        cost = cost_carbon_summary(
            summary.heating_energy_kwh,
            summary.cooling_energy_kwh,
            params.geometry.floor_area,
            days=1,
            assumptions=assumptions,
        )
    return DayStudy(simulation=simulation, summary=summary, cost=cost)


def run_annual_study(
    params: BuildingParams,
    weather: WeatherSource,
    strategy: VentilationStrategy,
    *,
    pv: PvArray | None = None,
    cfg: SimConfig = DEFAULT,
    assumptions: CostCarbonAssumptions = DEFAULT_ASSUMPTIONS,
) -> AnnualStudy:
    """Run a full year and aggregate it.

    Args:
        params: Room, envelope, glazing and site.
        weather: Forcing source.
        strategy: Ventilation configuration.
        pv: Optional PV array; its plane orientation also sets the
            tilted-plane irradiation statistic.
        cfg: Simulation tunables.
        assumptions: Plant, tariff and carbon assumptions.

    Returns:
        AnnualStudy with the hourly series, statistics and cost summary.
    """
    pv = pv or PvArray()
    simulation = simulate_annual(params, weather, strategy, pv=pv.plane, cfg=cfg)
    stats = annual_statistics(simulation.records, cfg)
    solar_kwh = pv.energy_kwh(stats.tilted_plane_kwh_m2)
    cost = cost_carbon_summary(
        stats.heating_energy_kwh,
        stats.cooling_energy_kwh,
        params.geometry.floor_area,
        days=365,
        solar_kwh=solar_kwh,
        assumptions=assumptions,
    )
    logger.info(
        "Annual study: comfort %d h, >26C %d h, >28C %d h, heating %.0f kWh, cooling %.0f kWh, %.1f kgCO2e/m2/yr",
        stats.hours_in_comfort,
        stats.overheating_hours_26,
        stats.overheating_hours_28,
        stats.heating_energy_kwh,
        stats.cooling_energy_kwh,
        cost.carbon_intensity_kg_m2_year,
    )
    return AnnualStudy(simulation=simulation, statistics=stats, solar_kwh=solar_kwh, cost=cost)
