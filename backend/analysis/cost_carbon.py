"""Operational energy cost and carbon from thermal demand.

Tariffs, plant efficiencies and carbon factors are injected as frozen
configuration objects; the module-level defaults are UK domestic figures
for 2025/26.
"""

from dataclasses import dataclass, field
from types import MappingProxyType

from core.numeric import finite_or


@dataclass(frozen=True)
class HeatingSystem:
    label: str = "High-efficiency gas boiler"
    efficiency: float = 0.9


@dataclass(frozen=True)
class CoolingSystem:
    label: str = "Electric DX cooling"
    cop: float = 3.0


@dataclass(frozen=True)
class BaseLoads:
    """Electrical loads that run regardless of heating or cooling."""

    lighting_w_m2: float = 8.0
    lighting_hours_per_day: float = 6.0
    small_power_w_m2: float = 5.0
    small_power_hours_per_day: float = 8.0
    mvhr_fan_w: float = 15.0
    mvhr_fan_hours_per_day: float = 24.0


@dataclass(frozen=True)
class Tariffs:
    electricity_unit_rate: float = 0.2769  # £/kWh
    electricity_standing_per_day: float = 0.5475
    export_rate: float = 0.15
    gas_unit_rate: float = 0.0593
    gas_standing_per_day: float = 0.3509
    include_standing_charges: bool = True


@dataclass(frozen=True)
class CarbonFactors:
    """kgCO2e per kWh delivered."""

    electricity_generation: float = 0.177
    electricity_transmission: float = 0.01853
    gas: float = 0.20268

    @property
    def electricity(self) -> float:
        return self.electricity_generation + self.electricity_transmission


@dataclass(frozen=True)
class CostCarbonAssumptions:
    heating: HeatingSystem = field(default_factory=HeatingSystem)
    cooling: CoolingSystem = field(default_factory=CoolingSystem)
    base_loads: BaseLoads = field(default_factory=BaseLoads)
    tariffs: Tariffs = field(default_factory=Tariffs)
    carbon: CarbonFactors = field(default_factory=CarbonFactors)


DEFAULT_ASSUMPTIONS = CostCarbonAssumptions()


@dataclass(frozen=True)
class LetiTarget:
    label: str
    kg_co2e_m2_year: float


# Operational carbon targets (kgCO2e/m²/year)
LETI_TARGETS = MappingProxyType(
    {
        "residential": LetiTarget("Residential", 35.0),
        "office": LetiTarget("Office", 55.0),
        "retail": LetiTarget("Retail", 50.0),
        "hotel": LetiTarget("Hotel", 55.0),
    }
)
DEFAULT_LETI_TARGET = "residential"


@dataclass(frozen=True)
class CostCarbonSummary:
    heating_thermal_kwh: float
    cooling_thermal_kwh: float
    heating_fuel_kwh: float
    cooling_electricity_kwh: float
    lighting_kwh: float
    small_power_kwh: float
    mvhr_fans_kwh: float
    base_electricity_kwh: float
    electricity_demand_kwh: float
    solar_kwh: float
    solar_used_on_site_kwh: float
    solar_exported_kwh: float
    grid_electricity_kwh: float
    energy_cost_gross: float
    export_revenue: float
    energy_cost: float
    standing_cost: float
    total_cost: float
    gross_carbon_kg: float
    displaced_carbon_kg: float
    carbon_kg: float
    carbon_intensity_kg_m2_year: float
    gross_carbon_intensity_kg_m2_year: float
    floor_area_m2: float

    def meets_target(self, target: LetiTarget) -> bool:
        return self.carbon_intensity_kg_m2_year <= target.kg_co2e_m2_year


def cost_carbon_summary(
    heating_thermal_kwh: float,
    cooling_thermal_kwh: float,
    floor_area_m2: float,
    days: float = 1.0,
    solar_kwh: float = 0.0,
    assumptions: CostCarbonAssumptions = DEFAULT_ASSUMPTIONS,
) -> CostCarbonSummary:
    """Convert thermal demand over ``days`` into delivered energy, cost and carbon.

    On-site PV first offsets electricity demand; any surplus is exported,
    earning the export rate and displacing grid carbon. Carbon intensity is
    annualised by 365/days so daily and annual figures compare against the
    same targets.
    """
    heating = finite_or(heating_thermal_kwh, 0.0)
    cooling = finite_or(cooling_thermal_kwh, 0.0)
    solar = max(0.0, finite_or(solar_kwh, 0.0))
    floor_area = max(1.0, finite_or(floor_area_m2, 1.0))
    days = max(0.0, finite_or(days, 1.0))
    a = assumptions

    heating_fuel = heating / max(0.01, a.heating.efficiency)
    cooling_elec = cooling / max(0.01, a.cooling.cop)

    loads = a.base_loads
    lighting = loads.lighting_w_m2 * floor_area * loads.lighting_hours_per_day * days / 1000
    small_power = loads.small_power_w_m2 * floor_area * loads.small_power_hours_per_day * days / 1000
    fans = loads.mvhr_fan_w * loads.mvhr_fan_hours_per_day * days / 1000
    base_elec = lighting + small_power + fans

    demand = cooling_elec + base_elec
    solar_used = min(demand, solar)
    solar_exported = max(0.0, solar - demand)
    grid = max(0.0, demand - solar_used)

    t = a.tariffs
    cost_gross = heating_fuel * t.gas_unit_rate + grid * t.electricity_unit_rate
    export_revenue = solar_exported * t.export_rate
    energy_cost = cost_gross - export_revenue
    standing = days * (t.gas_standing_per_day + t.electricity_standing_per_day) if t.include_standing_charges else 0.0

    gross_carbon = heating_fuel * a.carbon.gas + grid * a.carbon.electricity
    displaced = solar_exported * a.carbon.electricity
    carbon = gross_carbon - displaced
    annualisation = 365 / max(1.0, days)

    return CostCarbonSummary(
        heating_thermal_kwh=heating,
        cooling_thermal_kwh=cooling,
        heating_fuel_kwh=heating_fuel,
        cooling_electricity_kwh=cooling_elec,
        lighting_kwh=lighting,
        small_power_kwh=small_power,
        mvhr_fans_kwh=fans,
        base_electricity_kwh=base_elec,
        electricity_demand_kwh=demand,
        solar_kwh=solar,
        solar_used_on_site_kwh=solar_used,
        solar_exported_kwh=solar_exported,
        grid_electricity_kwh=grid,
        energy_cost_gross=cost_gross,
        export_revenue=export_revenue,
        energy_cost=energy_cost,
        standing_cost=standing,
        total_cost=energy_cost + standing,
        gross_carbon_kg=gross_carbon,
        displaced_carbon_kg=displaced,
        carbon_kg=carbon,
        carbon_intensity_kg_m2_year=carbon * annualisation / floor_area,
        gross_carbon_intensity_kg_m2_year=gross_carbon * annualisation / floor_area,
        floor_area_m2=floor_area,
    )
