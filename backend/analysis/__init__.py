"""Analysis utilities - pure functions over finished simulation runs."""

from analysis.cost_carbon import LETI_TARGETS, CostCarbonAssumptions, CostCarbonSummary, cost_carbon_summary
from analysis.statistics import AnnualStatistics, DaySummary, annual_statistics, summarize_day, week_series

__all__ = [
    "LETI_TARGETS",
    "AnnualStatistics",
    "CostCarbonAssumptions",
    "CostCarbonSummary",
    "DaySummary",
    "annual_statistics",
    "cost_carbon_summary",
    "summarize_day",
    "week_series",
]
