"""Lumped 1R1C thermal model of a single zone."""

from analysis.thermal.rc_model import (
    HvacDemand,
    compute_steady_state_temperature,
    compute_time_constant,
    predict_temperature_change,
    steady_hvac_demand,
    temperature_derivative,
)

__all__ = [
    "HvacDemand",
    "compute_steady_state_temperature",
    "compute_time_constant",
    "predict_temperature_change",
    "steady_hvac_demand",
    "temperature_derivative",
]
