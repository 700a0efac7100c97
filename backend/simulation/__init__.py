"""Simulation module - solar geometry, heat balance and ventilation policy."""

from simulation.config import DEFAULT as DEFAULT_SIM_CONFIG
from simulation.config import SimConfig
from simulation.presets import U_VALUE_PRESETS, VENTILATION_PRESETS, u_value_preset, ventilation_preset
from simulation.snapshot import Snapshot, compute_snapshot
from simulation.solar import Radiation, SolarPosition, solar_position, sun_at
from simulation.ventilation import ManualOpenings, VentilationDecision, VentilationStrategy, decide_ventilation
from simulation.windows import build_windows, calculate_opened_window_area

__all__ = [
    "DEFAULT_SIM_CONFIG",
    "U_VALUE_PRESETS",
    "VENTILATION_PRESETS",
    "ManualOpenings",
    "Radiation",
    "SimConfig",
    "Snapshot",
    "SolarPosition",
    "VentilationDecision",
    "VentilationStrategy",
    "build_windows",
    "calculate_opened_window_area",
    "compute_snapshot",
    "decide_ventilation",
    "solar_position",
    "sun_at",
    "u_value_preset",
    "ventilation_preset",
]
