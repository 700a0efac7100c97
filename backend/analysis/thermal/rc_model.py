"""Single-zone first-order (1R1C) thermal model.

The zone is one thermal capacitance C coupled to outdoor air through a
lumped conductance UA (fabric plus ventilation). The governing equation is:

    C * dT/dt = Q_solar + Q_internal - UA * (T - T_out)

In discrete form with timestep dt (forward Euler):

    T(t+1) = T(t) + (dt/C) * [Q(t) - UA(t) * (T(t) - T_out(t))]

UA and Q are re-evaluated every step by the caller because shading and
ventilation depend on the current indoor temperature.
"""

from dataclasses import dataclass

from core.models import ComfortBand, ComfortState


def temperature_derivative(
    thermal_mass: float,
    passive_gain: float,
    current_temp: float,
    external_temp: float,
    total_conductance: float,
) -> float:
    """Rate of change of indoor temperature.

    Args:
        thermal_mass: Zone thermal capacitance C (J/K)
        passive_gain: Solar plus internal gains Q (W)
        current_temp: Current indoor temperature T (°C)
        external_temp: Outdoor temperature T_out (°C)
        total_conductance: Fabric plus ventilation conductance UA (W/K)

    Returns:
        dT/dt (K/s)
    """
    return (passive_gain - total_conductance * (current_temp - external_temp)) / thermal_mass


def predict_temperature_change(
    thermal_mass: float,
    passive_gain: float,
    current_temp: float,
    external_temp: float,
    total_conductance: float,
    dt_seconds: float,
) -> float:
    """Predict temperature change for a single forward-Euler timestep.

    Returns:
        Predicted temperature change dT (K)
    """
    return temperature_derivative(thermal_mass, passive_gain, current_temp, external_temp, total_conductance) * dt_seconds


def compute_steady_state_temperature(
    passive_gain: float,
    external_temp: float,
    total_conductance: float,
    epsilon: float = 1e-6,
) -> float:
    """Compute the temperature the zone settles at under constant conditions.

    At steady state, dT/dt = 0, so:
        T = T_out + Q / UA

    Conductance is floored at ``epsilon`` so a zero or near-zero UA still
    gives a finite result.

    Args:
        passive_gain: Solar plus internal gains Q (W)
        external_temp: Outdoor temperature T_out (°C)
        total_conductance: Fabric plus ventilation conductance UA (W/K)
        epsilon: Lower bound applied to UA

    Returns:
        Steady-state temperature (°C)
    """
    conductance = max(total_conductance, epsilon)
    return external_temp + passive_gain / conductance


def compute_time_constant(thermal_mass: float, total_conductance: float) -> float:
    """Compute the RC time constant.

    The time constant τ = C / UA determines how fast the room
    responds to changes in outdoor conditions.

    Returns:
        Time constant τ (seconds)
    """
    if total_conductance <= 0:
        raise ValueError("Cannot compute time constant: total conductance is not positive")
    return thermal_mass / total_conductance


# -----------------------------------------------------------------------------
# Steady-state HVAC demand
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class HvacDemand:
    """Plant power needed to hold the nearest comfort boundary (W)."""

    heating_w: float
    cooling_w: float


def steady_hvac_demand(
    status: ComfortState,
    comfort_band: ComfortBand,
    total_conductance: float,
    external_temp: float,
    passive_gain: float,
) -> HvacDemand:
    """Steady power to hold the violated comfort boundary against the current heat flows.

    Q_hvac = UA * (T_setpoint - T_out) - Q_passive, positive for heating.
    """
    setpoint = comfort_band.min_c if status is ComfortState.HEATING else comfort_band.max_c
    q_hvac = total_conductance * (setpoint - external_temp) - passive_gain
    return HvacDemand(
        heating_w=max(0.0, q_hvac) if status is ComfortState.HEATING else 0.0,
        cooling_w=max(0.0, -q_hvac) if status is ComfortState.COOLING else 0.0,
    )
