"""Read-only preset tables for fabric and ventilation choices.

Tables are wrapped in ``MappingProxyType`` so callers can pass them around
without risk of mutation; alternate tables can be injected wherever a
preset is looked up.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from core.models import Envelope


@dataclass(frozen=True)
class UValuePreset:
    label: str
    wall: float
    roof: float
    floor: float
    window: float

    def envelope(self, g_glass: float = 0.4) -> Envelope:
        return Envelope(
            u_wall=self.wall,
            u_roof=self.roof,
            u_floor=self.floor,
            u_window=self.window,
            g_glass=g_glass,
        )


@dataclass(frozen=True)
class VentilationPreset:
    label: str
    ach_total: float
    heat_recovery_efficiency: float = 0.0
    is_adaptive: bool = False


U_VALUE_PRESETS: Mapping[str, UValuePreset] = MappingProxyType(
    {
        "baseline": UValuePreset("Baseline - Building Regs 2025", wall=0.35, roof=0.2, floor=0.25, window=1.1),
        "improved": UValuePreset("25% Above Baseline", wall=0.25, roof=0.15, floor=0.2, window=0.9),
        "high": UValuePreset("High-performance", wall=0.15, roof=0.15, floor=0.15, window=0.7),
        "passivhaus": UValuePreset("Passivhaus (indicative)", wall=0.1, roof=0.1, floor=0.1, window=0.8),
    }
)
DEFAULT_U_VALUE_PRESET = "high"

VENTILATION_PRESETS: Mapping[str, VentilationPreset] = MappingProxyType(
    {
        "background": VentilationPreset("Background only", ach_total=0.3),
        "trickle": VentilationPreset("Trickle vents", ach_total=0.6),
        "passivhaus": VentilationPreset("MVHR (Passivhaus-style)", ach_total=0.4, heat_recovery_efficiency=0.85),
        "open": VentilationPreset("Open windows", ach_total=3.0),
        "purge": VentilationPreset("Purge", ach_total=6.0),
        "adaptive": VentilationPreset("Adaptive", ach_total=0.3, is_adaptive=True),
    }
)
DEFAULT_VENTILATION_PRESET = "background"


def u_value_preset(preset_id: str, presets: Mapping[str, UValuePreset] = U_VALUE_PRESETS) -> UValuePreset:
    """Look up a fabric preset, falling back to the default for unknown ids."""
    return presets.get(preset_id) or presets[DEFAULT_U_VALUE_PRESET]


def ventilation_preset(
    preset_id: str,
    presets: Mapping[str, VentilationPreset] = VENTILATION_PRESETS,
) -> VentilationPreset:
    """Look up a ventilation preset, falling back to the default for unknown ids."""
    return presets.get(preset_id) or presets[DEFAULT_VENTILATION_PRESET]
