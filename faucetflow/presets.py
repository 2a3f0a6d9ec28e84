"""
Named parameter presets.

Each preset is a set of overrides applied on top of the ``FlowParams``
defaults:

  - classic:  the full 1000 px, 100k stream image; a median stream
              travels ln(2) canvas widths before its budget runs out
  - preview:  small and quick, for trying seeds
  - straight: no forces; streams fly in straight rays
  - uniform:  faucets scattered across the whole canvas
  - swirl:    only outward and linear forces, long-lived streams
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .distributions import Exp, log_dist
from .params import FlowParams


@dataclass(frozen=True)
class Preset:
    """Immutable named set of parameter overrides."""
    name: str
    description: str
    overrides: Dict[str, Any] = field(default_factory=dict)

    def params(self, **changes: Any) -> FlowParams:
        """Build parameters from this preset plus *changes*."""
        values = dict(self.overrides)
        values.update(changes)
        return FlowParams(**values)


# ── Built-in presets ─────────────────────────────────────────────────────

PRESETS: Dict[str, Preset] = {
    "classic": Preset(
        name="Classic",
        description="1000 px, 200 forces, 40 faucets, 100k streams, median life ~700 px",
    ),
    "preview": Preset(
        name="Preview",
        description="300 px, 60 forces, 12 faucets, 4k streams",
        overrides=dict(
            size=300, num_forces=60, num_faucets=12, num_streams=4000,
            force_spread_dist=log_dist(60.0, 2.0),
            faucet_position_spread_dist=Exp(24.0),
            velocity_cap=12.0,
        ),
    ),
    "straight": Preset(
        name="Straight Rays",
        description="no forces, streams travel in straight lines",
        overrides=dict(size=600, num_forces=0, num_faucets=24, num_streams=20000),
    ),
    "uniform": Preset(
        name="Scattered",
        description="faucets anywhere on the canvas",
        overrides=dict(
            faucet_placement="uniform",
            faucet_position_spread_dist=Exp(20.0),
        ),
    ),
    "swirl": Preset(
        name="Swirl",
        description="outward and linear forces only, long-lived streams",
        overrides=dict(
            force_kinds=("outward", "linear"),
            decay_dist=Exp(3.0),
            fade_efolds=6.0,
        ),
    ),
}

DEFAULT_PRESET = "classic"


# ── Accessors ─────────────────────────────────────────────────────────────

def get_preset(name: str) -> Preset:
    if name not in PRESETS:
        available = ", ".join(sorted(PRESETS.keys()))
        raise KeyError(f"Unknown preset '{name}'. Available: {available}")
    return PRESETS[name]


def list_presets() -> List[str]:
    return sorted(PRESETS.keys())
