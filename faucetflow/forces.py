"""
Force field.

A fixed set of invisible point forces, generated once per run.  Each force
pushes streams with a Gaussian falloff around its centre:

    |F| = strength / spread * exp(-d² / (2·spread²))

Inward forces pull toward the centre, outward forces push away from it,
and linear forces push along a fixed direction.  The magnitude is bounded
by ``strength / spread`` and shrinks monotonically with distance for
d > 0.  The centre is the one exception: the radial direction there is
the zero vector, so an inward or outward force exerts nothing at d = 0
and jumps to its peak just off it.  Linear forces have no such gap.

The per-force values are also kept in flat numpy arrays so a field query
is one vectorised pass over all forces.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError
from .params import FlowParams

logger = logging.getLogger(__name__)

# Radial sign per kind: -1 pulls toward the centre, +1 pushes away.
_RADIAL_SIGN = {"inward": -1.0, "outward": 1.0, "linear": 0.0}


def random_direction(rng: np.random.Generator) -> Tuple[float, float]:
    """Unit vector at a uniformly random angle."""
    angle = rng.random() * 2.0 * math.pi
    return (math.cos(angle), math.sin(angle))


# ---------------------------------------------------------------------------
# Force
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Force:
    """A single point force."""
    x: float
    y: float
    strength: float
    spread: float
    kind: str = "inward"
    direction: Tuple[float, float] = (0.0, 0.0)  # linear forces only

    def __post_init__(self):
        if self.kind not in _RADIAL_SIGN:
            raise ConfigurationError(f"Unknown force kind '{self.kind}'")
        if not self.spread > 0:
            raise ConfigurationError(f"Force spread must be > 0, got {self.spread!r}")

    def apply(self, px: float, py: float) -> Tuple[float, float]:
        """Push this force alone exerts at (px, py).

        Plain-Python, one-force version of ``ForceField.field_at``; the test
        suite checks the vectorised field against the sum of these.
        """
        dx = px - self.x
        dy = py - self.y
        dist = math.hypot(dx, dy)
        push = self.strength / self.spread * math.exp(-0.5 * (dist / self.spread) ** 2)
        if self.kind == "linear":
            ux, uy = self.direction
        elif dist == 0.0:
            return (0.0, 0.0)
        else:
            sign = _RADIAL_SIGN[self.kind]
            ux, uy = sign * dx / dist, sign * dy / dist
        return (push * ux, push * uy)


# ---------------------------------------------------------------------------
# Field
# ---------------------------------------------------------------------------

class ForceField:
    """Read-only collection of forces over a square canvas.

    Parameters:
        forces: The forces, in generation order.
        size:   Canvas side in pixels.
    """

    def __init__(self, forces: Sequence[Force], size: int) -> None:
        self.forces: Tuple[Force, ...] = tuple(forces)
        self.size = size

        self._x = np.array([f.x for f in self.forces], dtype=np.float64)
        self._y = np.array([f.y for f in self.forces], dtype=np.float64)
        self._spread = np.array([f.spread for f in self.forces], dtype=np.float64)
        # strength / spread folded into a single peak magnitude
        self._peak = np.array([f.strength / f.spread for f in self.forces], dtype=np.float64)
        self._sign = np.array([_RADIAL_SIGN[f.kind] for f in self.forces], dtype=np.float64)
        self._lin_x = np.array(
            [f.direction[0] if f.kind == "linear" else 0.0 for f in self.forces], dtype=np.float64
        )
        self._lin_y = np.array(
            [f.direction[1] if f.kind == "linear" else 0.0 for f in self.forces], dtype=np.float64
        )

    @classmethod
    def generate(cls, params: FlowParams, rng: np.random.Generator) -> "ForceField":
        """Draw ``params.num_forces`` forces from *rng*.

        Per force: position, kind (plus direction for linear forces),
        strength, spread.
        """
        kinds = params.force_kinds
        forces: List[Force] = []
        for _ in range(params.num_forces):
            x = rng.random() * params.size
            y = rng.random() * params.size
            kind = kinds[int(rng.random() * len(kinds))] if len(kinds) > 1 else kinds[0]
            direction = random_direction(rng) if kind == "linear" else (0.0, 0.0)
            strength = params.force_strength_dist.sample(rng)
            spread = params.force_spread_dist.sample(rng)
            forces.append(Force(x, y, strength, spread, kind, direction))
        field = cls(forces, params.size)
        logger.info(
            "Force field: %d forces (%s)", len(field),
            ", ".join(f"{k}={n}" for k, n in field.kind_counts().items()) or "none",
        )
        return field

    def __len__(self) -> int:
        return len(self.forces)

    def kind_counts(self) -> dict:
        counts = {}
        for f in self.forces:
            counts[f.kind] = counts.get(f.kind, 0) + 1
        return counts

    # ── query ─────────────────────────────────────────────────────────────

    def field_at(self, px: float, py: float) -> Tuple[float, float]:
        """Net force at (px, py): vector sum over every force."""
        if not self.forces:
            return (0.0, 0.0)
        dx = px - self._x
        dy = py - self._y
        dist = np.hypot(dx, dy)
        push = self._peak * np.exp(-0.5 * (dist / self._spread) ** 2)

        # radial unit vector away from each centre, zero at the centre
        at_centre = dist == 0.0
        safe = np.where(at_centre, 1.0, dist)
        ux = np.where(at_centre, 0.0, dx / safe)
        uy = np.where(at_centre, 0.0, dy / safe)

        fx = push * (self._sign * ux + self._lin_x)
        fy = push * (self._sign * uy + self._lin_y)
        return (float(fx.sum()), float(fy.sum()))
