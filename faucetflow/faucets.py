"""
Faucets: the fixed emission points streams are spawned from.

Every faucet gets a position offset from the canvas centre (or from a
uniformly random point with ``faucet_placement="uniform"``), a velocity in
a random direction, and a colour jittered per channel around one centre
colour shared by the whole run.

Streams are dealt out round-robin: stream ``i`` belongs to faucet
``i % num_faucets``, so every faucet emits either floor or ceil of
``num_streams / num_faucets`` streams.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .forces import random_direction
from .params import FlowParams

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float]


@dataclass(frozen=True)
class Faucet:
    """One emission point.  Colour is signed and not yet display-clamped."""
    position: Tuple[float, float]
    velocity: Tuple[float, float]
    color: Color
    color_spread: Color = (0.0, 0.0, 0.0)


class FaucetSet:
    """Fixed, indexed sequence of faucets."""

    def __init__(self, faucets: Sequence[Faucet], color_center: Color = (0.0, 0.0, 0.0)) -> None:
        self.faucets: Tuple[Faucet, ...] = tuple(faucets)
        self.color_center = color_center

    @classmethod
    def generate(cls, params: FlowParams, rng: np.random.Generator) -> "FaucetSet":
        """Draw ``params.num_faucets`` faucets from *rng*.

        The shared colour centre is drawn first, then per faucet:
        base point (uniform placement only), offset, velocity, colour.
        """
        center_dist = params.faucet_color_center_dist
        color_center = (
            center_dist.sample(rng),
            center_dist.sample(rng),
            center_dist.sample(rng),
        )
        cx, cy = params.center

        faucets: List[Faucet] = []
        for _ in range(params.num_faucets):
            if params.faucet_placement == "uniform":
                bx = rng.random() * params.size
                by = rng.random() * params.size
            else:
                bx, by = cx, cy
            radius = params.faucet_position_spread_dist.sample(rng)
            ox, oy = random_direction(rng)
            position = (bx + radius * ox, by + radius * oy)

            speed = params.faucet_velocity_spread_dist.sample(rng)
            dx, dy = random_direction(rng)
            velocity = (speed * dx, speed * dy)

            spread = tuple(params.faucet_color_spread_dist.sample(rng) for _ in range(3))
            noise = rng.standard_normal(3)
            color = tuple(float(c + s * n) for c, s, n in zip(color_center, spread, noise))

            faucets.append(Faucet(position, velocity, color, spread))

        faucet_set = cls(faucets, color_center)
        logger.info(
            "Faucets: %d (%s placement), colour centre (%.4f, %.4f, %.4f)",
            len(faucet_set), params.faucet_placement, *color_center,
        )
        return faucet_set

    def __len__(self) -> int:
        return len(self.faucets)

    def __getitem__(self, index: int) -> Faucet:
        return self.faucets[index]

    def __iter__(self):
        return iter(self.faucets)

    # ── stream assignment ─────────────────────────────────────────────────

    def faucet_index(self, stream_index: int) -> int:
        """Index of the faucet that emits stream *stream_index*."""
        return stream_index % len(self.faucets)

    def faucet_for(self, stream_index: int) -> Faucet:
        return self.faucets[self.faucet_index(stream_index)]

    def stream_counts(self, num_streams: int) -> List[int]:
        """Number of streams each faucet emits out of *num_streams*."""
        n = len(self.faucets)
        if n == 0:
            return []
        base, extra = divmod(num_streams, n)
        return [base + 1 if i < extra else base for i in range(n)]
