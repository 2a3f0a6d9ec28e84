"""
Stream integrator.

A stream starts at its faucet and is advanced one unit time step at a
time.  Each step it

  1. reads the net force at its position and adds it to its velocity,
     saturating each velocity component at ``±velocity_cap``
  2. rasterises the segment to its next position onto the canvas
  3. moves, and fades its colour by the distance travelled, saturating
     each channel at ``±color_cap``

Decay model: a stream's lifetime budget is ``decay_factor · size`` pixels
of travel, and its intensity falls as ``exp(-fade_efolds · age / budget)``
where ``age`` is the travel consumed so far.  Every step consumes at least
one pixel of budget, so a stream can never outlive ``max_steps(params)``.

A stream ends ``OUT_OF_BOUNDS`` once it leaves the canvas or ``DECAYED``
once its budget is spent or its colour is negligible.  Termination is
final.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .canvas import Canvas
from .faucets import Faucet
from .forces import ForceField
from .params import FlowParams

logger = logging.getLogger(__name__)

NEGLIGIBLE_COLOR = 1e-9


class Termination(Enum):
    OUT_OF_BOUNDS = "out_of_bounds"
    DECAYED = "decayed"


def _clamp(value: float, cap: float) -> float:
    return max(-cap, min(cap, value))


def max_steps(params: FlowParams) -> int:
    """Hard upper bound on the steps any stream can take."""
    return int(math.ceil(params.max_decay_factor * params.size)) + 1


# ---------------------------------------------------------------------------
# Stream state
# ---------------------------------------------------------------------------

@dataclass
class StreamState:
    """Mutable state of one in-flight stream."""
    x: float
    y: float
    vx: float
    vy: float
    color: np.ndarray
    decay_factor: float
    steps_taken: int = 0
    age: int = 0
    reason: Optional[Termination] = None

    @property
    def active(self) -> bool:
        return self.reason is None

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def velocity(self) -> Tuple[float, float]:
        return (self.vx, self.vy)


def spawn_stream(faucet: Faucet, params: FlowParams, rng: np.random.Generator) -> StreamState:
    """Initial state for a stream leaving *faucet*.

    Draws, in order: two position jitters, two velocity jitters and the
    decay factor.
    """
    pos_jitter = params.stream_position_jitter
    vel_jitter = params.stream_velocity_jitter
    x = faucet.position[0] + float(rng.normal(0.0, pos_jitter))
    y = faucet.position[1] + float(rng.normal(0.0, pos_jitter))
    vx = faucet.velocity[0] + float(rng.normal(0.0, vel_jitter))
    vy = faucet.velocity[1] + float(rng.normal(0.0, vel_jitter))
    decay = params.decay_dist.sample(rng)
    decay = max(0.0, min(params.max_decay_factor, decay))

    cap = params.velocity_cap
    color = np.clip(np.asarray(faucet.color, dtype=np.float64), -params.color_cap, params.color_cap)
    return StreamState(
        x=x, y=y,
        vx=_clamp(vx, cap), vy=_clamp(vy, cap),
        color=color,
        decay_factor=decay,
    )


# ---------------------------------------------------------------------------
# Integrator
# ---------------------------------------------------------------------------

class StreamIntegrator:
    """Advances streams through a force field, writing into a canvas.

    Holds no per-stream state, so one integrator serves every stream of a
    run (or of one worker's share of it).
    """

    def __init__(self, field: ForceField, canvas: Canvas, params: FlowParams) -> None:
        self.field = field
        self.canvas = canvas
        self.params = params

    def _terminate(self, state: StreamState, reason: Termination) -> bool:
        state.reason = reason
        return False

    def step(self, state: StreamState) -> bool:
        """Advance *state* by one step.  Returns True while still active."""
        if state.reason is not None:
            raise RuntimeError(f"Stream already terminated ({state.reason.value})")
        p = self.params
        state.steps_taken += 1

        budget = state.decay_factor * p.size
        if state.age >= budget:
            return self._terminate(state, Termination.DECAYED)
        if not self.canvas.in_bounds(state.x, state.y):
            return self._terminate(state, Termination.OUT_OF_BOUNDS)

        # ── Velocity ──
        fx, fy = self.field.field_at(state.x, state.y)
        vx = _clamp(state.vx + fx, p.velocity_cap)
        vy = _clamp(state.vy + fy, p.velocity_cap)

        # ── Draw the segment to the next position ──
        n = max(1, int(max(abs(vx), abs(vy))))
        rate = p.fade_efolds / budget
        k = np.arange(1, n + 1, dtype=np.float64)
        xs = state.x + vx * (k / n)
        ys = state.y + vy * (k / n)
        colors = np.exp(-rate * k)[:, np.newaxis] * state.color
        self.canvas.deposit(xs, ys, colors)

        # ── Move and fade ──
        state.x += vx
        state.y += vy
        state.vx, state.vy = vx, vy
        state.age += n
        state.color = np.clip(state.color * math.exp(-rate * n), -p.color_cap, p.color_cap)

        if not self.canvas.in_bounds(state.x, state.y):
            return self._terminate(state, Termination.OUT_OF_BOUNDS)
        if state.age >= budget or float(np.abs(state.color).max()) < NEGLIGIBLE_COLOR:
            return self._terminate(state, Termination.DECAYED)
        return True

    def run(self, state: StreamState) -> Termination:
        """Step *state* until it terminates."""
        while self.step(state):
            pass
        return state.reason
