"""
Run orchestration.

Builds the force field and faucets from the parameters and a seeded
generator, spawns every stream, integrates them and hands back the
accumulated canvas grid.

All randomness is consumed up front and in a fixed order (forces, then
faucets, then each stream's initial state by index), and integration
itself is deterministic.  Streams can therefore be integrated in worker
processes without changing the result beyond float summation order:
each worker fills its own canvas and the canvases are summed in chunk
order.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from concurrent.futures import ProcessPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .canvas import Canvas
from .faucets import FaucetSet
from .forces import ForceField
from .params import FlowParams
from .stream import StreamIntegrator, StreamState, Termination, spawn_stream

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 10000  # streams between progress log lines


def _integrate_chunk(
    params: FlowParams,
    field: ForceField,
    streams: Sequence[StreamState],
) -> Tuple[Canvas, Dict[Termination, int], int]:
    """Integrate *streams* into a fresh canvas.  Runs in worker processes."""
    canvas = Canvas(params.size)
    integrator = StreamIntegrator(field, canvas, params)
    reasons: Counter = Counter()
    steps = 0
    for state in streams:
        reasons[integrator.run(state)] += 1
        steps += state.steps_taken
    return canvas, dict(reasons), steps


def split_chunks(count: int, chunks: int) -> List[Tuple[int, int]]:
    """Split ``range(count)`` into at most *chunks* contiguous (start, stop) pairs."""
    chunks = max(1, min(chunks, count)) if count else 1
    base, extra = divmod(count, chunks)
    bounds = []
    start = 0
    for i in range(chunks):
        stop = start + base + (1 if i < extra else 0)
        bounds.append((start, stop))
        start = stop
    return bounds


class FlowSimulation:
    """One run: fixed forces and faucets, many streams.

    Parameters:
        params: Validated flow parameters.
        rng:    Random generator; defaults to ``default_rng(params.seed)``.
    """

    def __init__(self, params: FlowParams, rng: Optional[np.random.Generator] = None) -> None:
        self.params = params
        self.rng = rng if rng is not None else np.random.default_rng(params.seed)
        self.field = ForceField.generate(params, self.rng)
        self.faucets = FaucetSet.generate(params, self.rng)
        self.canvas = Canvas(params.size)
        self.termination_counts: Dict[Termination, int] = {}
        self.total_steps = 0
        self._finished = False

    # ── stream creation ───────────────────────────────────────────────────

    def spawn_streams(self) -> List[StreamState]:
        """Initial state of every stream, in stream-index order."""
        p = self.params
        return [
            spawn_stream(self.faucets.faucet_for(i), p, self.rng)
            for i in range(p.num_streams)
        ]

    # ── running ───────────────────────────────────────────────────────────

    def run(self, workers: int = 1) -> np.ndarray:
        """Integrate every stream and return the finalised grid."""
        if self._finished:
            raise RuntimeError("FlowSimulation.run() can only be called once")
        p = self.params
        start = time.perf_counter()
        logger.info(
            "Running %d streams on a %dx%d canvas (%d worker%s)",
            p.num_streams, p.size, p.size, workers, "" if workers == 1 else "s",
        )
        streams = self.spawn_streams()

        if workers <= 1 or p.num_streams < 2:
            self._run_serial(streams)
        else:
            self._run_parallel(streams, workers)

        self._finished = True
        elapsed = time.perf_counter() - start
        logger.info(
            "Done in %.1fs: %s, %d steps, %.1f%% pixels touched",
            elapsed,
            ", ".join(f"{r.value}={n}" for r, n in sorted(
                self.termination_counts.items(), key=lambda item: item[0].value)) or "no streams",
            self.total_steps,
            100.0 * self.canvas.coverage(),
        )
        return self.canvas.finalize()

    def _run_serial(self, streams: Sequence[StreamState]) -> None:
        integrator = StreamIntegrator(self.field, self.canvas, self.params)
        reasons: Counter = Counter()
        for i, state in enumerate(streams):
            reasons[integrator.run(state)] += 1
            self.total_steps += state.steps_taken
            if (i + 1) % PROGRESS_EVERY == 0:
                logger.info("  %d / %d streams", i + 1, len(streams))
        self.termination_counts = dict(reasons)

    def _run_parallel(self, streams: Sequence[StreamState], workers: int) -> None:
        bounds = split_chunks(len(streams), workers)
        logger.debug("Chunks: %s", bounds)
        reasons: Counter = Counter()
        with ProcessPoolExecutor(max_workers=len(bounds)) as pool:
            futures = [
                pool.submit(_integrate_chunk, self.params, self.field, streams[lo:hi])
                for lo, hi in bounds
            ]
            # summed in chunk order so the result only depends on the worker count
            for i, future in enumerate(futures):
                chunk_canvas, chunk_reasons, steps = future.result()
                self.canvas.merge(chunk_canvas)
                reasons.update(chunk_reasons)
                self.total_steps += steps
                logger.info("  chunk %d / %d merged", i + 1, len(futures))
        self.termination_counts = dict(reasons)
