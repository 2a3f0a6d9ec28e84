"""
Canvas accumulator.

A ``size × size × 3`` float grid of per-channel running sums, indexed
``[y, x]`` so the finished grid is already image-shaped.  Every stream
writes into it; the only update is addition, so stream order does not
matter beyond floating-point summation order.
"""

from __future__ import annotations

import logging
from typing import Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class Canvas:
    """Additive colour accumulator.

    Parameters:
        size: Side length in pixels.
    """

    def __init__(self, size: int) -> None:
        self.size = size
        self.grid = np.zeros((size, size, 3), dtype=np.float64)

    def in_bounds(self, x: float, y: float) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    # ── writes ────────────────────────────────────────────────────────────

    def add(self, pixel: Tuple[int, int], color: Sequence[float]) -> None:
        """Add *color* into pixel (x, y); silently ignore off-canvas pixels."""
        x, y = pixel
        if 0 <= x < self.size and 0 <= y < self.size:
            self.grid[y, x] += color

    def deposit(self, xs: np.ndarray, ys: np.ndarray, colors: np.ndarray) -> int:
        """Add ``colors[k]`` at float position ``(xs[k], ys[k])`` for every k.

        Positions are floored to pixels; samples off the canvas are dropped.
        Repeated pixels accumulate.  Returns the number of samples kept.
        """
        keep = (xs >= 0) & (xs < self.size) & (ys >= 0) & (ys < self.size)
        if not keep.any():
            return 0
        px = xs[keep].astype(np.intp)
        py = ys[keep].astype(np.intp)
        np.add.at(self.grid, (py, px), colors[keep])
        return int(keep.sum())

    def merge(self, other: "Canvas") -> None:
        """Sum another canvas of the same size into this one."""
        if other.size != self.size:
            raise ValueError(f"Cannot merge canvas of size {other.size} into {self.size}")
        self.grid += other.grid

    # ── output ────────────────────────────────────────────────────────────

    def finalize(self) -> np.ndarray:
        """Copy of the accumulated ``(size, size, 3)`` grid."""
        return self.grid.copy()

    def coverage(self) -> float:
        """Fraction of pixels that received any non-zero contribution."""
        touched = np.any(self.grid != 0.0, axis=2)
        return float(touched.mean())
