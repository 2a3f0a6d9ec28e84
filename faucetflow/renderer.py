"""
Renderer: tone-map an accumulated canvas grid to 8-bit RGB and write it out.

Accumulated colours are signed and unbounded.  Each pixel's colour vector
is first shortened to length ``color_cap`` if it is longer, then every
channel goes through the soft clamp ``0.5 + 0.5·c / (1 + |c|)``, which maps
0 to mid-grey and saturates smoothly toward black and white.
"""

from __future__ import annotations

import logging
import os

import numpy as np

logger = logging.getLogger(__name__)


def tone_map(grid: np.ndarray, color_cap: float) -> np.ndarray:
    """Map a ``(H, W, 3)`` float grid → ``(H, W, 3)`` uint8 RGB array.

    Parameters:
        grid:      Accumulated per-channel sums.
        color_cap: Maximum colour vector length kept per pixel.
    """
    grid = np.asarray(grid, dtype=np.float64)
    length = np.sqrt(np.sum(grid * grid, axis=-1, keepdims=True))
    ratio = np.where(length > color_cap, color_cap / np.maximum(length, 1e-300), 1.0)
    scaled = grid * ratio

    unit = 0.5 * scaled / (1.0 + np.abs(scaled)) + 0.5
    return np.clip(np.round(unit * 255.0), 0, 255).astype(np.uint8)


def save_png(rgb: np.ndarray, path: str) -> None:
    """Write a ``(H, W, 3)`` uint8 array as an image file (format from suffix)."""
    from PyQt5.QtGui import QImage

    rgb = np.ascontiguousarray(rgb, dtype=np.uint8)
    h, w, ch = rgb.shape
    if ch != 3:
        raise ValueError(f"Expected an RGB array, got {ch} channels")
    bytes_per_line = ch * w
    qimg = QImage(rgb.data, w, h, bytes_per_line, QImage.Format_RGB888).copy()
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    if not qimg.save(path):
        raise OSError(f"Failed to save image: {path}")
    logger.info("Saved %dx%d image to %s", w, h, path)


def render_grid(grid: np.ndarray, color_cap: float, path: str) -> np.ndarray:
    """Tone-map *grid*, save it to *path* and return the RGB array."""
    rgb = tone_map(grid, color_cap)
    save_png(rgb, path)
    return rgb
