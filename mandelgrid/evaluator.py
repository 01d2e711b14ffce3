"""Escape-time evaluation and the iteration-to-color mapping."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

import numpy as np

MAX_ITERATIONS = 1000
ESCAPE_RADIUS = 2.0


@dataclass(frozen=True)
class PixelColor:
    """Grayscale color of a single pixel.

    ``bounded`` marks the fixed color of points that never escaped. It renders
    exactly like ``gray=0`` but is a distinct value, so the mapping keeps the
    "escaped at iteration 255 (mod 256)" and "never escaped" cases apart.
    """

    gray: int
    bounded: bool = False

    @property
    def rgba(self) -> tuple[int, int, int, int]:
        return (self.gray, self.gray, self.gray, 255)


BLACK = PixelColor(0, bounded=True)


def escape_time(c: complex, max_iterations: int = MAX_ITERATIONS) -> int:
    """Return the iteration at which ``|z|`` first exceeds the escape radius.

    ``z`` starts at ``c`` and is checked before each update ``z = z*z + c``.
    Points that stay bounded for ``max_iterations`` steps return
    ``max_iterations``.
    """

    z = c
    for i in range(max_iterations):
        if abs(z) > ESCAPE_RADIUS:
            return i
        z = z * z + c
    return max_iterations


@lru_cache(maxsize=None)
def pixel_color(iterations: int, max_iterations: int = MAX_ITERATIONS) -> PixelColor:
    """Map an escape-time result to its pixel color."""

    if iterations >= max_iterations:
        return BLACK
    return PixelColor(255 - iterations % 256)


def mandelbrot(c: complex, max_iterations: int = MAX_ITERATIONS) -> PixelColor:
    """Color of the point ``c``."""

    return pixel_color(escape_time(c, max_iterations), max_iterations)


def colorize(iterations: np.ndarray, max_iterations: int = MAX_ITERATIONS) -> np.ndarray:
    """Vectorized ``pixel_color(...).rgba`` over an array of iteration results."""

    iterations = np.asarray(iterations)
    escaped = iterations < max_iterations
    gray = np.where(escaped, 255 - np.mod(iterations, 256), 0).astype(np.uint8)
    rgba = np.empty(iterations.shape + (4,), dtype=np.uint8)
    rgba[..., 0] = gray
    rgba[..., 1] = gray
    rgba[..., 2] = gray
    rgba[..., 3] = 255
    return rgba
