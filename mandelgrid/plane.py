"""Mapping between pixel indices and points of the complex plane."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .errors import ConfigurationError


@dataclass(frozen=True)
class PlaneBounds:
    """Rectangle of the complex plane covered by an image."""

    x_min: float = -2.0
    y_min: float = -2.0
    x_max: float = 2.0
    y_max: float = 2.0

    def validate(self) -> None:
        values = (self.x_min, self.y_min, self.x_max, self.y_max)
        if not all(math.isfinite(v) for v in values):
            raise ConfigurationError(f"plane bounds must be finite, got {values}")
        if self.x_min >= self.x_max or self.y_min >= self.y_max:
            raise ConfigurationError(
                f"plane bounds describe a degenerate rectangle: "
                f"x [{self.x_min}, {self.x_max}], y [{self.y_min}, {self.y_max}]"
            )


@dataclass(frozen=True)
class SamplingMetadata:
    """Sampling grid of a rendered frame."""

    bounds: PlaneBounds
    x_res: int
    y_res: int

    @property
    def x_span(self) -> float:
        return self.bounds.x_max - self.bounds.x_min

    @property
    def y_span(self) -> float:
        return self.bounds.y_max - self.bounds.y_min


def pixel_to_complex(metadata: SamplingMetadata, row: int, col: int) -> complex:
    real = col / metadata.x_res * metadata.x_span + metadata.bounds.x_min
    imag = row / metadata.y_res * metadata.y_span + metadata.bounds.y_min
    return complex(real, imag)


def row_coordinates(metadata: SamplingMetadata, row: int) -> tuple[np.ndarray, float]:
    """Real parts of every column of ``row`` and the row's shared imaginary part.

    Uses the same operation order as :func:`pixel_to_complex`, so both produce
    bit-identical coordinates.
    """

    cols = np.arange(metadata.x_res, dtype=np.float64)
    reals = cols / np.float64(metadata.x_res) * np.float64(metadata.x_span) + np.float64(metadata.bounds.x_min)
    imag = row / metadata.y_res * metadata.y_span + metadata.bounds.y_min
    return reals, float(imag)
