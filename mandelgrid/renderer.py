"""Parallel row rendering of Mandelbrot frames."""

from __future__ import annotations

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from .errors import ConfigurationError, RenderCancelled, RenderError
from .evaluator import MAX_ITERATIONS, colorize
from .kernels import RowKernel, get_kernel
from .plane import PlaneBounds, SamplingMetadata, row_coordinates

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class RenderParameters:
    """Parameters that describe a single render of the Mandelbrot set."""

    width: int = 3840
    height: int = 2160
    x_min: float = -2.0
    y_min: float = -2.0
    x_max: float = 2.0
    y_max: float = 2.0
    max_iterations: int = MAX_ITERATIONS

    @property
    def bounds(self) -> PlaneBounds:
        return PlaneBounds(self.x_min, self.y_min, self.x_max, self.y_max)

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.max_iterations <= 0:
            raise ConfigurationError(
                f"max_iterations must be positive, got {self.max_iterations}"
            )
        self.bounds.validate()


@dataclass(frozen=True)
class RenderResult:
    """Container for a finished render.

    ``pixels`` is the RGBA buffer handed to the encoder and ``iterations``
    holds the escape time of every pixel.
    """

    pixels: np.ndarray
    iterations: np.ndarray
    metadata: SamplingMetadata


class ParallelScheduler:
    """Render frames with one thread-pool task per image row.

    Each task writes only its own row of the shared buffers, so the only
    synchronization is the join on all tasks. Nothing is kept between calls
    to :meth:`render`.
    """

    def __init__(
        self,
        workers: Optional[int] = None,
        kernel: str = "python",
        device: Optional[str] = None,
    ) -> None:
        if workers is not None and workers <= 0:
            raise ConfigurationError(f"workers must be positive, got {workers}")
        self.workers = workers or os.cpu_count() or 1
        self.kernel_name = kernel
        self.kernel: RowKernel = get_kernel(kernel, device=device)

    def render(
        self,
        params: RenderParameters,
        *,
        cancel: Optional[threading.Event] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> RenderResult:
        params.validate()
        metadata = SamplingMetadata(params.bounds, params.width, params.height)
        pixels = np.zeros((params.height, params.width, 4), dtype=np.uint8)
        iterations = np.full((params.height, params.width), -1, dtype=np.int32)

        def render_row(y: int) -> int:
            if cancel is not None and cancel.is_set():
                raise RenderCancelled(f"render cancelled before row {y}")
            reals, imag = row_coordinates(metadata, y)
            row = self.kernel(reals, imag, params.max_iterations)
            iterations[y] = row
            pixels[y] = colorize(row, params.max_iterations)
            return y

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="mandelgrid-row") as executor:
            futures: dict[Future, int] = {executor.submit(render_row, y): y for y in range(params.height)}
            for done, future in enumerate(as_completed(futures), start=1):
                try:
                    future.result()
                except RenderError:
                    executor.shutdown(wait=True, cancel_futures=True)
                    raise
                except Exception as exc:
                    executor.shutdown(wait=True, cancel_futures=True)
                    raise RenderError(f"row {futures[future]} failed: {exc}") from exc
                if progress is None:
                    continue
                try:
                    progress(done, params.height)
                except Exception as exc:
                    executor.shutdown(wait=True, cancel_futures=True)
                    raise RenderError(f"progress callback failed after row {futures[future]}: {exc}") from exc

        return RenderResult(pixels=pixels, iterations=iterations, metadata=metadata)


def render_frame(
    params: RenderParameters,
    *,
    workers: Optional[int] = None,
    kernel: str = "python",
    device: Optional[str] = None,
) -> RenderResult:
    """Render a Mandelbrot frame given the supplied parameters."""

    return ParallelScheduler(workers=workers, kernel=kernel, device=device).render(params)
