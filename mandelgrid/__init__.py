"""Public API for parallel Mandelbrot rendering."""

from .errors import (
    ConfigurationError,
    EncodingError,
    MandelgridError,
    OutputCreationError,
    OutputError,
    RenderCancelled,
    RenderError,
)
from .evaluator import BLACK, MAX_ITERATIONS, PixelColor, colorize, escape_time, mandelbrot, pixel_color
from .output import DEFAULT_OUTPUT, write_image
from .plane import PlaneBounds, SamplingMetadata, pixel_to_complex, row_coordinates
from .renderer import ParallelScheduler, RenderParameters, RenderResult, render_frame

__all__ = [
    "BLACK",
    "ConfigurationError",
    "DEFAULT_OUTPUT",
    "EncodingError",
    "MAX_ITERATIONS",
    "MandelgridError",
    "OutputCreationError",
    "OutputError",
    "ParallelScheduler",
    "PixelColor",
    "PlaneBounds",
    "RenderCancelled",
    "RenderError",
    "RenderParameters",
    "RenderResult",
    "SamplingMetadata",
    "colorize",
    "escape_time",
    "mandelbrot",
    "pixel_color",
    "pixel_to_complex",
    "render_frame",
    "row_coordinates",
    "write_image",
]
