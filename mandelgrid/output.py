"""Persist a finished pixel buffer with Pillow."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

import numpy as np
import PIL.Image

from .errors import EncodingError, OutputCreationError

DEFAULT_OUTPUT = "mandelbrot.png"


def _pil_format_name(ext: str) -> str:
    upper = ext.upper().lstrip(".")
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def write_image(
    pixels: np.ndarray,
    output_path: Union[str, os.PathLike],
    image_format: str = "png",
) -> Path:
    """Write an RGBA pixel buffer to ``output_path``.

    Raises :class:`OutputCreationError` when the file cannot be opened and
    :class:`EncodingError` when Pillow fails to encode it; in the latter case
    the partially written file is removed.
    """

    output_path = Path(output_path)
    image = PIL.Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
    pil_format = _pil_format_name(image_format)

    try:
        handle = open(output_path, "wb")
    except OSError as exc:
        raise OutputCreationError(output_path, exc) from exc

    try:
        with handle:
            image.save(handle, format=pil_format)
    except (OSError, ValueError, KeyError) as exc:
        output_path.unlink(missing_ok=True)
        raise EncodingError(output_path, exc) from exc
    return output_path
