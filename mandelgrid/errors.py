"""Exceptions raised while configuring, rendering and writing images."""

from __future__ import annotations


class MandelgridError(Exception):
    """Base class for every error raised by :mod:`mandelgrid`."""


class ConfigurationError(MandelgridError, ValueError):
    """Render parameters are unusable; raised before any work starts."""


class RenderError(MandelgridError):
    """A row task failed and the whole render was aborted."""


class RenderCancelled(RenderError):
    """The render was cancelled before every row completed."""


class OutputError(MandelgridError):
    """Base class for failures while persisting a rendered image."""

    phase = "output"

    def __init__(self, path, cause: BaseException) -> None:
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause


class OutputCreationError(OutputError):
    """The destination file could not be created or opened."""

    phase = "creating file"


class EncodingError(OutputError):
    """The image codec failed while writing pixel data."""

    phase = "encoding image"
