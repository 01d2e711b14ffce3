"""Row kernels: escape-time results for every pixel of one image row."""

from __future__ import annotations

from functools import partial
from typing import Callable, Optional

import numpy as np
import tensorflow as tf

from .errors import ConfigurationError
from .evaluator import ESCAPE_RADIUS, escape_time

RowKernel = Callable[[np.ndarray, float, int], np.ndarray]


def python_row_kernel(reals: np.ndarray, imag: float, max_iterations: int) -> np.ndarray:
    """Evaluate each pixel of the row with :func:`escape_time`."""

    row = np.empty(len(reals), dtype=np.int32)
    for col, real in enumerate(reals):
        row[col] = escape_time(complex(float(real), imag), max_iterations)
    return row


def _modulus(zr: tf.Tensor, zi: tf.Tensor) -> tf.Tensor:
    return tf.abs(tf.complex(zr, zi))


@tf.function
def _escape_step(
    zr: tf.Tensor,
    zi: tf.Tensor,
    cr: tf.Tensor,
    ci: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance ``z = z*z + c`` for points that have not escaped yet."""

    # Same operation order as Python's complex product.
    zr_new = zr * zr - zi * zi + cr
    zi_new = zr * zi + zi * zr + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    ns = ns + tf.cast(active, tf.int32)
    radius = tf.constant(ESCAPE_RADIUS, dtype=zr.dtype)
    active = tf.logical_and(active, _modulus(zr, zi) <= radius)
    return zr, zi, ns, active


@tf.function
def _escape_run(cr: tf.Tensor, ci: tf.Tensor, max_iterations: tf.Tensor) -> tf.Tensor:
    """Iterate the row with a TensorFlow while loop and return escape times."""

    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    radius = tf.constant(ESCAPE_RADIUS, dtype=cr.dtype)
    zr = tf.identity(cr)
    zi = tf.identity(ci)
    ns = tf.zeros_like(cr, tf.int32)
    active = _modulus(zr, zi) <= radius

    def cond(i, zr, zi, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zr, zi, ns, active):
        zr, zi, ns, active = _escape_step(zr, zi, cr, ci, ns, active)
        return i + 1, zr, zi, ns, active

    _, _, _, ns, _ = tf.while_loop(cond, body, (i, zr, zi, ns, active))
    return ns


def tensorflow_row_kernel(
    reals: np.ndarray,
    imag: float,
    max_iterations: int,
    *,
    device: Optional[str] = None,
) -> np.ndarray:
    """Evaluate the whole row at once on a TensorFlow device."""

    with tf.device(device if device is not None else "/CPU:0"):
        cr = tf.convert_to_tensor(reals, dtype=tf.float64)
        ci = tf.fill(tf.shape(cr), tf.constant(imag, dtype=tf.float64))
        ns = _escape_run(cr, ci, tf.constant(max_iterations, dtype=tf.int32))
    return ns.numpy().astype(np.int32, copy=False)


KERNELS = ("python", "tensorflow")


def get_kernel(name: str, device: Optional[str] = None) -> RowKernel:
    if name == "python":
        return python_row_kernel
    if name == "tensorflow":
        return partial(tensorflow_row_kernel, device=device)
    raise ConfigurationError(f"unknown kernel {name!r}, expected one of: {', '.join(KERNELS)}")
