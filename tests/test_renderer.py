import threading

import numpy as np
import pytest

from mandelgrid.errors import ConfigurationError, RenderCancelled, RenderError
from mandelgrid.evaluator import escape_time, pixel_color
from mandelgrid.plane import pixel_to_complex
from mandelgrid.renderer import ParallelScheduler, RenderParameters, render_frame

SMALL = RenderParameters(width=4, height=4, max_iterations=10)


def test_default_parameters():
    params = RenderParameters()
    assert (params.width, params.height) == (3840, 2160)
    assert (params.x_min, params.y_min, params.x_max, params.y_max) == (-2.0, -2.0, 2.0, 2.0)
    assert params.max_iterations == 1000
    params.validate()


def test_four_by_four_scenario():
    result = render_frame(SMALL, workers=2)
    assert result.pixels.shape == (4, 4, 4)
    assert result.iterations[0, 0] == 0
    assert tuple(result.pixels[0, 0]) == (255, 255, 255, 255)
    assert result.iterations[2, 2] == 10
    assert tuple(result.pixels[2, 2]) == (0, 0, 0, 255)


def test_every_pixel_is_written():
    params = RenderParameters(width=31, height=17, x_min=-2.0, y_min=-1.2, x_max=0.6, y_max=1.2, max_iterations=64)
    result = ParallelScheduler(workers=4).render(params)
    assert np.all(result.pixels[..., 3] == 255)
    assert np.all(result.iterations >= 0)
    assert np.all(result.iterations <= params.max_iterations)


def test_pixels_match_the_per_pixel_evaluator():
    params = RenderParameters(width=12, height=9, max_iterations=30)
    result = render_frame(params, workers=3)
    for y in range(params.height):
        for x in range(params.width):
            c = pixel_to_complex(result.metadata, y, x)
            iterations = escape_time(c, params.max_iterations)
            assert result.iterations[y, x] == iterations
            assert tuple(result.pixels[y, x]) == pixel_color(iterations, params.max_iterations).rgba


@pytest.mark.parametrize("kernel", ["python", "tensorflow"])
def test_worker_count_does_not_change_the_image(kernel):
    params = RenderParameters(width=40, height=24, x_min=-2.2, y_min=-1.2, x_max=0.8, y_max=1.2, max_iterations=80)
    single = ParallelScheduler(workers=1, kernel=kernel).render(params)
    many = ParallelScheduler(workers=8, kernel=kernel).render(params)
    assert np.array_equal(single.pixels, many.pixels)
    assert np.array_equal(single.iterations, many.iterations)


def test_scheduler_is_reentrant():
    scheduler = ParallelScheduler(workers=4)
    first = scheduler.render(SMALL)
    second = scheduler.render(SMALL)
    assert first.pixels is not second.pixels
    assert np.array_equal(first.pixels, second.pixels)


def test_progress_reports_every_row():
    calls = []
    ParallelScheduler(workers=3).render(SMALL, progress=lambda done, total: calls.append((done, total)))
    assert calls == [(1, 4), (2, 4), (3, 4), (4, 4)]


def test_one_task_per_row():
    rows = []
    lock = threading.Lock()

    def kernel(reals, imag, max_iterations):
        with lock:
            rows.append(imag)
        return np.zeros(len(reals), dtype=np.int32)

    scheduler = ParallelScheduler(workers=4)
    scheduler.kernel = kernel
    scheduler.render(RenderParameters(width=3, height=6, max_iterations=5))
    assert len(rows) == 6
    assert len(set(rows)) == 6


def test_failing_row_aborts_the_render():
    def kernel(reals, imag, max_iterations):
        if imag == 0.0:
            raise ArithmeticError("boom")
        return np.zeros(len(reals), dtype=np.int32)

    scheduler = ParallelScheduler(workers=2)
    scheduler.kernel = kernel
    with pytest.raises(RenderError, match="row 2 failed") as excinfo:
        scheduler.render(SMALL)
    assert isinstance(excinfo.value.__cause__, ArithmeticError)


def test_cancelled_render_raises():
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(RenderCancelled):
        ParallelScheduler(workers=2).render(SMALL, cancel=cancel)


@pytest.mark.parametrize(
    "params",
    [
        RenderParameters(width=0),
        RenderParameters(height=-1),
        RenderParameters(max_iterations=0),
        RenderParameters(x_min=2.0, x_max=-2.0),
        RenderParameters(y_min=1.0, y_max=1.0),
    ],
)
def test_invalid_parameters_fail_before_rendering(params):
    scheduler = ParallelScheduler(workers=1)

    def kernel(reals, imag, max_iterations):
        raise AssertionError("kernel must not run")

    scheduler.kernel = kernel
    with pytest.raises(ConfigurationError):
        scheduler.render(params)


def test_invalid_worker_count():
    with pytest.raises(ConfigurationError):
        ParallelScheduler(workers=0)


def test_scheduler_remembers_kernel_name():
    assert ParallelScheduler(workers=1).kernel_name == "python"
    assert ParallelScheduler(workers=1, kernel="tensorflow").kernel_name == "tensorflow"


def test_failing_progress_callback_aborts_the_render():
    def progress(done, total):
        raise RuntimeError("display gone")

    with pytest.raises(RenderError, match="progress callback failed") as excinfo:
        ParallelScheduler(workers=2).render(SMALL, progress=progress)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_cancel_during_render_skips_remaining_rows():
    cancel = threading.Event()
    calls = []

    def kernel(reals, imag, max_iterations):
        calls.append(imag)
        cancel.set()
        return np.zeros(len(reals), dtype=np.int32)

    scheduler = ParallelScheduler(workers=1)
    scheduler.kernel = kernel
    with pytest.raises(RenderCancelled, match="render cancelled"):
        scheduler.render(RenderParameters(width=3, height=6, max_iterations=5), cancel=cancel)
    # the row already running finishes, none of the others start
    assert calls == [-2.0]
