import os
import sys
import time
import warnings

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

from argparse import ArgumentParser

from mandelgrid import (
    DEFAULT_OUTPUT,
    MAX_ITERATIONS,
    ConfigurationError,
    OutputError,
    ParallelScheduler,
    RenderParameters,
    write_image,
)
from mandelgrid.kernels import KERNELS


def select_device():
    """Use the first GPU for the TensorFlow kernel when one is visible."""

    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return '/CPU:0'
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        # memory growth can only be set before the GPU is initialized
        log(e)
        return '/CPU:0'
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'


def build_parser():
    defaults = RenderParameters()
    parser = ArgumentParser(description='Render the Mandelbrot set one row per task.')

    parser.add_argument('--width', type=int,
                        dest='width', help='image width in pixels',
                        metavar='WIDTH', default=defaults.width)

    parser.add_argument('--height', type=int,
                        dest='height', help='image height in pixels',
                        metavar='HEIGHT', default=defaults.height)

    parser.add_argument('--x-min', type=float,
                        dest='x_min', help='real part of the left edge of the plane window',
                        metavar='X_MIN', default=defaults.x_min)

    parser.add_argument('--y-min', type=float,
                        dest='y_min', help='imaginary part of the top edge of the plane window',
                        metavar='Y_MIN', default=defaults.y_min)

    parser.add_argument('--x-max', type=float,
                        dest='x_max', help='real part of the right edge of the plane window',
                        metavar='X_MAX', default=defaults.x_max)

    parser.add_argument('--y-max', type=float,
                        dest='y_max', help='imaginary part of the bottom edge of the plane window',
                        metavar='Y_MAX', default=defaults.y_max)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='maximum number of times to iterate z = z*z + c',
                        metavar='MAX_ITERATIONS', default=MAX_ITERATIONS)

    parser.add_argument('--workers', type=int,
                        dest='workers', help='number of threads rendering rows. Default: one per CPU.',
                        metavar='WORKERS', default=None)

    parser.add_argument('--kernel', choices=KERNELS, default='tensorflow',
                        help='row kernel: "python" evaluates pixel by pixel, "tensorflow" a whole row at once.')

    parser.add_argument('--output', dest='output', type=str, default=DEFAULT_OUTPUT,
                        help='destination image file. Default: "%s".' % DEFAULT_OUTPUT)

    parser.add_argument('--format', type=str,
                        dest='format', help='lossless file format supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)
    log("TensorFlow version: %s" % tf.__version__)

    params = RenderParameters(
        width=opt.width,
        height=opt.height,
        x_min=opt.x_min,
        y_min=opt.y_min,
        x_max=opt.x_max,
        y_max=opt.y_max,
        max_iterations=opt.max_iterations,
    )

    try:
        params.validate()
        device = select_device() if opt.kernel == 'tensorflow' else None
        scheduler = ParallelScheduler(workers=opt.workers, kernel=opt.kernel, device=device)
    except ConfigurationError as exc:
        parser.error(str(exc))

    log("Rendering %dx%d with %d workers, %s kernel" % (params.width, params.height, scheduler.workers, scheduler.kernel_name))

    def report(done, total):
        print("row {0} out of {1}".format(done, total), end='\r')

    start = time.perf_counter()
    result = scheduler.render(params, progress=report)
    print()
    log("Rendered in %.2fs" % (time.perf_counter() - start))

    try:
        path = write_image(result.pixels, opt.output, opt.format)
    except OutputError as exc:
        print("Error %s: %s" % (exc.phase, exc.cause))
        return 1

    log("Wrote %s" % path)
    return 0


if __name__ == '__main__':
    sys.exit(main())
