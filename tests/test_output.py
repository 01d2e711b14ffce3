import numpy as np
import PIL.Image
import pytest

from mandelgrid.errors import EncodingError, OutputCreationError, OutputError
from mandelgrid.output import write_image


def _pixels():
    pixels = np.zeros((3, 5, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    pixels[0, 0, :3] = 255
    pixels[1, 2, :3] = 24
    return pixels


def test_write_png_preserves_pixels(tmp_path):
    path = write_image(_pixels(), tmp_path / "mandelbrot.png")
    with PIL.Image.open(path) as image:
        assert image.format == "PNG"
        assert image.size == (5, 3)
        data = np.asarray(image.convert("RGBA"))
    assert np.array_equal(data, _pixels())


def test_creation_failure_is_reported(tmp_path):
    with pytest.raises(OutputCreationError) as excinfo:
        write_image(_pixels(), tmp_path / "missing" / "mandelbrot.png")
    assert excinfo.value.phase == "creating file"
    assert isinstance(excinfo.value.cause, OSError)


def test_directory_destination_is_a_creation_failure(tmp_path):
    with pytest.raises(OutputCreationError):
        write_image(_pixels(), tmp_path)


def test_encoding_failure_removes_partial_file(tmp_path):
    path = tmp_path / "mandelbrot.xyz"
    with pytest.raises(EncodingError) as excinfo:
        write_image(_pixels(), path, image_format="not-a-format")
    assert excinfo.value.phase == "encoding image"
    assert isinstance(excinfo.value, OutputError)
    assert not path.exists()


def test_format_aliases(tmp_path):
    path = write_image(_pixels(), tmp_path / "mandelbrot.tif", image_format="tif")
    with PIL.Image.open(path) as image:
        assert image.format == "TIFF"
