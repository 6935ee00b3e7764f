import numpy as np
import pytest

from image_preprocessing.errors import InvalidInputError
from image_preprocessing.features.filters import (
    apply_filter,
    convert_to_negative,
    normalize_8bit,
    subtract_mean,
)
from image_preprocessing.preprocessing_config import FilterType

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("kind", list(FilterType))
def test_filter_keeps_size_and_shape(gray_image, kind):
    out = apply_filter(gray_image, kind)
    assert out.shape == gray_image.shape


@pytest.mark.parametrize("kind", ["gaussian", "median", "sobel", "g", "m", "s"])
def test_filter_accepts_names_and_letters(gray_image, kind):
    assert apply_filter(gray_image, kind).shape == (64, 64)


def test_filter_on_color_image_returns_grayscale(color_image):
    out = apply_filter(color_image, FilterType.SOBEL)
    assert out.ndim == 2
    assert out.shape == color_image.shape[:2]


def test_filter_does_not_modify_input(gray_image):
    before = gray_image.copy()
    apply_filter(gray_image, FilterType.GAUSSIAN)
    np.testing.assert_array_equal(gray_image, before)


def test_unknown_filter_kind_raises(gray_image):
    with pytest.raises(InvalidInputError):
        apply_filter(gray_image, "x")


def test_sobel_of_constant_image_is_zero():
    flat = np.full((16, 16), 77, dtype=np.uint8)
    out = apply_filter(flat, FilterType.SOBEL)
    assert out.dtype == np.uint8
    assert not out.any()


def test_sobel_detects_vertical_edge():
    img = np.zeros((16, 16), dtype=np.uint8)
    img[:, 8:] = 200
    out = apply_filter(img, FilterType.SOBEL)
    assert out[:, 7:9].min() > 0
    assert out[:, :5].max() == 0


def test_median_works_on_float32():
    img = np.random.default_rng(0).random((20, 20)).astype(np.float32)
    out = apply_filter(img, FilterType.MEDIAN)
    assert out.dtype == np.float32
    assert out.shape == img.shape


def test_negative_uint8(gray_image):
    out = convert_to_negative(gray_image)
    np.testing.assert_array_equal(out, 255 - gray_image)


def test_negative_float32():
    img = np.array([[0.0, 0.25], [0.5, 1.0]], dtype=np.float32)
    out = convert_to_negative(img)
    np.testing.assert_allclose(out, [[1.0, 0.75], [0.5, 0.0]])
    assert out.dtype == np.float32


def test_negative_color_becomes_grayscale(color_image):
    assert convert_to_negative(color_image).ndim == 2


def test_negative_rejects_other_dtypes():
    with pytest.raises(InvalidInputError):
        convert_to_negative(np.ones((4, 4), dtype=np.int16))


def test_subtract_mean_float_centers_on_zero():
    img = np.random.default_rng(1).random((32, 32)).astype(np.float32)
    out = subtract_mean(img)
    assert out.dtype == np.float32
    assert abs(float(out.mean())) < 1e-5


def test_subtract_mean_uint8_saturates_at_zero():
    img = np.array([[0, 100], [200, 100]], dtype=np.uint8)
    out = subtract_mean(img)
    assert out.dtype == np.uint8
    np.testing.assert_array_equal(out, [[0, 0], [100, 0]])


def test_subtract_mean_is_per_channel(color_image):
    out = subtract_mean(color_image.astype(np.float32))
    np.testing.assert_allclose(out.mean(axis=(0, 1)), np.zeros(3), atol=1e-3)


def test_normalize_8bit_stretches_to_full_range():
    img = np.array([[10.0, 20.0], [30.0, 40.0]], dtype=np.float32)
    out = normalize_8bit(img)
    assert out.dtype == np.uint8
    assert out.min() == 0
    assert out.max() == 255
    np.testing.assert_array_equal(out, [[0, 85], [170, 255]])


def test_normalize_8bit_constant_image_is_zero():
    out = normalize_8bit(np.full((5, 5), 42, dtype=np.uint8))
    assert not out.any()
