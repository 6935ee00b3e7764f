import math

import cv2
import numpy as np
import pytest

from image_preprocessing.errors import DimensionMismatchError, InvalidInputError
from image_preprocessing.features.color import convert_to_yuv
from image_preprocessing.features.quality import compare_images

pytestmark = pytest.mark.unit


def test_yuv_luminance_full_size_chrominances_decimated(color_image):
    yuv = convert_to_yuv(color_image)
    y_total = yuv.luminance.size
    u_total = yuv.chrominances.u.size
    v_total = yuv.chrominances.v.size

    assert color_image.size == 3 * y_total
    assert u_total == v_total
    assert y_total == 4 * v_total
    assert yuv.chrominances.u.shape == (32, 32)


def test_yuv_luminance_matches_opencv(color_image):
    expected = cv2.cvtColor(color_image, cv2.COLOR_BGR2YUV)[:, :, 0]
    np.testing.assert_array_equal(convert_to_yuv(color_image).luminance, expected)


def test_yuv_rejects_single_channel(gray_image):
    with pytest.raises(InvalidInputError):
        convert_to_yuv(gray_image)


def test_same_grayscale_images_give_infinite_psnr(gray_image):
    assert compare_images(gray_image, gray_image) == math.inf


def test_same_color_images_give_infinite_psnr(color_image):
    assert compare_images(color_image, color_image) == math.inf


def test_color_against_its_grayscale_self_is_above_50db(color_image):
    gray = cv2.cvtColor(color_image, cv2.COLOR_BGR2GRAY)
    assert compare_images(color_image, gray) > 50
    assert compare_images(gray, color_image) > 50


def test_psnr_of_noisy_copy_is_finite(gray_image):
    noise = np.random.default_rng(3).integers(-10, 11, size=gray_image.shape)
    noisy = np.clip(gray_image.astype(int) + noise, 0, 255).astype(np.uint8)
    psnr = compare_images(gray_image, noisy)
    assert math.isfinite(psnr)
    assert 10 < psnr < 60


def test_psnr_ignores_scale_differences(gray_image):
    as_float = gray_image.astype(np.float32) / 255.0
    assert compare_images(gray_image, as_float) > 50


def test_psnr_shape_mismatch_raises(gray_image):
    with pytest.raises(DimensionMismatchError):
        compare_images(gray_image, gray_image[:32])
