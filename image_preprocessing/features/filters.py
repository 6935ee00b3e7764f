"""
filters.py

Pixel-level operations applied to the luminance plane: spatial filters,
mean subtraction, negation and 8-bit normalization.
Every function returns a new matrix and leaves its input untouched.
"""
from __future__ import annotations

from typing import Union

import cv2
import numpy as np

from image_preprocessing.errors import InvalidInputError
from image_preprocessing.features._utils import ensure_grayscale, require_non_empty
from image_preprocessing.preprocessing_config import FilterType


GAUSSIAN_KSIZE = (5, 5)
MEDIAN_KSIZE = 5
SOBEL_KSIZE = 3


def apply_filter(image: np.ndarray, kind: Union[FilterType, str]) -> np.ndarray:
    """
    Filter a single-channel image. A 3-channel image is converted to grayscale first.

    Args:
        image: uint8 or float32 matrix
        kind: gaussian, median or sobel (a FilterType or its name/letter)

    Returns:
        Filtered matrix with the same height and width as the input

    Raises:
        InvalidInputError: for an unknown filter kind
    """
    kind = FilterType.parse(kind)
    gray = ensure_grayscale(require_non_empty(image))
    if gray.dtype not in (np.uint8, np.uint16, np.float32):
        gray = gray.astype(np.float32)

    if kind is FilterType.SOBEL:
        return _sobel_magnitude(gray)
    if kind is FilterType.MEDIAN:
        return cv2.medianBlur(gray, MEDIAN_KSIZE)
    return cv2.GaussianBlur(gray, GAUSSIAN_KSIZE, 0, 0)


def _sobel_magnitude(gray: np.ndarray) -> np.ndarray:
    # Each direction is scaled to uint8 on its own, then averaged 50/50.
    sobel_x = cv2.Sobel(gray, cv2.CV_32F, 1, 0, ksize=SOBEL_KSIZE)
    sobel_y = cv2.Sobel(gray, cv2.CV_32F, 0, 1, ksize=SOBEL_KSIZE)
    sobel_x_u8 = cv2.convertScaleAbs(sobel_x)
    sobel_y_u8 = cv2.convertScaleAbs(sobel_y)
    return cv2.addWeighted(sobel_x_u8, 0.5, sobel_y_u8, 0.5, 0)


def subtract_mean(image: np.ndarray) -> np.ndarray:
    """
    Subtract the per-channel mean from every pixel.

    Works for any channel count. uint8 input stays uint8 and saturates at 0 and 255,
    float input stays float.
    """
    arr = require_non_empty(image)
    axes = (0, 1)
    if arr.dtype == np.uint8:
        mean = arr.mean(axis=axes, dtype=np.float64)
        centered = arr.astype(np.float64) - mean
        return np.clip(np.rint(centered), 0, 255).astype(np.uint8)
    if np.issubdtype(arr.dtype, np.floating):
        return (arr - arr.mean(axis=axes, dtype=np.float64)).astype(arr.dtype, copy=False)
    raise InvalidInputError(f"Cannot subtract mean: unsupported dtype {arr.dtype}")


def convert_to_negative(image: np.ndarray) -> np.ndarray:
    """
    Invert pixel values: 255 - x for uint8 (0-255), 1 - x for float32 (0-1).
    A 3-channel image is converted to grayscale first.
    """
    gray = ensure_grayscale(require_non_empty(image))
    if gray.dtype == np.uint8:
        return 255 - gray
    if gray.dtype == np.float32:
        return np.float32(1.0) - gray
    raise InvalidInputError(
        f"Cannot convert to negative: incorrect dtype {gray.dtype} (only uint8 and float32 accepted)"
    )


def normalize_8bit(image: np.ndarray) -> np.ndarray:
    """Stretch pixel values linearly to the full 0-255 range and cast to uint8."""
    arr = require_non_empty(image).astype(np.float64)
    lo = float(arr.min())
    hi = float(arr.max())
    delta = hi - lo
    if delta <= 0.0:
        return np.zeros(arr.shape, dtype=np.uint8)
    scaled = (arr - lo) * (255.0 / delta)
    return np.clip(np.rint(scaled), 0, 255).astype(np.uint8)
