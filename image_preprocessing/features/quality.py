from __future__ import annotations

import math

import numpy as np

from image_preprocessing.errors import DimensionMismatchError
from image_preprocessing.features._utils import channel_count, ensure_grayscale, require_non_empty
from image_preprocessing.features.filters import normalize_8bit


PEAK_VALUE = 255.0
ZERO_ERROR_THRESHOLD = 1e-10


def compare_images(image_a: np.ndarray, image_b: np.ndarray) -> float:
    """
    PSNR in dB between two images after normalizing both to 8 bit.

    If the channel counts differ, the 3-channel image is converted to grayscale.
    Identical images give +inf.
    """
    a = require_non_empty(image_a)
    b = require_non_empty(image_b)
    if channel_count(a) != channel_count(b):
        if channel_count(a) == 3:
            a = ensure_grayscale(a)
        else:
            b = ensure_grayscale(b)
    if a.shape != b.shape:
        raise DimensionMismatchError(f"Cannot compare images of shapes {a.shape} and {b.shape}")

    diff = normalize_8bit(a).astype(np.float64) - normalize_8bit(b).astype(np.float64)
    squared = diff * diff
    if float(squared.sum()) <= ZERO_ERROR_THRESHOLD:
        return math.inf

    mse = float(squared.mean())
    return 10.0 * math.log10((PEAK_VALUE * PEAK_VALUE) / mse)
