from __future__ import annotations

import cv2
import numpy as np

from image_preprocessing.errors import InvalidInputError


def channel_count(image: np.ndarray) -> int:
    return 1 if image.ndim == 2 else int(image.shape[2])


def ensure_grayscale(image: np.ndarray) -> np.ndarray:
    """Reduce a 3-channel BGR matrix to luminance; single-channel passes through."""
    arr = np.asarray(image)
    if arr.ndim == 2:
        return arr
    if arr.ndim == 3 and arr.shape[2] == 1:
        return arr[:, :, 0]
    if arr.ndim == 3 and arr.shape[2] == 3:
        if arr.dtype not in (np.uint8, np.uint16, np.float32):
            arr = arr.astype(np.float32)
        return cv2.cvtColor(arr, cv2.COLOR_BGR2GRAY)
    raise InvalidInputError(f"Expected a 1- or 3-channel image, got shape {arr.shape}")


def require_non_empty(image: np.ndarray, what: str = "image") -> np.ndarray:
    arr = np.asarray(image)
    if arr.size == 0 or arr.ndim < 2:
        raise InvalidInputError(f"Empty or malformed {what}: shape {arr.shape}")
    return arr
