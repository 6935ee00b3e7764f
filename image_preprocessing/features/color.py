from __future__ import annotations

from dataclasses import dataclass

import cv2
import numpy as np

from image_preprocessing.errors import InvalidInputError
from image_preprocessing.features._utils import require_non_empty


CHROMA_DECIMATION = 0.5


@dataclass(frozen=True)
class Chrominances:
    u: np.ndarray
    v: np.ndarray


@dataclass(frozen=True)
class YuvImage:
    luminance: np.ndarray
    chrominances: Chrominances


def convert_to_yuv(image_bgr: np.ndarray) -> YuvImage:
    """Split a BGR image into full-size luminance and two chrominances decimated 2x2."""
    arr = require_non_empty(image_bgr)
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise InvalidInputError(
            f"Cannot convert to YUV: expected a 3-channel BGR image, got shape {arr.shape}"
        )
    if arr.dtype not in (np.uint8, np.uint16, np.float32):
        arr = arr.astype(np.float32)

    yuv = cv2.cvtColor(arr, cv2.COLOR_BGR2YUV)
    y, u, v = cv2.split(yuv)
    u_small = cv2.resize(u, (0, 0), fx=CHROMA_DECIMATION, fy=CHROMA_DECIMATION)
    v_small = cv2.resize(v, (0, 0), fx=CHROMA_DECIMATION, fy=CHROMA_DECIMATION)
    return YuvImage(luminance=y, chrominances=Chrominances(u=u_small, v=v_small))
