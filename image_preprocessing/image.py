"""
image.py

A single decoded image and the per-image preprocessing chain.
Processing is a pure function of the original matrix and the configuration;
the formatted feature vector is computed once and cached.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

import cv2
import numpy as np

from image_preprocessing.errors import InvalidInputError
from image_preprocessing.features import filters
from image_preprocessing.features._utils import ensure_grayscale
from image_preprocessing.features.color import Chrominances, convert_to_yuv
from image_preprocessing.pca import PcaBasis
from image_preprocessing.preprocessing_config import DEFAULT_CONFIG, ProcessingConfiguration


logger = logging.getLogger(__name__)

# 8-bit planes are scaled by 1/256 so that 255 maps just below 1.0.
UINT8_SCALE = 256.0


class Image:
    def __init__(self, original: np.ndarray, label: int, config: ProcessingConfiguration = DEFAULT_CONFIG):
        """
        Args:
            original: decoded image matrix (H x W or H x W x 3 BGR)
            label: category index (>= 0)
            config: processing options shared by all images of a corpus

        Raises:
            InvalidInputError: if the matrix is empty or the label is negative
        """
        arr = np.asarray(original) if original is not None else np.empty((0, 0))
        if arr.ndim < 2 or arr.shape[0] == 0 or arr.shape[1] == 0:
            raise InvalidInputError(f"Image constructor: empty matrix (shape {arr.shape})")
        if int(label) < 0:
            raise InvalidInputError(f"Image constructor: label must be >= 0, got {label}")

        self._original = arr.copy()
        self._label = int(label)
        self._config = config
        self._processed: Optional[np.ndarray] = None
        self._formatted: Optional[np.ndarray] = None
        self._formatted_pca: Optional[np.ndarray] = None

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        label: int,
        config: ProcessingConfiguration = DEFAULT_CONFIG,
    ) -> "Image":
        """Decode an image file in the configured color mode."""
        image = cv2.imread(str(path), config.color_mode.imread_flag)
        if image is None or image.size == 0:
            raise InvalidInputError(f"Image constructor: invalid path: {path}, image could not be read")
        logger.debug("Decoded %s (%s) label=%d", path, "x".join(map(str, image.shape)), label)
        return cls(image, label, config)

    # ---------- accessors ----------
    @property
    def original(self) -> np.ndarray:
        view = self._original.view()
        view.setflags(write=False)
        return view

    @property
    def label(self) -> int:
        return self._label

    @property
    def config(self) -> ProcessingConfiguration:
        return self._config

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._original.shape

    @property
    def size(self) -> int:
        """Pixel count (rows x cols) of the original image."""
        return int(self._original.shape[0] * self._original.shape[1])

    @property
    def is_formatted(self) -> bool:
        return self._formatted is not None or self._formatted_pca is not None

    @property
    def processed(self) -> Optional[np.ndarray]:
        """Cached pre-PCA row, set by prepare_for_pca()."""
        return self._processed

    # ---------- processing ----------
    def process(self) -> Tuple[np.ndarray, Optional[Chrominances]]:
        """
        Apply the configured chain to the luminance plane.

        Returns:
            (luminance, chrominances) where chrominances is None in grayscale mode.
            Chrominances are never filtered, negated or mean-subtracted.
        """
        cfg = self._config
        chrominances: Optional[Chrominances] = None
        if cfg.is_color:
            yuv = convert_to_yuv(self._original)
            luminance = yuv.luminance
            chrominances = yuv.chrominances
        else:
            luminance = ensure_grayscale(self._original)

        if cfg.subtract_mean:
            luminance = filters.subtract_mean(luminance)
        for kind in cfg.active_filters:
            luminance = filters.apply_filter(luminance, kind)
        if cfg.negative:
            luminance = filters.convert_to_negative(luminance)
        return luminance, chrominances

    def prepare_for_pca(self) -> np.ndarray:
        """Process, drop chrominance and cache the flattened luminance row."""
        luminance, _ = self.process()
        row = np.ascontiguousarray(luminance).reshape(-1)
        row.setflags(write=False)
        self._processed = row
        return row

    def format_for_nn(self) -> np.ndarray:
        """Processed image as one float vector: luminance, then U, then V (row-major)."""
        if self._formatted is None:
            luminance, chrominances = self.process()
            planes = [luminance]
            if chrominances is not None:
                planes.extend([chrominances.u, chrominances.v])
            self._formatted = _format_planes(planes)
        return self._formatted

    def format_for_nn_with_pca(self, basis: PcaBasis) -> np.ndarray:
        """
        Project the cached pre-PCA row through `basis` and format the result.
        Cached apart from format_for_nn(), so the two never shadow each other.

        Raises:
            InvalidInputError: if prepare_for_pca() has not been called
        """
        if self._formatted_pca is None:
            if self._processed is None:
                raise InvalidInputError("No pre-PCA data cached: call prepare_for_pca() first")
            point = basis.project(self._processed)
            self._formatted_pca = _format_planes([point])
        return self._formatted_pca

    def __repr__(self) -> str:
        return f"Image(shape={self.shape}, label={self._label}, formatted={self.is_formatted})"


def _format_planes(planes: List[np.ndarray]) -> np.ndarray:
    parts: List[np.ndarray] = []
    for plane in planes:
        arr = np.asarray(plane)
        if arr.dtype == np.uint8:
            parts.append(arr.astype(np.float32).reshape(-1) / np.float32(UINT8_SCALE))
        elif np.issubdtype(arr.dtype, np.floating):
            parts.append(arr.astype(np.float32, copy=False).reshape(-1))
        else:
            raise InvalidInputError(
                f"Cannot format plane of dtype {arr.dtype} (only uint8 and float accepted)"
            )
    out = np.concatenate(parts, axis=0)
    out.setflags(write=False)
    return out
