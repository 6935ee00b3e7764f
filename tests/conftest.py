"""Shared fixtures: synthetic images and on-disk image corpora."""

from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import cv2
import numpy as np
import pytest

from image_preprocessing.preprocessing_config import ProcessingConfiguration


def _pattern(shape: Tuple[int, ...], seed: int) -> np.ndarray:
    """Smooth gradient plus noise, so filters and PCA see real structure."""
    rng = np.random.default_rng(seed)
    h, w = shape[:2]
    yy, xx = np.mgrid[0:h, 0:w]
    base = (xx * 3 + yy * 2 + seed * 7) % 256
    if len(shape) == 3:
        base = np.stack([base, (base + 80) % 256, (255 - base)], axis=2)
    noise = rng.integers(-20, 21, size=shape)
    return np.clip(base + noise, 0, 255).astype(np.uint8)


@pytest.fixture
def gray_image():
    return _pattern((64, 64), seed=1)


@pytest.fixture
def color_image():
    return _pattern((64, 64, 3), seed=2)


@pytest.fixture
def make_image():
    """Factory for synthetic uint8 images: make_image(shape, seed)."""
    return _pattern


@pytest.fixture
def image_file(tmp_path, color_image):
    path = tmp_path / "1.png"
    cv2.imwrite(str(path), color_image)
    return path


@pytest.fixture
def make_corpus(tmp_path):
    """Factory writing root/<label>/<n>.png image folders.

    Examples
    --------
    >>> def test_scan(make_corpus):
    ...     root = make_corpus(counts=[10] * 5)
    """
    def _make(
        counts: Sequence[int],
        shape: Tuple[int, ...] = (16, 16, 3),
        name: str = "corpus",
        odd_sizes: Optional[Dict[int, Tuple[int, ...]]] = None,
    ) -> Path:
        root = tmp_path / name
        seed = 0
        for label, count in enumerate(counts):
            folder = root / str(label)
            folder.mkdir(parents=True, exist_ok=True)
            for n in range(count):
                img_shape = shape
                if odd_sizes and label in odd_sizes and n == 0:
                    img_shape = odd_sizes[label]
                cv2.imwrite(str(folder / f"{n}.png"), _pattern(img_shape, seed))
                seed += 1
        return root

    return _make


@pytest.fixture
def grayscale_config():
    return ProcessingConfiguration()


@pytest.fixture
def full_config():
    """Every luminance operation enabled."""
    return ProcessingConfiguration(
        color_mode="grayscale",
        apply_filters=True,
        filter_types=("median", "gaussian", "sobel"),
        subtract_mean=True,
        negative=True,
    )
