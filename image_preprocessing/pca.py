"""
pca.py

Corpus-wide principal component analysis over flattened images.
Each row of the input matrix is one image; columns are pixels.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from numbers import Integral, Real
from typing import Sequence, Union

import numpy as np
from sklearn.decomposition import PCA

from image_preprocessing.errors import DimensionMismatchError, InvalidInputError


logger = logging.getLogger(__name__)

VARIANCE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class PcaBasis:
    mean: np.ndarray          # (n_features,)
    eigenvectors: np.ndarray  # (n_components, n_features), one component per row
    eigenvalues: np.ndarray   # (n_components,)

    @property
    def n_components(self) -> int:
        return int(self.eigenvectors.shape[0])

    @property
    def n_features(self) -> int:
        return int(self.mean.shape[0])

    def project(self, rows: np.ndarray) -> np.ndarray:
        """Coordinates of one row (1D) or many rows (2D) in the component space."""
        data = np.asarray(rows, dtype=np.float64)
        if data.shape[-1] != self.n_features:
            raise DimensionMismatchError(
                f"Cannot project rows of length {data.shape[-1]} with a basis of {self.n_features} features"
            )
        return ((data - self.mean) @ self.eigenvectors.T).astype(np.float32)

    def back_project(self, coefficients: np.ndarray) -> np.ndarray:
        """Reconstruct rows in pixel space from component coordinates."""
        coeffs = np.asarray(coefficients, dtype=np.float64)
        if coeffs.shape[-1] != self.n_components:
            raise DimensionMismatchError(
                f"Expected {self.n_components} coefficients per row, got {coeffs.shape[-1]}"
            )
        return (coeffs @ self.eigenvectors + self.mean).astype(np.float32)


def stack_rows(rows: Union[np.ndarray, Sequence[np.ndarray]]) -> np.ndarray:
    """Build the (n_samples, n_features) float64 matrix, checking row lengths."""
    if isinstance(rows, np.ndarray) and rows.ndim == 2:
        data = rows
    else:
        flat = [np.asarray(r).reshape(-1) for r in rows]
        if not flat:
            raise InvalidInputError("Cannot fit PCA on an empty set of rows")
        lengths = {r.size for r in flat}
        if len(lengths) != 1:
            raise DimensionMismatchError(f"PCA rows have unequal lengths: {sorted(lengths)}")
        data = np.vstack(flat)
    if data.shape[0] == 0 or data.shape[1] == 0:
        raise InvalidInputError(f"Cannot fit PCA on a matrix of shape {data.shape}")
    return data.astype(np.float64, copy=False)


def pca_base(rows: Union[np.ndarray, Sequence[np.ndarray]], target: Union[int, float]) -> PcaBasis:
    """
    Fit a PCA basis.

    Args:
        rows: matrix with one flattened image per row, or a sequence of 1D rows
        target: int -> maximum number of components to keep (0 keeps all);
                float in (0, 1] -> fraction of variance to retain

    Returns:
        PcaBasis with mean, eigenvectors and eigenvalues
    """
    data = stack_rows(rows)
    max_components = min(data.shape)

    if isinstance(target, bool):
        raise InvalidInputError(f"Invalid PCA target: {target!r}")
    if isinstance(target, Integral):
        if target < 0:
            raise InvalidInputError(f"PCA component count must be >= 0, got {target}")
        keep = max_components if target == 0 else min(int(target), max_components)
        pca = PCA(n_components=keep, svd_solver="full").fit(data)
    elif isinstance(target, Real):
        if not 0.0 < float(target) <= 1.0:
            raise InvalidInputError(f"Retained variance must be in (0, 1], got {target}")
        pca = PCA(n_components=None, svd_solver="full").fit(data)
        keep = _components_for_variance(pca.explained_variance_ratio_, float(target))
    else:
        raise InvalidInputError(f"Invalid PCA target: {target!r}")

    basis = PcaBasis(
        mean=pca.mean_.copy(),
        eigenvectors=pca.components_[:keep].copy(),
        eigenvalues=pca.explained_variance_[:keep].copy(),
    )
    logger.info("PCA fitted on %d rows x %d features, kept %d components",
                data.shape[0], data.shape[1], basis.n_components)
    return basis


def _components_for_variance(ratios: np.ndarray, retained: float) -> int:
    # Smallest K whose cumulative ratio reaches the target.
    cumulative = np.cumsum(ratios)
    keep = int(np.searchsorted(cumulative, retained - VARIANCE_TOLERANCE, side="left")) + 1
    return max(1, min(keep, len(ratios)))
