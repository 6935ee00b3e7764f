from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from numbers import Integral
from typing import Iterable, Tuple, Union

import cv2

from image_preprocessing.errors import InvalidInputError


DEFAULT_EXTENSIONS: Tuple[str, ...] = (".JPEG", ".jpg", ".jpeg", ".png", ".bmp")
DEFAULT_PCA_COMPONENTS = 100


class ColorMode(str, Enum):
    GRAYSCALE = "grayscale"
    COLOR = "color"

    @property
    def imread_flag(self) -> int:
        return cv2.IMREAD_COLOR if self is ColorMode.COLOR else cv2.IMREAD_GRAYSCALE


class FilterType(str, Enum):
    """Spatial filters. Values double as the single-letter CLI codes."""

    GAUSSIAN = "g"
    SOBEL = "s"
    MEDIAN = "m"

    @classmethod
    def parse(cls, value: Union["FilterType", str]) -> "FilterType":
        if isinstance(value, cls):
            return value
        key = str(value).strip()
        for member in cls:
            if key == member.value or key.lower() == member.name.lower():
                return member
        raise InvalidInputError(
            f"Unknown filter type: {value!r} (use gaussian/g, median/m or sobel/s)"
        )


def parse_filter_sequence(codes: str) -> Tuple[FilterType, ...]:
    """Turn a string of filter letters such as ``"g s m"`` into filter types."""
    return tuple(FilterType.parse(c) for c in codes if not c.isspace())


@dataclass(frozen=True)
class ProcessingConfiguration:
    """Operations performed on every image, in this order:
    color decomposition, mean subtraction, filters, negation, PCA.

    ``pca_components`` of 0 keeps every component. When ``pca_variance`` is set
    it takes precedence over the component count.
    """

    color_mode: ColorMode = ColorMode.GRAYSCALE
    apply_filters: bool = False
    filter_types: Tuple[FilterType, ...] = field(default_factory=tuple)
    subtract_mean: bool = False
    negative: bool = False
    use_pca: bool = False
    pca_components: int = DEFAULT_PCA_COMPONENTS
    pca_variance: float | None = None

    def __post_init__(self) -> None:
        try:
            color_mode = ColorMode(self.color_mode)
        except ValueError as exc:
            raise InvalidInputError(
                f"Invalid color mode: {self.color_mode!r} (only 'grayscale' or 'color' available)"
            ) from exc
        object.__setattr__(self, "color_mode", color_mode)

        filters: Iterable = self.filter_types
        if isinstance(filters, str):
            filters = parse_filter_sequence(filters)
        object.__setattr__(self, "filter_types", tuple(FilterType.parse(f) for f in filters))

        if isinstance(self.pca_components, bool) or not isinstance(self.pca_components, Integral):
            raise InvalidInputError(f"pca_components must be an integer, got {self.pca_components!r}")
        if self.pca_components < 0:
            raise InvalidInputError(f"pca_components must be >= 0, got {self.pca_components}")
        object.__setattr__(self, "pca_components", int(self.pca_components))

        if self.pca_variance is not None:
            try:
                variance = float(self.pca_variance)
            except (TypeError, ValueError) as exc:
                raise InvalidInputError(f"pca_variance must be a number, got {self.pca_variance!r}") from exc
            if not 0.0 < variance <= 1.0:
                raise InvalidInputError(f"pca_variance must be in (0, 1], got {self.pca_variance}")
            object.__setattr__(self, "pca_variance", variance)

    @property
    def is_color(self) -> bool:
        return self.color_mode is ColorMode.COLOR

    @property
    def active_filters(self) -> Tuple[FilterType, ...]:
        return self.filter_types if self.apply_filters else ()

    @property
    def pca_target(self) -> Union[int, float]:
        if self.pca_variance is not None:
            return self.pca_variance
        return self.pca_components


DEFAULT_CONFIG = ProcessingConfiguration()
