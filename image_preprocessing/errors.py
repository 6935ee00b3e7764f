"""Error types raised by the preprocessing pipeline.

All failures surface synchronously to the caller of the triggering
operation. A single bad file aborts the whole scan.
"""


class PreprocessingError(Exception):
    """Base class for every error raised by image_preprocessing."""


class InvalidInputError(PreprocessingError, ValueError):
    """Bad configuration value, undecodable file or unsupported channel/dtype."""


class NotFoundError(PreprocessingError, FileNotFoundError):
    """Missing or empty category folder, or no images loaded."""


class DimensionMismatchError(PreprocessingError, ValueError):
    """Images of different sizes in one corpus, or PCA rows of unequal length."""
