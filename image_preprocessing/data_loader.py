"""
data_loader.py

Reading a categorized image corpus, storing the images and serving them
processed and formatted for neural network input.

Expected folder structure (folder names are the integer labels):

    root/
        0/
            image1.jpg
            ...
        1/
            ...
        {num_categories-1}/
            ...

Filenames are irrelevant: any file whose name contains an allowed extension is
read. All images must have the same pixel count.
"""
from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from image_preprocessing import dataset_io
from image_preprocessing.errors import DimensionMismatchError, InvalidInputError, NotFoundError
from image_preprocessing.image import Image
from image_preprocessing.parallel_processing import load_images_parallel
from image_preprocessing.pca import PcaBasis, pca_base
from image_preprocessing.preprocessing_config import DEFAULT_EXTENSIONS, ProcessingConfiguration


logger = logging.getLogger(__name__)


class DataLoader:
    """
    Stores every image of a corpus and hands them out one by one.

    Not thread-safe: the read cursor and the shuffle state belong to a single consumer.
    """

    def __init__(
        self,
        path: Union[str, Path],
        num_categories: int,
        config: ProcessingConfiguration,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        random_state: Optional[int] = None,
        max_workers: int = 1,
    ):
        if int(num_categories) < 2:
            raise InvalidInputError("DataLoader: there must be at least 2 categories for classification")
        self.path = Path(path)
        self.num_categories = int(num_categories)
        self.config = config
        self.allowed_extensions: Tuple[str, ...] = tuple(extensions)
        self.max_workers = max(1, int(max_workers))
        self._rng = random.Random(random_state)
        self._images: List[Image] = []
        self._current_index = 0
        self._pca_basis: Optional[PcaBasis] = None

    # ---------- properties ----------
    @property
    def num_images(self) -> int:
        return len(self._images)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def pca_basis(self) -> Optional[PcaBasis]:
        return self._pca_basis

    @property
    def images(self) -> Tuple[Image, ...]:
        return tuple(self._images)

    @property
    def labels(self) -> List[int]:
        return [img.label for img in self._images]

    def __len__(self) -> int:
        return len(self._images)

    def __getitem__(self, index: int) -> Image:
        return self._images[index]

    # ---------- reading ----------
    def read_data(self, shuffle: bool = False) -> int:
        """
        Scan every category folder and decode all image files.

        A rescan discards previously loaded images and any fitted PCA basis.

        Returns:
            Number of images read

        Raises:
            NotFoundError: a category folder is missing or holds no matching files
            DimensionMismatchError: an image's pixel count differs from the first image
            InvalidInputError: a file could not be decoded
        """
        self._reset()
        images: List[Image] = []
        data_dimension: Optional[int] = None

        for label in range(self.num_categories):
            folder = self.path / str(label)
            filenames = self._read_filenames(folder)
            loaded = load_images_parallel(filenames, label, self.config, self.max_workers)
            for path, img in zip(filenames, loaded):
                if data_dimension is None:
                    data_dimension = img.size
                elif img.size != data_dimension:
                    raise DimensionMismatchError(
                        f"Inconsistent data size: {path} has {img.size} pixels, expected {data_dimension}"
                    )
            images.extend(loaded)
            logger.info("Category %d: read %d images from %s", label, len(loaded), folder)

        self._images = images
        if self.config.use_pca:
            self._pca_basis = self._pca_calculate()
        if shuffle:
            self._shuffle_images()
        logger.info("Read %d images in %d categories", len(self._images), self.num_categories)
        return len(self._images)

    def _read_filenames(self, folder: Path) -> List[Path]:
        if not folder.is_dir():
            raise NotFoundError(f"There is no folder with a given path ({folder}) or it is empty")

        filenames = []
        for entry in sorted(folder.iterdir(), key=lambda p: p.name):
            name = entry.name
            if name.startswith("."):
                continue
            if entry.is_dir():
                continue
            if not any(ext in name for ext in self.allowed_extensions):
                continue
            filenames.append(entry)

        if not filenames:
            raise NotFoundError(f"There is no folder with a given path ({folder}) or it is empty")
        return filenames

    # ---------- access ----------
    def load_next(self) -> np.ndarray:
        """
        Formatted vector of the image at the cursor.

        The cursor advances after each call. After the last image it wraps to 0
        and the images are reshuffled, so repeated calls iterate over the corpus
        forever, one epoch at a time.
        """
        if not self._images:
            raise NotFoundError("No images loaded: call read_data() first")

        vector = self._formatted(self._images[self._current_index])
        self._current_index += 1
        if self._current_index == len(self._images):
            self._current_index = 0
            self._shuffle_images()
        return vector

    def _formatted(self, image: Image) -> np.ndarray:
        if self.config.use_pca:
            if self._pca_basis is None:
                self._pca_basis = self._pca_calculate()
            return image.format_for_nn_with_pca(self._pca_basis)
        return image.format_for_nn()

    # ---------- persistence ----------
    def save(self, path: Union[str, Path]) -> None:
        """Write every formatted vector, in stored order, followed by all labels."""
        if self.config.use_pca and self._pca_basis is None:
            self._pca_basis = self._pca_calculate()
        dataset_io.write_formatted_data(
            path,
            (self._formatted(img) for img in self._images),
            self.labels,
        )

    @staticmethod
    def read_vector(path: Union[str, Path]) -> Tuple[List[np.ndarray], List[int]]:
        """Read a file written by save(): (vectors, labels)."""
        return dataset_io.read_formatted_data(path)

    # ---------- internals ----------
    def _reset(self) -> None:
        self._images = []
        self._current_index = 0
        self._pca_basis = None

    def _shuffle_images(self) -> None:
        self._rng.shuffle(self._images)
        logger.debug("Shuffled %d images", len(self._images))

    def _pca_calculate(self) -> PcaBasis:
        if not self._images:
            raise NotFoundError("No images loaded: call read_data() first")
        rows = [img.prepare_for_pca() for img in self._images]
        return pca_base(rows, self.config.pca_target)
