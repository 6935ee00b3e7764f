"""
parallel_processing.py

Multithreaded image decoding for the corpus scan.
Results keep the order of the input paths so the scan order stays reproducible.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Sequence, Union

from image_preprocessing.image import Image
from image_preprocessing.preprocessing_config import ProcessingConfiguration


logger = logging.getLogger(__name__)


def load_images_parallel(
    image_paths: Sequence[Union[str, Path]],
    label: int,
    config: ProcessingConfiguration,
    max_workers: int = 1,
) -> List[Image]:
    """
    Decode images from disk, all with the same label.

    Args:
        image_paths: files to decode
        label: category of every image
        config: processing configuration attached to each image
        max_workers: number of decoding threads (1 decodes inline)

    Returns:
        List of Image objects in the order of image_paths
    """
    if max_workers <= 1 or len(image_paths) <= 1:
        return [Image.from_file(path, label, config) for path in image_paths]

    images: List[Image] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [(path, executor.submit(Image.from_file, path, label, config)) for path in image_paths]
        for path, future in futures:
            try:
                images.append(future.result())
            except Exception:
                logger.error("Error while adding image %s to the list", path)
                for _, pending in futures:
                    pending.cancel()
                raise
    return images
