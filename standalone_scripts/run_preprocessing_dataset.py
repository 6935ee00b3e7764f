"""
Preprocess the full dataset and save the formatted vectors to a binary file.

Usage (from repo root):
  python standalone_scripts/run_preprocessing_dataset.py
"""

from __future__ import annotations

import logging
from pathlib import Path

from image_preprocessing.data_loader import DataLoader
from image_preprocessing.preprocessing_config import ColorMode, FilterType, ProcessingConfiguration


DATASET_DIR = Path("../dataset")
OUT_FILE = Path("../formatted_data.bin")
NUM_CATEGORIES = 5
SEED = 42
WORKERS = 8

# Filters run in this order on the luminance plane.
CONFIG = ProcessingConfiguration(
    color_mode=ColorMode.GRAYSCALE,
    apply_filters=True,
    filter_types=(FilterType.MEDIAN, FilterType.GAUSSIAN),
    subtract_mean=False,
    negative=False,
    use_pca=True,
    pca_components=100,
)


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    if not DATASET_DIR.exists():
        raise SystemExit(f"Dataset folder not found: {DATASET_DIR}")

    loader = DataLoader(DATASET_DIR, NUM_CATEGORIES, CONFIG, random_state=SEED, max_workers=WORKERS)
    num_images = loader.read_data(shuffle=True)
    loader.save(OUT_FILE)

    vectors, labels = DataLoader.read_vector(OUT_FILE)
    if len(vectors) != num_images or len(labels) != num_images:
        raise SystemExit(f"Saving went wrong: {len(vectors)} vectors / {len(labels)} labels for {num_images} images")
    print(f"Saved: {OUT_FILE}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
