"""Command line entry point: read a corpus, save it and verify the saved file."""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from image_preprocessing.data_loader import DataLoader
from image_preprocessing.errors import PreprocessingError
from image_preprocessing.preprocessing_config import (
    DEFAULT_PCA_COMPONENTS,
    ColorMode,
    ProcessingConfiguration,
    parse_filter_sequence,
)


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-preprocess",
        description="Preprocess a categorized image folder into neural network input vectors.",
    )
    parser.add_argument("-i", "--input", required=True, help="Path to the folder with data")
    parser.add_argument("-l", "--labels", required=True, type=int, help="Number of categories")
    parser.add_argument("-f", "--filter", default="",
                        help="Filters to apply, in order: sobel(s) / gaussian(g) / median(m), e.g. 'mgs'")
    parser.add_argument("-p", "--pca", choices=["components", "variance"], default=None,
                        help="Enable PCA, limited by component count or by retained variance")
    parser.add_argument("-e", "--components", type=int, default=DEFAULT_PCA_COMPONENTS,
                        help="Max number of PCA components (0 keeps all)")
    parser.add_argument("-v", "--variance", type=float, default=0.95,
                        help="PCA retained variance, used with --pca variance")
    parser.add_argument("-s", "--save", default="", help="Save path")
    parser.add_argument("-n", "--negative", action="store_true", help="Change the image to negative")
    parser.add_argument("-m", "--mean", action="store_true", help="Subtract mean")
    parser.add_argument("-c", "--color", action="store_true", help="Read data as color images")
    parser.add_argument("--shuffle", action="store_true", help="Shuffle images after reading")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for shuffling")
    parser.add_argument("--workers", type=int, default=1, help="Number of decoding threads")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return parser


def config_from_args(args: argparse.Namespace) -> ProcessingConfiguration:
    filter_types = parse_filter_sequence(args.filter)
    return ProcessingConfiguration(
        color_mode=ColorMode.COLOR if args.color else ColorMode.GRAYSCALE,
        apply_filters=bool(filter_types),
        filter_types=filter_types,
        subtract_mean=args.mean,
        negative=args.negative,
        use_pca=args.pca is not None,
        pca_components=args.components,
        pca_variance=args.variance if args.pca == "variance" else None,
    )


def run(args: argparse.Namespace) -> int:
    config = config_from_args(args)
    loader = DataLoader(
        args.input,
        args.labels,
        config,
        random_state=args.seed,
        max_workers=args.workers,
    )
    num_images = loader.read_data(shuffle=args.shuffle)
    logger.info("Read successfully: %d images", num_images)

    if not args.save:
        return 0

    loader.save(args.save)
    vectors, labels = DataLoader.read_vector(args.save)
    if len(vectors) != num_images or len(labels) != num_images:
        logger.error("Saving went wrong: wrote %d images, read back %d vectors and %d labels",
                     num_images, len(vectors), len(labels))
        return 1
    print(f"Saved: {args.save}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return run(args)
    except PreprocessingError as exc:
        logger.error("error: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
