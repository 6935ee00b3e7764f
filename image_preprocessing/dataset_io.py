"""
dataset_io.py

Binary dataset format (little-endian, no header or checksum):

    int32                  number of images N
    N x [int32 length L, float32[L] values]
    N x int32              labels
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np

from image_preprocessing.errors import InvalidInputError


logger = logging.getLogger(__name__)

INT_DTYPE = np.dtype("<i4")
FLOAT_DTYPE = np.dtype("<f4")


def write_formatted_data(
    path: Union[str, Path],
    vectors: Iterable[np.ndarray],
    labels: Sequence[int],
) -> int:
    """
    Write feature vectors followed by their labels. `vectors` may be a generator;
    it must yield exactly len(labels) items.

    Returns:
        Number of records written
    """
    count = len(labels)
    written = 0
    with open(path, "wb") as f:
        f.write(np.asarray([count], dtype=INT_DTYPE).tobytes())
        for vec in vectors:
            values = np.asarray(vec, dtype=FLOAT_DTYPE).reshape(-1)
            f.write(np.asarray([values.size], dtype=INT_DTYPE).tobytes())
            f.write(values.tobytes())
            written += 1
        if written != count:
            raise InvalidInputError(f"Got {written} vectors for {count} labels")
        f.write(np.asarray(labels, dtype=INT_DTYPE).tobytes())
    logger.info("Saved %d records to %s", count, path)
    return count


def read_formatted_data(path: Union[str, Path]) -> Tuple[List[np.ndarray], List[int]]:
    """
    Read a file written by write_formatted_data.

    Record lengths are taken as stored; they are not checked against each other.

    Returns:
        (vectors, labels) with one float32 array per record
    """
    buffer = Path(path).read_bytes()
    reader = _Reader(buffer, path)

    count = reader.read_int()
    if count < 0:
        raise InvalidInputError(f"{path}: negative record count {count}")

    vectors: List[np.ndarray] = []
    for _ in range(count):
        length = reader.read_int()
        if length < 0:
            raise InvalidInputError(f"{path}: negative vector length {length}")
        vectors.append(reader.read_array(FLOAT_DTYPE, length))
    labels = [int(x) for x in reader.read_array(INT_DTYPE, count)]
    return vectors, labels


class _Reader:
    def __init__(self, buffer: bytes, path: Union[str, Path]):
        self._buffer = buffer
        self._offset = 0
        self._path = path

    def read_array(self, dtype: np.dtype, n: int) -> np.ndarray:
        nbytes = dtype.itemsize * n
        if self._offset + nbytes > len(self._buffer):
            raise InvalidInputError(f"{self._path}: truncated dataset file at byte {self._offset}")
        out = np.frombuffer(self._buffer, dtype=dtype, count=n, offset=self._offset)
        self._offset += nbytes
        return out.astype(dtype.newbyteorder("="), copy=True)

    def read_int(self) -> int:
        return int(self.read_array(INT_DTYPE, 1)[0])
