"""
File-backed storage for centroid sets.

A centroid set is a dense (n_centroids, dimension) float32 matrix serialised as

    {"v": 1, "dim": [rows, cols], "data": [row-major values]}

A plain JSON list of equal-length rows is accepted on load as well. Saves go
through a temporary file in the same directory followed by os.replace, so a
reader never sees a half-written file.
"""

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path

import numpy as np
import structlog

from .exceptions import CentroidFormatError

logger = structlog.get_logger(__name__)

FORMAT_VERSION = 1


def encode_centroids(centroids: np.ndarray) -> dict:
    rows, cols = centroids.shape
    return {
        "v": FORMAT_VERSION,
        "dim": [int(rows), int(cols)],
        "data": centroids.astype(np.float32).ravel().tolist(),
    }


def decode_centroids(payload) -> np.ndarray:
    """Turn a parsed JSON document into a centroid matrix

    Raises:
        CentroidFormatError: If the document does not describe a dense 2-D array
    """
    if isinstance(payload, list):
        return _decode_rows(payload)
    if not isinstance(payload, dict):
        raise CentroidFormatError(f"Expected an object or a list, got {type(payload).__name__}")

    if payload.get("v") != FORMAT_VERSION:
        raise CentroidFormatError(f"Unsupported format version: {payload.get('v')!r}")

    dim = payload.get("dim")
    if (
        not isinstance(dim, list)
        or len(dim) != 2
        or not all(isinstance(d, int) and not isinstance(d, bool) and d >= 0 for d in dim)
    ):
        raise CentroidFormatError(f"'dim' must be two non-negative integers, got {dim!r}")

    data = payload.get("data")
    if not isinstance(data, list):
        raise CentroidFormatError("'data' must be a list of numbers")

    rows, cols = dim
    if len(data) != rows * cols:
        raise CentroidFormatError(
            f"Declared shape {rows}x{cols} needs {rows * cols} values, found {len(data)}"
        )

    return _to_matrix(data).reshape(rows, cols)


def _decode_rows(rows: list) -> np.ndarray:
    if not rows:
        raise CentroidFormatError("Row-list format needs at least one row to fix the dimension")
    if not all(isinstance(row, list) for row in rows):
        raise CentroidFormatError("Every row must be a list of numbers")

    width = len(rows[0])
    for i, row in enumerate(rows):
        if len(row) != width:
            raise CentroidFormatError(f"Ragged rows: row 0 has {width} values, row {i} has {len(row)}")

    flat = [x for row in rows for x in row]
    return _to_matrix(flat).reshape(len(rows), width)


def _to_matrix(flat: list) -> np.ndarray:
    if not all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in flat):
        raise CentroidFormatError("Centroid values must be numbers")
    return np.asarray(flat, dtype=np.float32)


class CentroidStore:
    """Loads and persists the centroid set held in a single file"""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def last_modified(self) -> datetime:
        """Modification time of the file as a naive local datetime"""
        return datetime.fromtimestamp(self.path.stat().st_mtime)

    def load(self) -> np.ndarray:
        """Read the centroid matrix

        Raises:
            OSError: If the file is missing or unreadable
            CentroidFormatError: If the content is not a valid centroid set
        """
        with open(self.path, encoding="utf-8") as f:
            try:
                payload = json.load(f)
            except json.JSONDecodeError as e:
                raise CentroidFormatError(f"{self.path}: invalid JSON: {e}") from e

        try:
            centroids = decode_centroids(payload)
        except CentroidFormatError as e:
            raise CentroidFormatError(f"{self.path}: {e}") from e

        logger.info(
            "Centroids loaded",
            path=str(self.path),
            n_centroids=centroids.shape[0],
            dimension=centroids.shape[1],
        )
        return centroids

    def save(self, centroids: np.ndarray) -> None:
        """Atomically replace the file with the given centroid matrix"""
        if centroids.ndim != 2:
            raise CentroidFormatError(f"Centroids must be 2-D, got shape {centroids.shape}")

        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(encode_centroids(centroids), f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info(
            "Centroids saved",
            path=str(self.path),
            n_centroids=centroids.shape[0],
            dimension=centroids.shape[1],
        )

    def __repr__(self) -> str:
        return f"CentroidStore(path={str(self.path)!r})"
