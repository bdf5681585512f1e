"""
Nearest-centroid search and the online centroid update.
"""

import numpy as np

from .exceptions import ShapeError
from .models import Matched, MatchDecision, Unmatched


def check_dimension(centroids: np.ndarray, dimension: int, context: str) -> None:
    if centroids.shape[1] != dimension:
        raise ShapeError(centroids.shape[1], dimension, context)


def nearest_centroid(centroids: np.ndarray, vector: np.ndarray) -> tuple[int, float]:
    """Index of and Euclidean distance to the closest centroid

    Ties resolve to the lowest index. An empty centroid set gives (-1, inf).
    """
    check_dimension(centroids, vector.shape[0], "comparing a vector against centroids")
    if centroids.shape[0] == 0:
        return -1, float("inf")

    diffs = centroids.astype(np.float64) - vector.astype(np.float64)
    distances = np.linalg.norm(diffs, axis=1)
    index = int(np.argmin(distances))
    return index, float(distances[index])


def match(centroids: np.ndarray, vector: np.ndarray, threshold: float) -> MatchDecision:
    """Classify a vector as matching its nearest centroid or not"""
    index, distance = nearest_centroid(centroids, vector)
    if distance < threshold:
        return Matched(index=index, distance=distance)
    return Unmatched(distance=distance)


def update_centroid(centroids: np.ndarray, index: int, vector: np.ndarray, learning_rate: float) -> None:
    """Move one centroid toward a vector in place: c <- c + lr * (v - c)"""
    centroid = centroids[index]
    centroid += learning_rate * (vector.astype(centroids.dtype) - centroid)
