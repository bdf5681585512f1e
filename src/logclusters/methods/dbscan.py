"""
DBSCAN clustering method.

Points with at least min_points neighbours (themselves included) within
epsilon are core points; points within epsilon of a core point without being
dense themselves are edge points; everything else is noise. Distances are
Euclidean, which for unit-length embeddings is a monotonic function of cosine
distance.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
import structlog
from sklearn.cluster import DBSCAN

from ..models import ClassificationTag, Core, Edge, Noise
from .base import ClusteringMethod

logger = structlog.get_logger(__name__)

NOISE_LABEL = -1


@dataclass
class DBSCANConfig:
    """Configuration for the DBSCAN method"""

    epsilon: float = 0.5
    min_points: int = 3

    def __post_init__(self):
        if self.epsilon <= 0:
            raise ValueError(f"epsilon must be > 0, got {self.epsilon}")
        if self.min_points < 1:
            raise ValueError(f"min_points must be >= 1, got {self.min_points}")


class DBSCANMethod(ClusteringMethod):
    """Density-based clustering with Core/Edge/Noise tagging"""

    def __init__(self, config: dict):
        self.config = DBSCANConfig(**config)
        self._name = "dbscan"

    @property
    def name(self) -> str:
        return self._name

    def get_config(self) -> dict[str, Any]:
        return {"epsilon": self.config.epsilon, "min_points": self.config.min_points}

    def fit(self, vectors: np.ndarray) -> list[ClassificationTag]:
        self.validate_vectors(vectors)

        logger.info(
            "Running DBSCAN clustering",
            n_vectors=vectors.shape[0],
            epsilon=self.config.epsilon,
            min_points=self.config.min_points,
        )

        model = DBSCAN(
            eps=self.config.epsilon,
            min_samples=self.config.min_points,
            metric="euclidean",
        ).fit(vectors)

        return to_tags(model.labels_, model.core_sample_indices_)


def to_tags(labels: np.ndarray, core_indices: np.ndarray) -> list[ClassificationTag]:
    """Convert scikit-learn labels into classification tags"""
    core = set(int(i) for i in core_indices)
    tags: list[ClassificationTag] = []
    for i, label in enumerate(labels):
        label = int(label)
        if label == NOISE_LABEL:
            tags.append(Noise())
        elif i in core:
            tags.append(Core(label))
        else:
            tags.append(Edge(label))
    return tags
