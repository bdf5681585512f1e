"""
Data models and configuration for the log clustering engine.
"""

from dataclasses import dataclass, field
from datetime import datetime

import numpy as np

DEFAULT_BATCH_SIZE = 1024
DEFAULT_MODEL_NAME = "sentence-transformers/all-MiniLM-L6-v2"


def _check_batch_size(batch_size: int) -> None:
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")


@dataclass
class TrainConfig:
    """Configuration for building the initial centroids"""

    input_file: str = "example.txt"
    output_file: str = "centroids.json"

    method_name: str = "dbscan"
    epsilon: float = 0.5  # Neighbourhood radius in embedding space
    min_points: int = 3  # Neighbours (self included) for a point to be core

    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self):
        if self.epsilon <= 0:
            raise ValueError(f"epsilon must be > 0, got {self.epsilon}")
        if self.min_points < 1:
            raise ValueError(f"min_points must be >= 1, got {self.min_points}")
        _check_batch_size(self.batch_size)

    @property
    def method_config(self) -> dict:
        return {"epsilon": self.epsilon, "min_points": self.min_points}


@dataclass
class IngestConfig:
    """Configuration for matching new logs against existing centroids"""

    input_file: str = "new_logs.txt"
    centroids_file: str = "centroids.json"
    unmatched_file: str = "unmatched.log"

    threshold: float = 0.5  # Euclidean distance below which a message matches
    learning_rate: float = 0.1  # EMA step toward a matched message

    def __post_init__(self):
        if self.threshold <= 0:
            raise ValueError(f"threshold must be > 0, got {self.threshold}")
        if not 0 < self.learning_rate <= 1:
            raise ValueError(f"learning_rate must be in (0, 1], got {self.learning_rate}")


@dataclass
class RetrainConfig:
    """Configuration for appending backlog messages as new centroids"""

    input_file: str = "unmatched.log"
    centroids_file: str = "centroids.json"
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self):
        _check_batch_size(self.batch_size)


# Classification tags produced by density-based clustering


@dataclass(frozen=True)
class Noise:
    """Point with no dense neighbourhood; dropped from the centroids"""

    def describe(self) -> str:
        return "Noise"


@dataclass(frozen=True)
class Core:
    """Point with at least min_points neighbours within epsilon"""

    cluster: int

    def describe(self) -> str:
        return f"Cluster {self.cluster}"


@dataclass(frozen=True)
class Edge:
    """Point reachable from a core point but not dense itself"""

    cluster: int

    def describe(self) -> str:
        return f"Cluster {self.cluster}"


ClassificationTag = Noise | Core | Edge


# Match decisions produced by the nearest-centroid search


@dataclass(frozen=True)
class Matched:
    index: int
    distance: float


@dataclass(frozen=True)
class Unmatched:
    distance: float


MatchDecision = Matched | Unmatched


@dataclass
class LogRecord:
    """One input line with its canonical form and best-effort timestamp"""

    raw: str
    canonical: str
    timestamp: datetime


@dataclass
class TrainResult:
    """Outcome of a training run"""

    centroids: np.ndarray
    n_vectors: int
    n_noise: int
    tags: list[ClassificationTag] = field(default_factory=list, repr=False)

    @property
    def n_clusters(self) -> int:
        return int(self.centroids.shape[0])

    def to_dict(self) -> dict:
        return {
            "clusters": self.n_clusters,
            "noise": self.n_noise,
            "vectors": self.n_vectors,
        }


@dataclass
class IngestStats:
    """Running counters of an ingestion run"""

    total: int = 0
    matched: int = 0
    skipped_stale: int = 0
    skipped_duplicate: int = 0

    @property
    def unmatched(self) -> int:
        return self.total - self.matched

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "matched": self.matched,
            "unmatched": self.unmatched,
            "skipped_stale": self.skipped_stale,
            "skipped_duplicate": self.skipped_duplicate,
        }


@dataclass
class RetrainResult:
    """Outcome of a retraining run"""

    added: int
    total: int
