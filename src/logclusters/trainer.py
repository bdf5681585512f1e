"""
Batch trainer for the initial centroid set.

Reads a log corpus in batches, embeds it, clusters the vectors and stores one
mean centroid per discovered cluster.
"""

import logging
import time

import numpy as np
import structlog

from .batching import embed_in_batches, iter_lines
from .embedding import Embedder
from .exceptions import NoClustersFoundError
from .methods import get_method
from .models import ClassificationTag, Core, Edge, TrainConfig, TrainResult
from .preprocessing import LogPreprocessor
from .store import CentroidStore

logger = structlog.get_logger(__name__)


def reduce_to_centroids(vectors: np.ndarray, tags: list[ClassificationTag]) -> tuple[np.ndarray, int]:
    """Average the members of each cluster

    Noise points are discarded. Centroid rows are ordered by cluster id.

    Returns:
        (centroids of shape (n_clusters, dimension), number of noise points)
    """
    members: dict[int, list[int]] = {}
    n_noise = 0
    for i, tag in enumerate(tags):
        match tag:
            case Core(cluster) | Edge(cluster):
                members.setdefault(cluster, []).append(i)
            case _:
                n_noise += 1

    dim = vectors.shape[1]
    if not members:
        return np.zeros((0, dim), dtype=np.float32), n_noise

    centroids = np.stack(
        [vectors[members[cluster]].mean(axis=0) for cluster in sorted(members)]
    ).astype(np.float32)
    return centroids, n_noise


class CentroidTrainer:
    """Builds centroids from a log corpus"""

    def __init__(self, config: TrainConfig, embedder: Embedder, preprocessor: LogPreprocessor):
        self.config = config
        self.embedder = embedder
        self.preprocessor = preprocessor
        self.store = CentroidStore(config.output_file)
        self.method = get_method(config.method_name, config.method_config)

        logger.info(
            "Trainer initialized",
            method=self.method.name,
            epsilon=config.epsilon,
            min_points=config.min_points,
            batch_size=config.batch_size,
        )

    def cluster(self, vectors: np.ndarray) -> TrainResult:
        """Cluster vectors and reduce each cluster to its centroid

        Raises:
            NoClustersFoundError: If every vector was classified as noise
        """
        tags = self.method.fit(vectors)
        centroids, n_noise = reduce_to_centroids(vectors, tags)

        if centroids.shape[0] == 0:
            raise NoClustersFoundError(vectors.shape[0], self.config.epsilon, self.config.min_points)

        return TrainResult(centroids=centroids, n_vectors=vectors.shape[0], n_noise=n_noise, tags=tags)

    def train(self) -> TrainResult | None:
        """Run training and persist the centroids

        Returns:
            TrainResult, or None if the input file held no lines (nothing is written)
        """
        start_time = time.time()
        logger.info("Reading log file in batches", path=self.config.input_file)

        vectors = embed_in_batches(
            self.embedder,
            iter_lines(self.config.input_file),
            self.config.batch_size,
            self.preprocessor,
        )
        if vectors is None:
            logger.warning("No log messages found in input file", path=self.config.input_file)
            return None

        result = self.cluster(vectors)
        self._log_assignments(result.tags)

        self.store.save(result.centroids)

        logger.info(
            "Training completed",
            clusters=result.n_clusters,
            noise=result.n_noise,
            vectors=result.n_vectors,
            output=self.config.output_file,
            elapsed_sec=round(time.time() - start_time, 1),
        )
        return result

    def _log_assignments(self, tags: list[ClassificationTag]) -> None:
        """Log every input line with its cluster when DEBUG is enabled"""
        if not logging.getLogger(__name__).isEnabledFor(logging.DEBUG):
            return
        for line, tag in zip(iter_lines(self.config.input_file), tags):
            logger.debug("Cluster assignment", line=line, assignment=tag.describe())
