"""
Grows the centroid set from a backlog of reviewed messages.

Every backlog line becomes a centroid of its own; nothing is merged or
deduplicated against the existing set.
"""

import numpy as np
import structlog

from .batching import embed_in_batches, iter_lines
from .embedding import Embedder
from .matcher import check_dimension
from .models import RetrainConfig, RetrainResult
from .preprocessing import LogPreprocessor
from .store import CentroidStore

logger = structlog.get_logger(__name__)


class CentroidRetrainer:
    """Appends embedded backlog lines as new centroids"""

    def __init__(self, config: RetrainConfig, embedder: Embedder, preprocessor: LogPreprocessor):
        self.config = config
        self.embedder = embedder
        self.preprocessor = preprocessor
        self.store = CentroidStore(config.centroids_file)

    def run(self) -> RetrainResult:
        """Append the backlog and persist

        Returns:
            Centroids added and the new total. With an empty backlog the file is not rewritten.
        """
        centroids = self.store.load()

        logger.info("Reading new training data", path=self.config.input_file)
        vectors = embed_in_batches(
            self.embedder,
            self._backlog(),
            self.config.batch_size,
            self.preprocessor,
        )
        if vectors is None:
            logger.info("Input file is empty, no new centroids to add", path=self.config.input_file)
            return RetrainResult(added=0, total=int(centroids.shape[0]))

        check_dimension(centroids, vectors.shape[1], "appending backlog vectors")
        updated = np.concatenate([centroids, vectors.astype(centroids.dtype)], axis=0)
        self.store.save(updated)

        logger.info("New centroids added", added=vectors.shape[0], total=updated.shape[0])
        return RetrainResult(added=int(vectors.shape[0]), total=int(updated.shape[0]))

    def _backlog(self):
        for line in iter_lines(self.config.input_file):
            logger.debug("Adding new centroid", message=line)
            yield line
