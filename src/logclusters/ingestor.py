"""
Streaming classification of new log lines against existing centroids.

Each line that postdates the centroids file and has not been seen earlier in
the run is embedded and compared with every centroid. A match pulls the
closest centroid toward the message; anything else is appended to the
unmatched file for review. The centroid file is written once, after the whole
input has been processed.
"""

import time
from collections.abc import Iterator
from datetime import datetime

import numpy as np
import structlog

from .batching import iter_lines
from .embedding import Embedder
from .matcher import check_dimension, match, update_centroid
from .models import IngestConfig, IngestStats, LogRecord, Matched
from .preprocessing import LogPreprocessor
from .store import CentroidStore
from .timestamps import parse_log_timestamp

logger = structlog.get_logger(__name__)


class LogIngestor:
    """Matches new logs to centroids and updates them online"""

    def __init__(self, config: IngestConfig, embedder: Embedder, preprocessor: LogPreprocessor):
        self.config = config
        self.embedder = embedder
        self.preprocessor = preprocessor
        self.store = CentroidStore(config.centroids_file)

        self.centroids: np.ndarray | None = None
        self.cutoff: datetime | None = None
        self.seen_messages: set[str] = set()
        self.stats = IngestStats()

        logger.info(
            "Ingestor initialized",
            centroids_file=config.centroids_file,
            threshold=config.threshold,
            learning_rate=config.learning_rate,
        )

    def read_records(self) -> Iterator[LogRecord]:
        for line in iter_lines(self.config.input_file):
            yield LogRecord(
                raw=line,
                canonical=self.preprocessor.preprocess(line),
                timestamp=parse_log_timestamp(line),
            )

    def run(self) -> IngestStats:
        """Process the whole input file, then persist the centroids

        Raises:
            OSError: If the centroids or input file cannot be read
            CentroidFormatError: If the centroids file is malformed
            ShapeError: If the embedder dimension differs from the centroids
            EmbedderError: If embedding fails; nothing is persisted in that case
        """
        start_time = time.time()

        self.cutoff = self.store.last_modified()
        self.centroids = self.store.load()
        check_dimension(self.centroids, self.embedder.dimension, "embedder vs centroids file")
        self.seen_messages = set()
        self.stats = IngestStats()

        logger.info("Reading new log file", path=self.config.input_file, cutoff=self.cutoff.isoformat())

        with open(self.config.unmatched_file, "a", encoding="utf-8") as unmatched:
            for record in self.read_records():
                self.process_record(record, unmatched)

        self.store.save(self.centroids)

        logger.info(
            "Ingestion completed",
            **self.stats.to_dict(),
            elapsed_sec=round(time.time() - start_time, 1),
        )
        return self.stats

    def process_record(self, record: LogRecord, unmatched) -> None:
        if record.timestamp < self.cutoff:
            self.stats.skipped_stale += 1
            return

        if record.canonical in self.seen_messages:
            self.stats.skipped_duplicate += 1
            return
        self.seen_messages.add(record.canonical)

        vector = self.embedder.embed([record.canonical])[0]
        decision = match(self.centroids, vector, self.config.threshold)

        if isinstance(decision, Matched):
            self.stats.matched += 1
            update_centroid(self.centroids, decision.index, vector, self.config.learning_rate)
            logger.debug(
                "Matched cluster",
                message=record.canonical,
                cluster=decision.index,
                distance=round(decision.distance, 4),
            )
        else:
            unmatched.write(record.canonical + "\n")
            logger.debug("No match", message=record.canonical, distance=round(decision.distance, 4))

        self.stats.total += 1
