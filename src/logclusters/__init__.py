"""
Log Clustering and Anomaly Triage

Semi-supervised detection of unknown log messages.

Architecture:
- Training: Embeds a log corpus, clusters it with DBSCAN and keeps one mean centroid per cluster
- Ingestion: Matches new lines to the nearest centroid, nudges matched centroids toward them
  and writes everything else to an unmatched log
- Retraining: Turns reviewed unmatched lines into new centroids

Usage:
    # Train centroids on a corpus
    python -m src.logclusters train -i example.txt

    # Classify new logs
    python -m src.logclusters ingest -i new_logs.txt
"""

from .embedding import Embedder, SentenceTransformerEmbedder
from .ingestor import LogIngestor
from .models import IngestConfig, IngestStats, RetrainConfig, RetrainResult, TrainConfig, TrainResult
from .preprocessing import LogPreprocessor
from .retrainer import CentroidRetrainer
from .store import CentroidStore
from .trainer import CentroidTrainer

__all__ = [
    "CentroidRetrainer",
    "CentroidStore",
    "CentroidTrainer",
    "Embedder",
    "IngestConfig",
    "IngestStats",
    "LogIngestor",
    "LogPreprocessor",
    "RetrainConfig",
    "RetrainResult",
    "SentenceTransformerEmbedder",
    "TrainConfig",
    "TrainResult",
]

__version__ = "1.0.0"
