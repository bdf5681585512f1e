"""
Command-line interface for log clustering.

Usage:
    python -m src.logclusters <command> [options]
"""

import argparse
import logging
import os
import sys

import structlog

from src.core.logger import resolve_level, setup_logging

from .batching import iter_lines
from .embedding import Embedder, SentenceTransformerEmbedder
from .ingestor import LogIngestor
from .methods import list_methods
from .models import DEFAULT_BATCH_SIZE, DEFAULT_MODEL_NAME, IngestConfig, RetrainConfig, TrainConfig
from .preprocessing import LogPreprocessor
from .retrainer import CentroidRetrainer
from .trainer import CentroidTrainer

logger = structlog.get_logger(__name__)


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-p",
        "--patterns-file",
        default=os.getenv("PATTERNS_FILE", "patterns.txt"),
        help="Path to the regex patterns file (default: patterns.txt or PATTERNS_FILE env var)",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (per-message decisions, cluster assignments)",
    )
    common.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )
    common.add_argument(
        "--model",
        default=os.getenv("EMBEDDING_MODEL", DEFAULT_MODEL_NAME),
        help=f"Sentence embedding model (default: {DEFAULT_MODEL_NAME})",
    )
    return common


def parse_arguments(argv=None):
    """Parse command-line arguments"""
    common = _common_options()
    parser = argparse.ArgumentParser(
        description="Cluster log messages and flag the ones that match no known pattern",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        # Build centroids from a corpus
        python -m src.logclusters train -i syslog.txt -o centroids.json -e 0.5 -m 3

        # Match new logs, write unknown messages to unmatched.log
        python -m src.logclusters ingest -i new_logs.txt -c centroids.json

        # Absorb reviewed unmatched messages as new centroids
        python -m src.logclusters retrain -i unmatched.log -c centroids.json

        # Check what the patterns do to a file
        python -m src.logclusters test-patterns -i new_logs.txt
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    train = subparsers.add_parser(
        "train", parents=[common], help="Train the model on a log file to create initial centroids"
    )
    train.add_argument("-i", "--input-file", default="example.txt", help="Log file to train on")
    train.add_argument("-o", "--output-file", default="centroids.json", help="Where to save the centroids")
    train.add_argument(
        "-e",
        "--epsilon",
        type=float,
        default=0.5,
        help="Maximum distance between two points for one to be in the other's neighbourhood (default: 0.5)",
    )
    train.add_argument(
        "-m",
        "--min-points",
        type=int,
        default=3,
        help="Minimum number of points required to form a dense region (default: 3)",
    )
    train.add_argument(
        "--method",
        default="dbscan",
        choices=list_methods(),
        help="Clustering method (default: dbscan)",
    )
    train.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Lines embedded per batch (default: {DEFAULT_BATCH_SIZE})",
    )

    ingest = subparsers.add_parser(
        "ingest",
        parents=[common],
        help="Ingest new logs, updating centroids for matches and logging non-matches",
    )
    ingest.add_argument("-i", "--input-file", default="new_logs.txt", help="File with new log messages")
    ingest.add_argument("-c", "--centroids-file", default="centroids.json", help="Centroids file")
    ingest.add_argument("-u", "--unmatched-file", default="unmatched.log", help="File for unmatched logs")
    ingest.add_argument(
        "-t",
        "--threshold",
        type=float,
        default=0.5,
        help="Distance threshold for matching a cluster (default: 0.5)",
    )
    ingest.add_argument(
        "-l",
        "--learning-rate",
        type=float,
        default=0.1,
        help="Learning rate for updating centroids on a match (default: 0.1)",
    )

    retrain = subparsers.add_parser(
        "retrain", parents=[common], help="Add every line of a log file as a new centroid"
    )
    retrain.add_argument("-i", "--input-file", default="unmatched.log", help="Log file with new patterns")
    retrain.add_argument("-c", "--centroids-file", default="centroids.json", help="Centroids file to update")
    retrain.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Lines embedded per batch (default: {DEFAULT_BATCH_SIZE})",
    )

    test_patterns = subparsers.add_parser(
        "test-patterns", parents=[common], help="Show what the regex patterns do to a log file"
    )
    test_patterns.add_argument("-i", "--input-file", default="new_logs.txt", help="Log file to test on")

    return parser.parse_args(argv)


def build_config(args) -> TrainConfig | IngestConfig | RetrainConfig | None:
    """Build the configuration for the selected command"""
    if args.command == "train":
        return TrainConfig(
            input_file=args.input_file,
            output_file=args.output_file,
            method_name=args.method,
            epsilon=args.epsilon,
            min_points=args.min_points,
            batch_size=args.batch_size,
        )
    if args.command == "ingest":
        return IngestConfig(
            input_file=args.input_file,
            centroids_file=args.centroids_file,
            unmatched_file=args.unmatched_file,
            threshold=args.threshold,
            learning_rate=args.learning_rate,
        )
    if args.command == "retrain":
        return RetrainConfig(
            input_file=args.input_file,
            centroids_file=args.centroids_file,
            batch_size=args.batch_size,
        )
    return None


def build_embedder(args) -> Embedder:
    return SentenceTransformerEmbedder(model_name=args.model)


def run_train(config: TrainConfig, embedder: Embedder, preprocessor: LogPreprocessor) -> None:
    result = CentroidTrainer(config, embedder, preprocessor).train()
    if result is None:
        print("No log messages found in input file.")
        return
    print(f"DBSCAN found {result.n_clusters} clusters and {result.n_noise} noise points.")
    print(f"Successfully saved {result.n_clusters} centroids to {config.output_file}")


def run_ingest(config: IngestConfig, embedder: Embedder, preprocessor: LogPreprocessor) -> None:
    stats = LogIngestor(config, embedder, preprocessor).run()
    print("Ingestion complete.")
    print(f"{stats.matched} messages matched and updated centroids.")
    print(f"{stats.unmatched} messages did not match and were written to {config.unmatched_file}.")
    print("Centroids file updated.")


def run_retrain(config: RetrainConfig, embedder: Embedder, preprocessor: LogPreprocessor) -> None:
    result = CentroidRetrainer(config, embedder, preprocessor).run()
    if result.added == 0:
        print("Input file is empty. No new centroids to add.")
        return
    print(
        f"Successfully added {result.added} new centroids to {config.centroids_file}. "
        f"Total centroids: {result.total}"
    )


def run_test_patterns(input_file: str, preprocessor: LogPreprocessor) -> None:
    print(f"Testing patterns on log file: {input_file}")
    for line in iter_lines(input_file):
        print(f"Original:  '{line}'")
        print(f"Processed: '{preprocessor.preprocess(line)}'\n")


def main(argv=None):
    """Main entry point"""
    args = parse_arguments(argv)

    log_level = logging.DEBUG if args.verbose else resolve_level(args.log_level)
    setup_logging(level=log_level)

    try:
        preprocessor = LogPreprocessor.from_file(args.patterns_file)

        if args.command == "test-patterns":
            run_test_patterns(args.input_file, preprocessor)
            return 0

        config = build_config(args)
        embedder = build_embedder(args)

        if args.command == "train":
            run_train(config, embedder, preprocessor)
        elif args.command == "ingest":
            run_ingest(config, embedder, preprocessor)
        elif args.command == "retrain":
            run_retrain(config, embedder, preprocessor)

        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    except Exception as e:
        logger.error("Command failed", command=args.command, error=str(e), exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
