"""
Exception hierarchy for the log clustering engine.

Every fatal condition raised by this package derives from LogClustersError so
the CLI can report it uniformly. Missing or unreadable files are left to the
builtin OSError family.
"""


class LogClustersError(Exception):
    """Base class for all log-clusters errors"""


class CentroidFormatError(LogClustersError, ValueError):
    """The persisted centroids file is unreadable or has an inconsistent shape"""


class ShapeError(LogClustersError, ValueError):
    """Vector dimensions do not line up"""

    def __init__(self, expected: int, actual: int, context: str = ""):
        self.expected = expected
        self.actual = actual
        where = f" ({context})" if context else ""
        super().__init__(f"Dimension mismatch{where}: expected {expected}, got {actual}")


class NoClustersFoundError(LogClustersError, RuntimeError):
    """Clustering a non-empty corpus produced only noise"""

    def __init__(self, n_vectors: int, epsilon: float, min_points: int):
        self.n_vectors = n_vectors
        self.epsilon = epsilon
        self.min_points = min_points
        super().__init__(
            f"DBSCAN did not find any clusters in {n_vectors} vectors "
            f"(epsilon={epsilon}, min_points={min_points}). "
            "Try adjusting epsilon or min_points."
        )


class EmbedderError(LogClustersError, RuntimeError):
    """The embedding model failed to load or to encode a batch"""


class PatternError(LogClustersError, ValueError):
    """A preprocessing rule contains an invalid regular expression"""
