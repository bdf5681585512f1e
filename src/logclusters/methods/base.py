"""
Base abstract interface for clustering methods.

All clustering methods must inherit from ClusteringMethod and implement:
- fit(): Assign a classification tag to every vector of a corpus
"""

from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from ..exceptions import ShapeError
from ..models import ClassificationTag


class ClusteringMethod(ABC):
    """Abstract base class for all clustering methods"""

    @abstractmethod
    def fit(self, vectors: np.ndarray) -> list[ClassificationTag]:
        """Cluster a corpus of vectors

        Args:
            vectors: Array of shape (n_vectors, dimension)

        Returns:
            One ClassificationTag per input row, in input order
        """
        pass

    @abstractmethod
    def get_config(self) -> dict[str, Any]:
        """Get the current configuration of this method"""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the clustering method"""
        pass

    def validate_vectors(self, vectors: np.ndarray) -> None:
        """Validate that the corpus is a non-empty 2-D matrix

        Raises:
            ValueError: If the corpus is empty
            ShapeError: If the corpus is not two-dimensional
        """
        if vectors.ndim != 2:
            raise ShapeError(2, vectors.ndim, "corpus must be a 2-D matrix")
        if vectors.shape[0] == 0:
            raise ValueError("Corpus is empty")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(config={self.get_config()})"
