"""
Sentence embedders.

The engine only depends on the abstract Embedder contract: a batch of strings
in, a float32 matrix of unit-length rows out, with the same dimension for every
call against one loaded instance.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np
import structlog
from sentence_transformers import SentenceTransformer

from .exceptions import EmbedderError
from .models import DEFAULT_MODEL_NAME

logger = structlog.get_logger(__name__)


class Embedder(ABC):
    """Abstract base class for text embedders"""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Length of every produced vector"""
        pass

    @abstractmethod
    def _encode(self, batch: list[str]) -> np.ndarray:
        """Encode a non-empty batch; rows must be L2-normalised"""
        pass

    def embed(self, batch: Sequence[str]) -> np.ndarray:
        """Embed a batch of canonical strings

        Returns:
            float32 array of shape (len(batch), dimension)

        Raises:
            EmbedderError: If the underlying model fails
        """
        batch = list(batch)
        if not batch:
            return np.zeros((0, self.dimension), dtype=np.float32)

        try:
            vectors = self._encode(batch)
        except EmbedderError:
            raise
        except Exception as e:
            raise EmbedderError(f"Embedding failed for batch of {len(batch)}: {e}") from e

        vectors = np.asarray(vectors, dtype=np.float32)
        if vectors.ndim == 1:
            vectors = vectors.reshape(1, -1)
        if vectors.shape[0] != len(batch):
            raise EmbedderError(
                f"Embedder returned {vectors.shape[0]} vectors for {len(batch)} inputs"
            )
        return vectors

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(dimension={self.dimension})"


class SentenceTransformerEmbedder(Embedder):
    """Embedder backed by a sentence-transformers model, loaded once"""

    def __init__(self, model_name: str = DEFAULT_MODEL_NAME, device: str | None = "cpu"):
        try:
            self.model = SentenceTransformer(model_name, device=device)
        except Exception as e:
            raise EmbedderError(f"Failed to load embedding model {model_name}: {e}") from e

        self.model_name = model_name
        self._dimension = int(self.model.get_sentence_embedding_dimension())

        logger.info("Embedding model loaded", model=model_name, dimension=self._dimension)

    @property
    def dimension(self) -> int:
        return self._dimension

    def _encode(self, batch: list[str]) -> np.ndarray:
        return self.model.encode(
            batch,
            batch_size=len(batch),
            show_progress_bar=False,
            convert_to_numpy=True,
            normalize_embeddings=True,
        )
