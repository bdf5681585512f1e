"""
Pytest configuration and shared fixtures.
"""

import hashlib

import numpy as np
import pytest

from src.logclusters.embedding import Embedder
from src.logclusters.exceptions import EmbedderError
from src.logclusters.preprocessing import LogPreprocessor
from src.logclusters.store import CentroidStore


class StubEmbedder(Embedder):
    """Deterministic embedder for tests.

    Strings listed in `vectors` map to the given vector; any other string maps
    to a pseudo-random unit vector seeded by its hash.
    """

    def __init__(self, vectors=None, dimension=3, fail_on_call=None):
        self._dimension = dimension
        self.vectors = {k: np.asarray(v, dtype=np.float32) for k, v in (vectors or {}).items()}
        self.fail_on_call = fail_on_call
        self.calls: list[list[str]] = []

    @property
    def dimension(self) -> int:
        return self._dimension

    def _encode(self, batch):
        self.calls.append(list(batch))
        if self.fail_on_call is not None and len(self.calls) >= self.fail_on_call:
            raise EmbedderError("model unavailable")
        return np.stack([self._vector(text) for text in batch])

    def _vector(self, text):
        if text in self.vectors:
            return self.vectors[text]
        seed = int(hashlib.md5(text.encode()).hexdigest()[:8], 16)
        v = np.random.default_rng(seed).normal(size=self._dimension)
        return (v / np.linalg.norm(v)).astype(np.float32)

    @property
    def embedded(self) -> list[str]:
        return [text for batch in self.calls for text in batch]


@pytest.fixture
def stub_embedder_factory():
    """Build a StubEmbedder with the given vector table."""
    return StubEmbedder


@pytest.fixture
def write_lines(tmp_path):
    """Write lines to a file under tmp_path and return its path as a string."""

    def _write(name, lines):
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def patterns_file(write_lines):
    """Patterns file with a PID and an IP rule."""
    return write_lines(
        "patterns.txt",
        [
            "# normalise process ids and addresses",
            r"\[\d+\]: :: [<PID>]:",
            r"\b(?:\d{1,3}\.){3}\d{1,3}\b :: <IP>",
        ],
    )


@pytest.fixture
def preprocessor(patterns_file):
    return LogPreprocessor.from_file(patterns_file)


@pytest.fixture
def identity_preprocessor():
    return LogPreprocessor([])


@pytest.fixture
def centroids_path(tmp_path):
    """Centroids file holding the three unit axes of R^3."""
    path = tmp_path / "centroids.json"
    CentroidStore(path).save(np.eye(3, dtype=np.float32))
    return str(path)
