"""
Tests for growing the centroid set from a backlog.
"""

import numpy as np
import pytest

from src.logclusters.exceptions import ShapeError
from src.logclusters.models import RetrainConfig
from src.logclusters.retrainer import CentroidRetrainer
from src.logclusters.store import CentroidStore


@pytest.fixture
def make_retrainer(centroids_path, identity_preprocessor):
    def _make(input_file, embedder, **overrides):
        config = RetrainConfig(input_file=input_file, centroids_file=centroids_path, **overrides)
        return CentroidRetrainer(config, embedder, identity_preprocessor)

    return _make


class TestCentroidRetrainer:
    """Tests for CentroidRetrainer."""

    def test_appends_each_line(self, centroids_path, write_lines, stub_embedder_factory, make_retrainer):
        """Test that N centroids plus K backlog lines gives N + K rows."""
        backlog = {"a": [0.6, 0.8, 0.0], "b": [0.0, 0.6, 0.8]}
        input_file = write_lines("unmatched.log", list(backlog))

        result = make_retrainer(input_file, stub_embedder_factory(backlog)).run()

        saved = CentroidStore(centroids_path).load()
        assert result.added == 2
        assert result.total == 5
        assert saved.shape == (5, 3)
        np.testing.assert_array_equal(saved[:3], np.eye(3, dtype=np.float32))
        np.testing.assert_allclose(saved[3:], [backlog["a"], backlog["b"]], rtol=1e-6)

    def test_no_merging_or_dedup(self, centroids_path, write_lines, stub_embedder_factory, make_retrainer):
        """Test that identical backlog lines and existing centroids are appended verbatim."""
        input_file = write_lines("unmatched.log", ["x", "x", "axis"])
        embedder = stub_embedder_factory({"x": [0.0, 0.0, 1.0], "axis": [1.0, 0.0, 0.0]})

        make_retrainer(input_file, embedder, batch_size=2).run()

        saved = CentroidStore(centroids_path).load()
        assert saved.shape == (6, 3)
        assert [len(batch) for batch in embedder.calls] == [2, 1]

    def test_empty_backlog_leaves_file_unchanged(
        self, centroids_path, write_lines, stub_embedder_factory, make_retrainer
    ):
        """Test that an empty backlog does not rewrite the centroid file."""
        before = open(centroids_path, "rb").read()
        input_file = write_lines("unmatched.log", [])

        result = make_retrainer(input_file, stub_embedder_factory()).run()

        assert result.added == 0
        assert result.total == 3
        assert open(centroids_path, "rb").read() == before

    def test_dimension_mismatch(self, centroids_path, write_lines, stub_embedder_factory, make_retrainer):
        """Test that backlog vectors must match the existing dimension."""
        before = open(centroids_path, "rb").read()
        input_file = write_lines("unmatched.log", ["a"])

        with pytest.raises(ShapeError):
            make_retrainer(input_file, stub_embedder_factory(dimension=5)).run()

        assert open(centroids_path, "rb").read() == before

    def test_missing_centroids(self, tmp_path, write_lines, stub_embedder_factory, identity_preprocessor):
        """Test that retraining needs an existing centroid file."""
        config = RetrainConfig(
            input_file=write_lines("unmatched.log", ["a"]),
            centroids_file=str(tmp_path / "missing.json"),
        )

        with pytest.raises(FileNotFoundError):
            CentroidRetrainer(config, stub_embedder_factory(), identity_preprocessor).run()
