"""
Tests for centroid persistence.
"""

import json

import numpy as np
import pytest

from src.logclusters.exceptions import CentroidFormatError
from src.logclusters.store import CentroidStore, decode_centroids, encode_centroids


class TestEncoding:
    """Tests for the on-disk document layout."""

    def test_encode_layout(self):
        """Test that centroids are written as version, shape and flat data."""
        doc = encode_centroids(np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]], dtype=np.float32))

        assert doc == {"v": 1, "dim": [3, 2], "data": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]}

    def test_decode_envelope(self):
        """Test that the data is reshaped row-major."""
        centroids = decode_centroids({"v": 1, "dim": [2, 3], "data": [1, 2, 3, 4, 5, 6]})

        assert centroids.shape == (2, 3)
        assert centroids.dtype == np.float32
        np.testing.assert_array_equal(centroids[1], [4, 5, 6])

    def test_decode_row_list(self):
        """Test that a plain list of rows is accepted."""
        centroids = decode_centroids([[0.5, 0.5], [1.0, 0.0]])

        assert centroids.shape == (2, 2)

    @pytest.mark.parametrize(
        "payload,message",
        [
            ({"v": 2, "dim": [1, 1], "data": [0.0]}, "version"),
            ({"v": 1, "dim": [2], "data": [0.0, 1.0]}, "dim"),
            ({"v": 1, "dim": [-1, 2], "data": []}, "dim"),
            ({"v": 1, "dim": [2, 2], "data": [0.0, 1.0, 2.0]}, "needs 4 values"),
            ({"v": 1, "dim": [1, 2], "data": "0 1"}, "data"),
            ({"v": 1, "dim": [1, 2], "data": [0.0, "x"]}, "numbers"),
            ([[1.0, 2.0], [3.0]], "Ragged"),
            ([], "at least one row"),
            ([1.0, 2.0], "Every row"),
            ("centroids", "Expected an object"),
        ],
    )
    def test_decode_malformed(self, payload, message):
        """Test that inconsistent documents are rejected."""
        with pytest.raises(CentroidFormatError, match=message):
            decode_centroids(payload)


class TestCentroidStore:
    """Tests for CentroidStore."""

    def test_save_and_load(self, tmp_path):
        """Test that saved centroids load back with the same values."""
        store = CentroidStore(tmp_path / "centroids.json")
        centroids = np.array([[0.6, 0.8, 0.0], [0.0, 0.0, 1.0]], dtype=np.float32)

        store.save(centroids)

        np.testing.assert_array_equal(store.load(), centroids)

    def test_save_leaves_no_temp_files(self, tmp_path):
        """Test that the atomic write cleans up after itself."""
        store = CentroidStore(tmp_path / "centroids.json")
        store.save(np.eye(2, dtype=np.float32))
        store.save(np.eye(2, dtype=np.float32) * 0.5)

        assert [p.name for p in tmp_path.iterdir()] == ["centroids.json"]

    def test_save_creates_parent_directory(self, tmp_path):
        """Test that the target directory is created if needed."""
        store = CentroidStore(tmp_path / "models" / "centroids.json")
        store.save(np.eye(2, dtype=np.float32))

        assert store.exists()

    def test_load_missing_file(self, tmp_path):
        """Test that a missing file surfaces as an OSError."""
        with pytest.raises(FileNotFoundError):
            CentroidStore(tmp_path / "missing.json").load()

    def test_load_invalid_json(self, tmp_path):
        """Test that a file that is not JSON is a format error."""
        path = tmp_path / "centroids.json"
        path.write_text("{not json")

        with pytest.raises(CentroidFormatError, match="invalid JSON"):
            CentroidStore(path).load()

    def test_load_ragged_file(self, tmp_path):
        """Test that a ragged matrix on disk is a format error."""
        path = tmp_path / "centroids.json"
        path.write_text(json.dumps([[1.0, 0.0], [1.0]]))

        with pytest.raises(CentroidFormatError, match="Ragged"):
            CentroidStore(path).load()

    def test_save_rejects_non_matrix(self, tmp_path):
        """Test that only 2-D arrays can be saved."""
        with pytest.raises(CentroidFormatError):
            CentroidStore(tmp_path / "c.json").save(np.zeros(3, dtype=np.float32))

    def test_last_modified(self, centroids_path):
        """Test that the modification time is reported as a datetime."""
        store = CentroidStore(centroids_path)

        assert store.last_modified().timestamp() == pytest.approx(
            store.path.stat().st_mtime, abs=1e-3
        )
