"""
Line reading and batched embedding.

Large corpora are embedded in fixed-size groups so that only one batch of text
is held in memory at a time; the resulting vector blocks are concatenated once
at the end.
"""

from collections.abc import Iterable, Iterator
from itertools import islice
from pathlib import Path

import numpy as np
import structlog

from .embedding import Embedder
from .exceptions import ShapeError
from .models import DEFAULT_BATCH_SIZE
from .preprocessing import LogPreprocessor

logger = structlog.get_logger(__name__)


def iter_lines(path: str | Path) -> Iterator[str]:
    """Yield the lines of a text file without their line terminators"""
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            yield line.rstrip("\r\n")


def iter_batches(lines: Iterable[str], batch_size: int = DEFAULT_BATCH_SIZE) -> Iterator[list[str]]:
    """Group lines into lists of at most batch_size, preserving order"""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    iterator = iter(lines)
    while batch := list(islice(iterator, batch_size)):
        yield batch


def concatenate_blocks(blocks: list[np.ndarray]) -> np.ndarray:
    """Stack vector blocks row-wise, checking they share one dimension"""
    dim = blocks[0].shape[1]
    for block in blocks[1:]:
        if block.shape[1] != dim:
            raise ShapeError(dim, block.shape[1], "concatenating embedding batches")
    return np.concatenate(blocks, axis=0)


def embed_in_batches(
    embedder: Embedder,
    lines: Iterable[str],
    batch_size: int = DEFAULT_BATCH_SIZE,
    preprocessor: LogPreprocessor | None = None,
) -> np.ndarray | None:
    """Preprocess and embed lines batch by batch

    Returns:
        float32 array with one row per input line, or None if there were no lines
    """
    blocks = []
    for batch in iter_batches(lines, batch_size):
        if preprocessor is not None:
            batch = [preprocessor.preprocess(line) for line in batch]
        logger.info("Generating embeddings", batch=len(blocks) + 1, messages=len(batch))
        blocks.append(embedder.embed(batch))

    if not blocks:
        return None
    return concatenate_blocks(blocks)
