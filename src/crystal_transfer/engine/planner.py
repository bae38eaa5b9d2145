"""Chunk planning for a transfer run.

Chunks are contiguous, non-overlapping, inclusive block ranges of a fixed
size. The size does not shrink near the target: the last chunk may end
past it, which is harmless because fetches only return rows that exist.
"""

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BlockRange:
    """Inclusive block-number range [start, end]."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid block range [{self.start}, {self.end}]")

    def __len__(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"{self.start}..={self.end}"


def plan_chunks(start: int, target: int, chunk_size: int) -> Iterator[BlockRange]:
    """Yield chunks [start, start+c-1], [start+c, start+2c-1], ... while the cursor < target.

    Args:
        start: First block number to process
        target: Loop stops once the cursor reaches this block number
        chunk_size: Blocks per chunk, fixed for the whole run

    Raises:
        ValueError: If chunk_size < 1 (the cursor would never advance) or start < 0
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    if start < 0:
        raise ValueError(f"start must be >= 0, got {start}")

    return _iter_chunks(start, target, chunk_size)


def _iter_chunks(start: int, target: int, chunk_size: int) -> Iterator[BlockRange]:
    cursor = start
    while cursor < target:
        yield BlockRange(cursor, cursor + chunk_size - 1)
        cursor += chunk_size
