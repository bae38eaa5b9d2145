"""Replication sink contract.

The engine depends only on this protocol. Concrete sinks live in
crystal_transfer.plugins.sinks.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from crystal_transfer.contracts.traces import BlockTraces


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Outcome of one write_batch() call.

    written + skipped always equals the number of aggregates passed in.
    """

    written: int
    skipped: int

    @property
    def total(self) -> int:
        return self.written + self.skipped


@runtime_checkable
class ReplicationSink(Protocol):
    """Destination for assembled block traces.

    Contract:
    - next_block_number() follows the cursor contract: max block number in
      [min_block, max_block] plus one, or min_block when the range is empty.
      The orchestrator resumes from it.
    - write_batch() is idempotent per block hash: an aggregate whose hash
      already exists at the destination is skipped, not rewritten.
    - write_batch() preserves trace order inside each aggregate and
      processes aggregates in the order received, so an interrupted run
      leaves a monotonic prefix behind.
    """

    name: str

    def next_block_number(self, min_block: int, max_block: int) -> int:
        """Next unprocessed block number at the destination."""
        ...

    def write_batch(self, aggregates: Sequence[BlockTraces]) -> WriteResult:
        """Persist aggregates, skipping block hashes already present."""
        ...

    def close(self) -> None:
        """Release destination resources."""
        ...
