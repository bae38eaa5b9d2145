# src/crystal_transfer/plugins/sinks/null_sink.py
"""Dry-run sink: accepts aggregates and stores nothing.

Useful for measuring source fetch throughput and for checking that every
row in a range parses, without a destination database.
"""

from collections.abc import Sequence

from crystal_transfer.contracts.sink import WriteResult
from crystal_transfer.contracts.traces import BlockTraces


class NullSink:
    """Discards everything it receives.

    next_block_number() always answers min_block, so a dry run starts from
    the floor of the requested range. Every aggregate counts as skipped.
    """

    name = "null"

    def __init__(self) -> None:
        self.received = 0

    def next_block_number(self, min_block: int, max_block: int) -> int:
        return min_block

    def write_batch(self, aggregates: Sequence[BlockTraces]) -> WriteResult:
        self.received += len(aggregates)
        return WriteResult(written=0, skipped=len(aggregates))

    def close(self) -> None:
        pass
