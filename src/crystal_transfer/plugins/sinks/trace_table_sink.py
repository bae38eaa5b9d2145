# src/crystal_transfer/plugins/sinks/trace_table_sink.py
"""Replication sink writing into a destination trace table.

The destination has the same `trace` table layout as the source. Each
aggregate is written in its own transaction, in the order received, after
checking that its block hash is not already there. A run interrupted
mid-batch therefore leaves whole blocks behind, never partial ones, and
re-running the batch skips what was already copied.
"""

import time
from collections.abc import Sequence
from typing import Any

from sqlalchemy import insert

from crystal_transfer.contracts.sink import WriteResult
from crystal_transfer.contracts.traces import BlockTraces
from crystal_transfer.core.hashes import decode_encoded_hash
from crystal_transfer.core.logging import get_logger
from crystal_transfer.core.store.cursor import CursorResolver
from crystal_transfer.core.store.database import TraceStoreDB
from crystal_transfer.core.store.idempotency import IdempotencyCheck
from crystal_transfer.core.store.schema import trace_table

logger = get_logger(__name__)


def _to_rows(aggregate: BlockTraces) -> list[dict[str, Any]]:
    """Flatten an aggregate back into trace table rows, in trace order."""
    block_hash = decode_encoded_hash(aggregate.block_hash)
    block_parent_hash = decode_encoded_hash(aggregate.block_parent_hash)
    return [
        {
            "block_hash": block_hash,
            "block_parent_hash": block_parent_hash,
            "block_number": aggregate.block_number,
            "runtime_version": aggregate.runtime_version,
            "is_finalized": aggregate.is_finalized,
            "trace_index": trace.index,
            "key": trace.key,
            "value": trace.value,
            "ext_id": trace.ext_id,
            "method": trace.method.value,
            "parent_id": trace.parent_id,
        }
        for trace in aggregate.traces
    ]


class TraceTableSink:
    """Write BlockTraces into a destination trace table.

    Idempotent per block hash: an aggregate whose hash already has rows at
    the destination is skipped.
    """

    name = "trace_table"

    def __init__(self, db: TraceStoreDB) -> None:
        self._db: TraceStoreDB | None = db
        self._cursor = CursorResolver(db)
        self._existence = IdempotencyCheck(db)

    def next_block_number(self, min_block: int, max_block: int) -> int:
        """Destination resumption cursor."""
        return self._cursor.next_block_number(min_block, max_block)

    def write_batch(self, aggregates: Sequence[BlockTraces]) -> WriteResult:
        """Persist aggregates in order, skipping hashes already present.

        Raises:
            QueryError: If a store round-trip fails. Aggregates written
                before the failure stay committed.
            RuntimeError: If called after close()
        """
        if self._db is None:
            raise RuntimeError("TraceTableSink.write_batch() called after close()")

        written = 0
        skipped = 0
        start_time = time.perf_counter()
        for aggregate in aggregates:
            if self._existence.exists_raw(decode_encoded_hash(aggregate.block_hash)):
                logger.debug(
                    "Block already replicated, skipping",
                    block_hash=aggregate.block_hash,
                    block_number=aggregate.block_number,
                )
                skipped += 1
                continue

            rows = _to_rows(aggregate)
            if rows:
                with self._db.connection("write_block_traces") as conn:
                    conn.execute(insert(trace_table), rows)
                written += 1
            else:
                # Nothing to store, and nothing that exists() could find later
                skipped += 1

        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.info("Wrote batch", written=written, skipped=skipped, latency_ms=round(latency_ms, 1))
        return WriteResult(written=written, skipped=skipped)

    def close(self) -> None:
        """Release the destination handle. Idempotent."""
        if self._db is not None:
            self._db.close()
            self._db = None
