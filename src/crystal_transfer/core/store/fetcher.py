# src/crystal_transfer/core/store/fetcher.py
"""Fetch block traces from a trace store.

Retrieval runs in two steps: first the distinct block hashes for a
block-number range, then each hash's rows in trace_index order, assembled
independently. A single block number can map to several hashes
(competing forks not yet finalized), so every entry point returns a list.

A batch is all-or-nothing: if any row in it fails to parse, the whole
call raises and no partial list is returned.
"""

from typing import Any

from sqlalchemy import Connection, ColumnElement, select
from sqlalchemy.engine import Row

from crystal_transfer.contracts.traces import BlockTraces, TraceRow
from crystal_transfer.core.logging import get_logger
from crystal_transfer.core.store.assembler import assemble_block_traces
from crystal_transfer.core.store.database import TraceStoreDB
from crystal_transfer.core.store.schema import trace_table

logger = get_logger(__name__)


def _to_trace_row(row: Row[Any]) -> TraceRow:
    """Convert a result row to TraceRow.

    Drivers hand back bytea as bytes or memoryview; normalize to bytes.
    """
    values = row._mapping
    return TraceRow(
        block_hash=bytes(values["block_hash"]),
        block_parent_hash=bytes(values["block_parent_hash"]),
        block_number=int(values["block_number"]),
        runtime_version=int(values["runtime_version"]),
        is_finalized=bool(values["is_finalized"]),
        trace_index=int(values["trace_index"]),
        key=values["key"],
        value=values["value"],
        ext_id=values["ext_id"],
        method=values["method"],
        parent_id=values["parent_id"],
    )


class TraceFetcher:
    """Reads BlockTraces aggregates from a trace store."""

    def __init__(self, db: TraceStoreDB) -> None:
        self._db = db

    def fetch_range(self, start_block: int, end_block: int) -> list[BlockTraces]:
        """Aggregates for every block hash with block_number in [start_block, end_block].

        end_block may lie past the highest stored block; only rows that
        exist are returned. Aggregates come back ordered by block number.

        Raises:
            UnknownStorageMethod: If any row's method is unrecognized
            QueryError: If a store query fails
        """
        if end_block < start_block:
            raise ValueError(f"Invalid block range [{start_block}, {end_block}]")
        condition = trace_table.c.block_number.between(start_block, end_block)
        with self._db.connection("fetch_range") as conn:
            return self._fetch_where(conn, condition)

    def fetch_one(self, block_number: int) -> list[BlockTraces]:
        """Aggregates for every block hash at exactly block_number (zero or more)."""
        condition = trace_table.c.block_number == block_number
        with self._db.connection("fetch_one") as conn:
            return self._fetch_where(conn, condition)

    def fetch_by_hash(self, block_hash: bytes) -> BlockTraces | None:
        """Aggregate for one block hash, or None if the hash has no rows."""
        with self._db.connection("fetch_by_hash") as conn:
            return self._fetch_hash(conn, block_hash)

    def _fetch_where(self, conn: Connection, condition: ColumnElement[bool]) -> list[BlockTraces]:
        hash_query = (
            select(trace_table.c.block_hash, trace_table.c.block_number)
            .where(condition)
            .distinct()
            .order_by(trace_table.c.block_number, trace_table.c.block_hash)
        )
        # dict keeps first-seen order while dropping duplicate hashes
        block_hashes = list(dict.fromkeys(bytes(row.block_hash) for row in conn.execute(hash_query)))

        result: list[BlockTraces] = []
        for block_hash in block_hashes:
            aggregate = self._fetch_hash(conn, block_hash)
            if aggregate is not None:
                result.append(aggregate)

        logger.debug("Fetched block traces", hashes=len(block_hashes), aggregates=len(result))
        return result

    @staticmethod
    def _fetch_hash(conn: Connection, block_hash: bytes) -> BlockTraces | None:
        rows_query = (
            select(
                trace_table.c.block_hash,
                trace_table.c.block_parent_hash,
                trace_table.c.block_number,
                trace_table.c.runtime_version,
                trace_table.c.is_finalized,
                trace_table.c.trace_index,
                trace_table.c.key,
                trace_table.c.value,
                trace_table.c.ext_id,
                trace_table.c.method,
                trace_table.c.parent_id,
            )
            .where(trace_table.c.block_hash == block_hash)
            .order_by(trace_table.c.trace_index.asc())
        )
        rows = [_to_trace_row(row) for row in conn.execute(rows_query)]
        return assemble_block_traces(rows)
