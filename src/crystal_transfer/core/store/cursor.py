"""Resumption cursor for a trace store.

Progress is never tracked separately: the next block to process is
recomputed from what the store already holds.
"""

from sqlalchemy import func, select

from crystal_transfer.contracts.errors import EmptyStoreError
from crystal_transfer.core.logging import get_logger
from crystal_transfer.core.store.database import TraceStoreDB
from crystal_transfer.core.store.schema import TRACE_TABLE_NAME, trace_table

logger = get_logger(__name__)

# Largest block number a signed BIGINT column can bind
MAX_BLOCK_NUMBER = 2**63 - 1


class CursorResolver:
    """Computes block-number bounds from a trace store.

    Store failures propagate as QueryError; nothing is retried here.
    """

    def __init__(self, db: TraceStoreDB) -> None:
        self._db = db

    def next_block_number(self, min_block: int, max_block: int) -> int:
        """Next unprocessed block number within [min_block, max_block].

        Returns:
            max(block_number in range) + 1 if any row is in range,
            otherwise min_block.

        Raises:
            ValueError: If the range is inverted or negative
            QueryError: If the store query fails
        """
        if min_block < 0 or max_block < min_block:
            raise ValueError(f"Invalid block range [{min_block}, {max_block}]")

        query = select(func.max(trace_table.c.block_number)).where(
            trace_table.c.block_number >= min_block,
            trace_table.c.block_number <= max_block,
        )
        with self._db.connection("next_block_number") as conn:
            highest = conn.execute(query).scalar_one()

        next_block = min_block if highest is None else int(highest) + 1
        logger.debug("Resolved next block number", min_block=min_block, max_block=max_block, next_block=next_block)
        return next_block

    def max_block_number(self) -> int:
        """Highest block number in the whole store.

        Raises:
            EmptyStoreError: If the store has no rows
            QueryError: If the store query fails
        """
        with self._db.connection("max_block_number") as conn:
            highest = conn.execute(select(func.max(trace_table.c.block_number))).scalar_one()

        if highest is None:
            raise EmptyStoreError(TRACE_TABLE_NAME)
        return int(highest)
