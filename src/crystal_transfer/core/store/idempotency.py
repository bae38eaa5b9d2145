"""Existence check keyed on block hash.

Sinks call this against the destination before writing an aggregate:
a hash that is already present is skipped, which makes re-running a
chunk safe.
"""

from sqlalchemy import select

from crystal_transfer.core.hashes import decode_hash
from crystal_transfer.core.store.database import TraceStoreDB
from crystal_transfer.core.store.schema import trace_table


class IdempotencyCheck:
    """Answers "is this block hash already stored?"."""

    def __init__(self, db: TraceStoreDB) -> None:
        self._db = db

    def exists(self, block_hash_hex: str) -> bool:
        """Whether any row carries the given block hash.

        The hex is decoded before any query runs, so malformed input never
        reaches the store.

        Raises:
            DecodeError: On odd-length or non-hex input (a "0x" prefix included)
            QueryError: If the store query fails
        """
        return self.exists_raw(decode_hash(block_hash_hex))

    def exists_raw(self, block_hash: bytes) -> bool:
        """Same as exists(), for an already-decoded hash."""
        query = select(trace_table.c.trace_index).where(trace_table.c.block_hash == block_hash).limit(1)
        with self._db.connection("block_trace_exists") as conn:
            return conn.execute(query).first() is not None
