"""Trace store access: schema, connection handle and query components.

Every component takes a TraceStoreDB in its constructor; none of them
owns or creates an engine.
"""

from crystal_transfer.core.store.assembler import assemble_block_traces
from crystal_transfer.core.store.cursor import MAX_BLOCK_NUMBER, CursorResolver
from crystal_transfer.core.store.database import TraceStoreDB
from crystal_transfer.core.store.fetcher import TraceFetcher
from crystal_transfer.core.store.idempotency import IdempotencyCheck
from crystal_transfer.core.store.schema import TRACE_TABLE_NAME, metadata, trace_table

__all__ = [
    "MAX_BLOCK_NUMBER",
    "TRACE_TABLE_NAME",
    "CursorResolver",
    "IdempotencyCheck",
    "TraceFetcher",
    "TraceStoreDB",
    "assemble_block_traces",
    "metadata",
    "trace_table",
]
