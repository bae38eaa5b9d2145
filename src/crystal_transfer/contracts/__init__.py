"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes are NOT re-exported here - import them from
crystal_transfer.core.config.

Import patterns:
    from crystal_transfer.contracts import BlockTraces, StorageMethod
    from crystal_transfer.core.config import TransferSettings
"""

from crystal_transfer.contracts.enums import (
    StorageMethod,
    format_storage_method,
    parse_storage_method,
)
from crystal_transfer.contracts.errors import (
    DecodeError,
    EmptyStoreError,
    QueryError,
    StoreConnectionError,
    TransferError,
    UnknownStorageMethod,
)
from crystal_transfer.contracts.sink import ReplicationSink, WriteResult
from crystal_transfer.contracts.traces import BlockTrace, BlockTraces, TraceRow

__all__ = [
    "BlockTrace",
    "BlockTraces",
    "DecodeError",
    "EmptyStoreError",
    "QueryError",
    "ReplicationSink",
    "StorageMethod",
    "StoreConnectionError",
    "TraceRow",
    "TransferError",
    "UnknownStorageMethod",
    "WriteResult",
    "format_storage_method",
    "parse_storage_method",
]
