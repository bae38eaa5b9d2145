"""Trace data model.

TraceRow is the flat shape of one row in the `trace` table.
BlockTrace/BlockTraces are the hierarchical aggregate rebuilt from those
rows: one BlockTraces per block hash, holding its traces in index order.

Aggregates are built fresh per fetch and hold no reference to the store.
"""

from dataclasses import dataclass, field
from typing import Any

from crystal_transfer.contracts.enums import StorageMethod


@dataclass(frozen=True, slots=True)
class TraceRow:
    """One flat row of the trace table, exactly as stored.

    Hashes are raw bytes here. They are hex-encoded only when the
    aggregate is built.
    """

    block_hash: bytes
    block_parent_hash: bytes
    block_number: int
    runtime_version: int
    is_finalized: bool
    trace_index: int
    key: str
    value: str
    ext_id: str
    method: str
    parent_id: str | None = None


@dataclass(frozen=True, slots=True)
class BlockTrace:
    """One storage-mutation event inside a block.

    parent_id is opaque: it is carried through unchanged and never checked
    against other traces in the block.
    """

    index: int
    key: str
    value: str
    ext_id: str
    method: StorageMethod
    parent_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "key": self.key,
            "value": self.value,
            "ext_id": self.ext_id,
            "method": self.method.value,
            "parent_id": self.parent_id,
        }


@dataclass(frozen=True, slots=True)
class BlockTraces:
    """All traces recorded for one block hash, plus block metadata.

    block_hash and block_parent_hash are lowercase hex prefixed with "0x".
    traces is ordered ascending by BlockTrace.index.
    """

    block_hash: str
    block_parent_hash: str
    block_number: int
    runtime_version: int
    is_finalized: bool
    traces: tuple[BlockTrace, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.block_number < 0:
            raise ValueError(f"block_number must be >= 0, got {self.block_number}")
        if self.runtime_version < 0:
            raise ValueError(f"runtime_version must be >= 0, got {self.runtime_version}")

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation (methods as canonical strings)."""
        return {
            "block_hash": self.block_hash,
            "block_parent_hash": self.block_parent_hash,
            "block_number": self.block_number,
            "runtime_version": self.runtime_version,
            "is_finalized": self.is_finalized,
            "traces": [trace.to_dict() for trace in self.traces],
        }
