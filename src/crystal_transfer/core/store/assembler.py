"""Rebuild BlockTraces aggregates from flat trace rows.

Block metadata (parent hash, number, runtime version, finality) is taken
from the first row; the remaining rows are assumed to agree and are not
cross-checked. Traces are sorted by index here, explicitly, whatever
order the rows arrived in.
"""

from __future__ import annotations

from collections.abc import Sequence

from crystal_transfer.contracts.enums import StorageMethod
from crystal_transfer.contracts.traces import BlockTrace, BlockTraces, TraceRow
from crystal_transfer.core.hashes import encode_hash


def assemble_block_traces(rows: Sequence[TraceRow]) -> BlockTraces | None:
    """Assemble the rows of ONE block hash into an aggregate.

    Args:
        rows: Rows sharing a single block_hash, in any order

    Returns:
        The aggregate, or None when rows is empty (no empty aggregates)

    Raises:
        UnknownStorageMethod: If any row's method is not a canonical name.
            No partial aggregate is returned.
        ValueError: If rows carry more than one block_hash
    """
    if not rows:
        return None

    first = rows[0]
    traces: list[BlockTrace] = []
    for row in sorted(rows, key=lambda r: r.trace_index):
        if row.block_hash != first.block_hash:
            raise ValueError(f"assemble_block_traces got rows for {encode_hash(first.block_hash)} and {encode_hash(row.block_hash)}")
        traces.append(
            BlockTrace(
                index=row.trace_index,
                key=row.key,
                value=row.value,
                ext_id=row.ext_id,
                method=StorageMethod.parse(row.method),
                parent_id=row.parent_id,
            )
        )

    return BlockTraces(
        block_hash=encode_hash(first.block_hash),
        block_parent_hash=encode_hash(first.block_parent_hash),
        block_number=first.block_number,
        runtime_version=first.runtime_version,
        is_finalized=first.is_finalized,
        traces=tuple(traces),
    )

