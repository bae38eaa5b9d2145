# tests/conftest.py
"""Shared test fixtures and helpers.

Stores are real SQLAlchemy engines over in-memory SQLite, built through
the same TraceStoreDB used in production, so queries, ordering and error
translation are exercised for real.

Helpers:
- make_row(): TraceRow factory with sensible defaults
- block_hash(n): deterministic 32-byte hash for block n
- insert_rows(db, rows): write raw rows into a store's trace table

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import dataclasses
import hashlib
import os
from collections.abc import Iterable, Iterator

import pytest
from hypothesis import Phase, Verbosity, settings
from sqlalchemy import insert

from crystal_transfer.contracts.traces import TraceRow
from crystal_transfer.core.store.database import TraceStoreDB
from crystal_transfer.core.store.schema import trace_table

# =============================================================================
# Row helpers
# =============================================================================


def block_hash(block_number: int, fork: int = 0) -> bytes:
    """Deterministic 32-byte hash for a block (fork distinguishes competing blocks)."""
    return hashlib.sha256(f"block-{block_number}-{fork}".encode()).digest()


def make_row(
    block_number: int = 1,
    trace_index: int = 0,
    *,
    fork: int = 0,
    method: str = "Put",
    **overrides: object,
) -> TraceRow:
    """Build a TraceRow for block_number with consistent block metadata."""
    row = TraceRow(
        block_hash=block_hash(block_number, fork),
        block_parent_hash=block_hash(block_number - 1) if block_number > 0 else bytes(32),
        block_number=block_number,
        runtime_version=9430,
        is_finalized=True,
        trace_index=trace_index,
        key=f"0x26aa394eea5630e07c48ae0c9558cef7{trace_index:04x}",
        value=f"0x{block_number:08x}{trace_index:04x}",
        ext_id=f"{block_number}-{trace_index}",
        method=method,
        parent_id=None,
    )
    return dataclasses.replace(row, **overrides) if overrides else row


def block_rows(block_number: int, count: int = 3, *, fork: int = 0) -> list[TraceRow]:
    """count rows for one block, trace indices 0..count-1."""
    return [make_row(block_number, index, fork=fork) for index in range(count)]


def insert_rows(db: TraceStoreDB, rows: Iterable[TraceRow]) -> None:
    """Insert raw rows, bypassing every component under test."""
    payload = [dataclasses.asdict(row) for row in rows]
    if not payload:
        return
    with db.engine.begin() as conn:
        conn.execute(insert(trace_table), payload)


# =============================================================================
# Store fixtures
# =============================================================================


@pytest.fixture
def source_db() -> Iterator[TraceStoreDB]:
    """Empty in-memory source store."""
    db = TraceStoreDB.in_memory()
    yield db
    db.close()


@pytest.fixture
def destination_db() -> Iterator[TraceStoreDB]:
    """Empty in-memory destination store."""
    db = TraceStoreDB.in_memory()
    yield db
    db.close()


# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Timing varies on CI
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
