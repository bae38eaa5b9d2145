"""SQLAlchemy table definition for the trace store.

Uses SQLAlchemy Core (not ORM) for explicit control over queries.
Source and destination share this one table layout; the name is stable.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Index,
    Integer,
    LargeBinary,
    MetaData,
    PrimaryKeyConstraint,
    Table,
    Text,
)

metadata = MetaData()

TRACE_TABLE_NAME = "trace"

trace_table = Table(
    TRACE_TABLE_NAME,
    metadata,
    Column("block_hash", LargeBinary, nullable=False),
    Column("block_parent_hash", LargeBinary, nullable=False),
    Column("block_number", BigInteger, nullable=False),
    Column("runtime_version", Integer, nullable=False),
    Column("is_finalized", Boolean, nullable=False),
    Column("trace_index", Integer, nullable=False),
    Column("key", Text, nullable=False),
    Column("value", Text, nullable=False),
    Column("ext_id", Text, nullable=False),
    # One of the StorageMethod canonical names; stored as free text
    Column("method", Text, nullable=False),
    Column("parent_id", Text),
    # (block_hash, trace_index) is written once and never changes
    PrimaryKeyConstraint("block_hash", "trace_index"),
)

Index("ix_trace_block_number", trace_table.c.block_number)
