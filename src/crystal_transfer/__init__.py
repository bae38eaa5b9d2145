"""
crystal-transfer: resumable, chunked replication of block trace records.

Copies append-only storage-mutation traces from a source database to a
destination database, one block range at a time, rebuilding each block's
flat rows into an ordered aggregate on the way.
"""

__version__ = "0.1.0"
