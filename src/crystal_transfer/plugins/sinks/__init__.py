"""Built-in replication sinks.

Every sink satisfies crystal_transfer.contracts.sink.ReplicationSink.
"""

from crystal_transfer.plugins.sinks.null_sink import NullSink
from crystal_transfer.plugins.sinks.trace_table_sink import TraceTableSink

__all__ = ["NullSink", "TraceTableSink"]
