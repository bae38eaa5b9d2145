"""Transfer engine: chunk planning, orchestration and retry."""

from crystal_transfer.engine.orchestrator import TransferOrchestrator, TransferSummary
from crystal_transfer.engine.planner import BlockRange, plan_chunks
from crystal_transfer.engine.retry import MaxRetriesExceeded, RetryConfig, RetryManager

__all__ = [
    "BlockRange",
    "MaxRetriesExceeded",
    "RetryConfig",
    "RetryManager",
    "TransferOrchestrator",
    "TransferSummary",
    "plan_chunks",
]
