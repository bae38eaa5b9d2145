# src/crystal_transfer/engine/orchestrator.py
"""TransferOrchestrator: drives a full transfer run.

Flow:
1. Ask the sink where to resume (destination cursor), once.
2. Read the source's highest block number (the target), once.
3. For each planned chunk, strictly in increasing order:
   fetch aggregates from the source, hand them to the sink.

One chunk at a time, no overlap. Any error aborts the run; the next run
recomputes its starting point from what the destination already holds.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial

from crystal_transfer.contracts.sink import ReplicationSink
from crystal_transfer.contracts.traces import BlockTraces
from crystal_transfer.core.logging import get_logger
from crystal_transfer.core.store.cursor import MAX_BLOCK_NUMBER, CursorResolver
from crystal_transfer.core.store.fetcher import TraceFetcher
from crystal_transfer.engine.planner import BlockRange, plan_chunks
from crystal_transfer.engine.retry import RetryConfig, RetryManager

logger = get_logger(__name__)


@dataclass
class TransferSummary:
    """What a completed run did."""

    start_block: int
    target_block: int
    chunks: list[BlockRange] = field(default_factory=list)
    blocks_fetched: int = 0
    blocks_written: int = 0
    blocks_skipped: int = 0

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)


class TransferOrchestrator:
    """Copies block traces from a source store to a replication sink.

    Example:
        orchestrator = TransferOrchestrator(
            fetcher=TraceFetcher(source_db),
            source_cursor=CursorResolver(source_db),
            sink=TraceTableSink(destination_db),
            chunk_size=100,
        )
        summary = orchestrator.run()
    """

    def __init__(
        self,
        *,
        fetcher: TraceFetcher,
        source_cursor: CursorResolver,
        sink: ReplicationSink,
        chunk_size: int,
        retry_manager: RetryManager | None = None,
    ) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self._fetcher = fetcher
        self._source_cursor = source_cursor
        self._sink = sink
        self._chunk_size = chunk_size
        self._retry = retry_manager or RetryManager(RetryConfig.no_retry())

    def _on_retry(self, operation: str) -> Callable[[int, BaseException], None]:
        def callback(attempt: int, error: BaseException) -> None:
            logger.warning("Store operation failed, retrying", operation=operation, attempt=attempt, error=str(error))

        return callback

    def resolve_start(self) -> int:
        """Destination resumption cursor over the whole block-number space."""
        return self._retry.execute_with_retry(
            lambda: self._sink.next_block_number(0, MAX_BLOCK_NUMBER),
            on_retry=self._on_retry("next_block_number"),
        )

    def resolve_target(self) -> int:
        """Highest block number at the source.

        Raises:
            EmptyStoreError: If the source holds no rows
        """
        return self._retry.execute_with_retry(
            self._source_cursor.max_block_number,
            on_retry=self._on_retry("max_block_number"),
        )

    def run(self) -> TransferSummary:
        """Execute the transfer to completion.

        Raises:
            TransferError: Any store, decode or parse failure. Chunks
                already handed to the sink stay written.
        """
        start = self.resolve_start()
        logger.info("Start block number", block_number=start)
        target = self.resolve_target()
        logger.info("Target block number", block_number=target)

        summary = TransferSummary(start_block=start, target_block=target)
        for chunk in plan_chunks(start, target, self._chunk_size):
            aggregates = self._fetch_chunk(chunk)
            result = self._retry.execute_with_retry(
                partial(self._sink.write_batch, aggregates),
                on_retry=self._on_retry("write_batch"),
            )
            summary.chunks.append(chunk)
            summary.blocks_fetched += len(aggregates)
            summary.blocks_written += result.written
            summary.blocks_skipped += result.skipped

        logger.info(
            "Transfer complete",
            start_block=start,
            target_block=target,
            chunks=summary.chunk_count,
            blocks_fetched=summary.blocks_fetched,
            blocks_written=summary.blocks_written,
            blocks_skipped=summary.blocks_skipped,
        )
        return summary

    def _fetch_chunk(self, chunk: BlockRange) -> list[BlockTraces]:
        logger.info("Get blocks", start_block=chunk.start, end_block=chunk.end)
        aggregates = self._retry.execute_with_retry(
            lambda: self._fetcher.fetch_range(chunk.start, chunk.end),
            on_retry=self._on_retry("fetch_range"),
        )
        logger.info("Got blocks", count=len(aggregates), start_block=chunk.start, end_block=chunk.end)
        return aggregates
