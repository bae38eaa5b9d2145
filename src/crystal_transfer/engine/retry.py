# src/crystal_transfer/engine/retry.py
"""RetryManager: bounded retry at the store-access boundary, via tenacity.

Each unit handed to execute_with_retry() is all-or-nothing (a cursor
query, a whole chunk fetch, a whole batch write), so repeating it can
never surface a partially assembled aggregate.

With max_attempts=1 (the default) every failure propagates on first
occurrence.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from crystal_transfer.contracts.errors import QueryError, TransferError

if TYPE_CHECKING:
    from crystal_transfer.core.config import RetrySettings

T = TypeVar("T")


class MaxRetriesExceeded(TransferError):
    """Raised when max retry attempts are exceeded."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Max retries ({attempts}) exceeded: {last_error}")


def is_transient_query_error(error: BaseException) -> bool:
    """Only connection-level store failures are worth repeating."""
    return isinstance(error, QueryError) and error.transient


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior.

    max_attempts is the TOTAL number of tries, not the number of retries.
    So max_attempts=3 means: try, retry, retry (3 total).
    """

    max_attempts: int = 1
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    jitter: float = 1.0  # seconds
    exponential_base: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    @classmethod
    def no_retry(cls) -> "RetryConfig":
        """Factory for no-retry configuration (single attempt)."""
        return cls(max_attempts=1)

    @classmethod
    def from_settings(cls, settings: "RetrySettings") -> "RetryConfig":
        """Factory from RetrySettings config model."""
        return cls(
            max_attempts=settings.max_attempts,
            base_delay=settings.initial_delay_seconds,
            max_delay=settings.max_delay_seconds,
            jitter=1.0,  # Fixed jitter, not exposed in settings
            exponential_base=settings.exponential_base,
        )


class RetryManager:
    """Runs store operations with exponential backoff and jitter.

    Example:
        manager = RetryManager(RetryConfig(max_attempts=3))

        traces = manager.execute_with_retry(
            lambda: fetcher.fetch_range(0, 99),
            is_retryable=is_transient_query_error,
            on_retry=lambda attempt, error: logger.warning("retrying", attempt=attempt),
        )
    """

    def __init__(self, config: RetryConfig) -> None:
        self._config = config

    @property
    def config(self) -> RetryConfig:
        return self._config

    def execute_with_retry(
        self,
        operation: Callable[[], T],
        *,
        is_retryable: Callable[[BaseException], bool] = is_transient_query_error,
        on_retry: Callable[[int, BaseException], None] | None = None,
    ) -> T:
        """Execute operation with retry logic.

        Args:
            operation: Operation to execute
            is_retryable: Function to check if error is retryable
            on_retry: Optional callback (1-based attempt number, error),
                called only when another attempt will follow

        Returns:
            Result of operation

        Raises:
            MaxRetriesExceeded: If retryable failures exhaust max_attempts
                (only possible when max_attempts > 1)
            Exception: Non-retryable errors, and any error when
                max_attempts == 1, propagate unchanged
        """
        if self._config.max_attempts == 1:
            return operation()

        attempt = 0
        last_error: BaseException | None = None

        try:
            for attempt_state in Retrying(
                stop=stop_after_attempt(self._config.max_attempts),
                wait=wait_exponential_jitter(
                    initial=self._config.base_delay,
                    max=self._config.max_delay,
                    exp_base=self._config.exponential_base,
                    jitter=self._config.jitter,
                ),
                retry=retry_if_exception(is_retryable),
                reraise=False,
            ):
                with attempt_state:
                    attempt = attempt_state.retry_state.attempt_number
                    try:
                        return operation()
                    except Exception as e:
                        last_error = e
                        if is_retryable(e) and on_retry and attempt < self._config.max_attempts:
                            on_retry(attempt, e)
                        raise

        except RetryError as e:
            final_error = last_error or e.last_attempt.exception()
            assert final_error is not None, "RetryError without exception is impossible"
            raise MaxRetriesExceeded(attempt, final_error) from e

        raise RuntimeError("Unexpected state in retry loop")  # pragma: no cover
