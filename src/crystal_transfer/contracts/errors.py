"""Error taxonomy shared across store, engine and CLI boundaries.

Every failure the transfer can hit surfaces as a TransferError subclass so
the CLI can report it and exit non-zero. Nothing below is caught and
swallowed inside the engine: a run either completes or aborts.
"""


class TransferError(Exception):
    """Base class for all transfer failures."""


class StoreConnectionError(TransferError):
    """Raised when a store's connection pool cannot be established.

    Covers bad credentials, an unreachable host and acquire timeouts at
    startup. Fatal: nothing is processed when this is raised.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Cannot connect to {url}: {reason}")


class QueryError(TransferError):
    """Raised when a store round-trip fails.

    Attributes:
        operation: Short name of the store operation that failed
        transient: True when the underlying failure is connection-level
            (network drop, pool timeout) and the operation may succeed
            if repeated. Malformed SQL and permission errors are not transient.
    """

    def __init__(self, operation: str, reason: str, *, transient: bool = False) -> None:
        self.operation = operation
        self.reason = reason
        self.transient = transient
        super().__init__(f"{operation} failed: {reason}")


class DecodeError(TransferError, ValueError):
    """Raised when a hex-encoded block hash cannot be decoded."""

    def __init__(self, value: str, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid hex hash {value!r}: {reason}")


class UnknownStorageMethod(TransferError, ValueError):
    """Raised when a method string matches none of the canonical names.

    There is no fallback variant. A batch containing one such row fails
    as a whole.
    """

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Unknown storage method: {value}")


class EmptyStoreError(TransferError):
    """Raised when the source has no rows, so there is no target block."""

    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"Store has no rows in table '{table}'; nothing to transfer")
