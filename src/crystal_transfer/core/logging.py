# src/crystal_transfer/core/logging.py
"""Structured logging configuration for crystal-transfer.

Configures BOTH structlog and stdlib logging to emit consistent output
(JSON or console) on stdout. ProcessorFormatter routes stdlib records
through structlog's processor chain, so SQLAlchemy and psycopg messages
look the same as ours.

Two levels are applied: `level` for the crystal_transfer logger tree and
`other_level` for everything else. Driver and pool internals stay at
WARNING unless asked for.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

PACKAGE_LOGGER = "crystal_transfer"


def _remove_internal_fields(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Remove internal structlog fields from output.

    ProcessorFormatter always adds _record and _from_structlog when
    processing log records. They are bookkeeping, not output.
    """
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    other_level: str = "WARNING",
) -> None:
    """Configure structlog and stdlib logging.

    Args:
        json_output: If True, output JSON. If False, human-readable.
        level: Level for crystal_transfer loggers (DEBUG, INFO, ...).
        other_level: Level for every other logger (sqlalchemy, psycopg, ...).
    """
    package_level = getattr(logging, level.upper())
    root_level = getattr(logging, other_level.upper())

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        final_processors: list[Any] = [
            _remove_internal_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final_processors = [
            _remove_internal_fields,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Caching off so tests can reconfigure
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            processors=final_processors,
            foreign_pre_chain=shared_processors,
        )
    )

    root = logging.getLogger()
    root.handlers = []
    root.addHandler(handler)
    root.setLevel(min(package_level, root_level))

    # Root carries the lower of the two levels so package records get through;
    # the package tree and everything else are then filtered independently.
    logging.getLogger(PACKAGE_LOGGER).setLevel(package_level)
    for name in ("sqlalchemy", "psycopg", "urllib3"):
        logging.getLogger(name).setLevel(root_level)
    if package_level < root_level:
        handler.addFilter(_OtherLoggersFilter(root_level))


class _OtherLoggersFilter(logging.Filter):
    """Drop records below other_level unless they come from our package."""

    def __init__(self, other_level: int) -> None:
        super().__init__()
        self._other_level = other_level

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == PACKAGE_LOGGER or record.name.startswith(PACKAGE_LOGGER + "."):
            return True
        return record.levelno >= self._other_level


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a bound logger for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Bound structlog logger.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
