"""Structured JSON logging for scans, written to stderr."""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog


def _stderr_logger(*_args: Any) -> structlog.PrintLogger:
    # Resolved per logger so a replaced sys.stderr is honoured
    return structlog.PrintLogger(file=sys.stderr)


def setup_logging(log_level: str = "INFO") -> None:
    """Configure structured logging for the scanner.

    Log lines go to stderr so a report printed on stdout stays parseable.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


@contextmanager
def scan_context(contract: str) -> Iterator[str]:
    """Tag every event logged inside the block with a fresh scan id.

    Any previously bound ``scan_id``/``contract`` values are restored on exit.

    Args:
        contract: Short contract address for the scan

    Yields:
        The scan id
    """
    scan_id = uuid.uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(scan_id=scan_id, contract=contract):
        yield scan_id
