"""
Structured logging configuration for the ISMP transaction indexer.

Uses structlog for structured, context-aware logging with:
- JSON output for production
- Pretty console output for development
- Automatic timing context
- Transaction context propagation (hash, block, state machine id)
"""

import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Generator

import structlog
from structlog.types import Processor

from .config import config

# Context variables for transaction-scoped data
_transaction_hash: ContextVar[str | None] = ContextVar('transaction_hash', default=None)
_block_number: ContextVar[int | None] = ContextVar('block_number', default=None)
_state_machine_id: ContextVar[str | None] = ContextVar('state_machine_id', default=None)


def get_transaction_hash() -> str | None:
    """Get the current transaction hash from context."""
    return _transaction_hash.get()


def get_block_number() -> int | None:
    """Get the current block number from context."""
    return _block_number.get()


def get_state_machine_id() -> str | None:
    """Get the current canonical state machine id from context."""
    return _state_machine_id.get()


def add_context_info(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Processor that adds context variables to log entries."""
    transaction_hash = get_transaction_hash()
    block_number = get_block_number()
    state_machine_id = get_state_machine_id()

    if transaction_hash:
        event_dict['transaction_hash'] = transaction_hash
    if block_number is not None:
        event_dict['block_number'] = block_number
    if state_machine_id:
        event_dict['state_machine_id'] = state_machine_id

    return event_dict


def configure_logging(
    json_output: bool = False,
    log_level: str | None = None,
) -> None:
    """
    Configure structlog for the application.

    Args:
        json_output: If True, output JSON logs (for production).
                    If False, output pretty console logs (for development).
        log_level: Override log level (defaults to config.LOG_LEVEL)
    """
    level = log_level or config.LOG_LEVEL
    level_num = getattr(logging, level.upper(), logging.INFO)

    # Standard library logging config
    logging.basicConfig(
        format='%(message)s',
        stream=sys.stdout,
        level=level_num,
    )

    # Shared processors
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_context_info,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


@contextmanager
def logging_context(
    transaction_hash: str | None = None,
    block_number: int | None = None,
    state_machine_id: str | None = None,
) -> Generator[None, None, None]:
    """
    Context manager for setting logging context variables.

    Usage:
        with logging_context(transaction_hash="0xabc", block_number=42):
            logger.info("transaction.handling")  # Includes hash and block
    """
    old_hash = _transaction_hash.get()
    old_block = _block_number.get()
    old_state_machine = _state_machine_id.get()

    try:
        if transaction_hash is not None:
            _transaction_hash.set(transaction_hash)
        if block_number is not None:
            _block_number.set(block_number)
        if state_machine_id is not None:
            _state_machine_id.set(state_machine_id)
        yield
    finally:
        _transaction_hash.set(old_hash)
        _block_number.set(old_block)
        _state_machine_id.set(old_state_machine)


class PipelineTimer:
    """
    Timer for tracking pipeline stage durations.

    Usage:
        timer = PipelineTimer()
        with timer.stage("classification"):
            ...
        with timer.stage("dispatch"):
            ...
        print(timer.summary())
    """

    def __init__(self):
        self.stages: dict[str, float] = {}
        self.start_time: float = time.perf_counter()
        self._stage_start: float | None = None

    @contextmanager
    def stage(self, name: str) -> Generator[None, None, None]:
        """Time a pipeline stage."""
        self._stage_start = time.perf_counter()
        try:
            yield
        finally:
            if self._stage_start is not None:
                elapsed = time.perf_counter() - self._stage_start
                self.stages[name] = elapsed * 1000  # Convert to ms
            self._stage_start = None

    @property
    def total_ms(self) -> float:
        """Total elapsed time since timer creation in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000

    def summary(self) -> dict[str, Any]:
        """Get timing summary as a dictionary."""
        return {
            'total_ms': round(self.total_ms, 2),
            'stages': {k: round(v, 2) for k, v in self.stages.items()},
        }


# Initialize logging on module import (development mode by default)
# Production deployments should set LOG_JSON_OUTPUT=true
configure_logging(json_output=config.LOG_JSON_OUTPUT)
