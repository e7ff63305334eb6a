"""
Transaction dispatcher for concurrent downstream delivery.

Routes each classified handler transaction to both the relayer accounting
service and the bridge aggregation service concurrently using
asyncio.gather(return_exceptions=True).

Completion guarantee: both calls always run to completion, even when one
fails early. A dispatch succeeds only when both succeed; there is no
partial-commit state, so the caller reports any failure upstream and the
indexing framework re-delivers the whole record.
"""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

import structlog

from ismp_indexer.errors import DownstreamCallFailure
from ismp_indexer.models.transaction import ClassifiedTransaction, TransactionRecord

logger = structlog.get_logger(__name__)


class TransactionSink(Protocol):
    """A downstream service that consumes classified handler transactions."""

    async def handle_post_request_or_response_transaction(
        self,
        state_machine_id: str,
        record: TransactionRecord,
    ) -> None: ...


# =============================================================================
# Result Model
# =============================================================================


@dataclass
class DispatchResult:
    """
    Aggregate result from dispatching a transaction to both services.

    Each error slot holds the exception raised by that service, or None
    when the call succeeded.
    """

    # Transaction context
    transaction_hash: str
    block_number: int
    state_machine_id: str

    # Per-service outcome (None means success)
    relayer_error: BaseException | None = None
    hyperbridge_error: BaseException | None = None

    # Timing
    started_at: datetime | None = None
    completed_at: datetime | None = None
    dispatch_time_ms: int | None = None

    errors: list[str] = field(default_factory=list)

    @property
    def relayer_success(self) -> bool:
        return self.relayer_error is None

    @property
    def hyperbridge_success(self) -> bool:
        return self.hyperbridge_error is None

    @property
    def succeeded(self) -> bool:
        """True only when both services completed without raising."""
        return self.relayer_success and self.hyperbridge_success

    def raise_for_failure(self) -> None:
        """
        Raise DownstreamCallFailure unless both services succeeded.

        Raises:
            DownstreamCallFailure: Carrying every service exception
        """
        if self.succeeded:
            return
        raise DownstreamCallFailure(
            f'Dispatch failed for transaction {self.transaction_hash}',
            errors=[e for e in (self.relayer_error, self.hyperbridge_error) if e is not None],
            context={
                'state_machine_id': self.state_machine_id,
                'block_number': self.block_number,
                'errors': self.errors,
            },
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging / API responses."""
        return {
            'transaction_hash': self.transaction_hash,
            'block_number': self.block_number,
            'state_machine_id': self.state_machine_id,
            'relayer_success': self.relayer_success,
            'hyperbridge_success': self.hyperbridge_success,
            'succeeded': self.succeeded,
            'dispatch_time_ms': self.dispatch_time_ms,
            'errors': self.errors,
        }


# =============================================================================
# TransactionDispatcher
# =============================================================================


class TransactionDispatcher:
    """
    Fans a classified transaction out to both bookkeeping services.

    Uses asyncio.gather(return_exceptions=True) so that one service raising
    never cancels or abandons the other call.
    """

    def __init__(
        self,
        relayer_service: TransactionSink,
        hyperbridge_service: TransactionSink,
    ):
        """
        Initialize with the downstream services.

        Args:
            relayer_service: Relayer accounting service
            hyperbridge_service: Bridge aggregation service
        """
        self.relayer_service = relayer_service
        self.hyperbridge_service = hyperbridge_service

    async def dispatch(self, transaction: ClassifiedTransaction) -> DispatchResult:
        """
        Dispatch a transaction to both services concurrently.

        Both services receive the same ``(state_machine_id, record)`` pair;
        an unresolved origin is sent with the unresolved marker.

        Args:
            transaction: Classified transaction to deliver

        Returns:
            DispatchResult with the exception (if any) from each service
        """
        started_at = datetime.now()
        t0 = time.monotonic()

        record = transaction.record
        state_machine_id = transaction.dispatch_state_machine_id

        log = logger.bind(
            transaction_hash=record.transaction_hash,
            block_number=record.block_number,
            state_machine_id=state_machine_id,
        )

        log.info('dispatcher.started', resolved=transaction.resolved)

        result = DispatchResult(
            transaction_hash=record.transaction_hash,
            block_number=record.block_number,
            state_machine_id=state_machine_id,
            started_at=started_at,
        )

        # ------------------------------------------------------------------
        # Run both deliveries concurrently; both always run to completion
        # ------------------------------------------------------------------
        relayer_outcome, hyperbridge_outcome = await asyncio.gather(
            self.relayer_service.handle_post_request_or_response_transaction(
                state_machine_id, record
            ),
            self.hyperbridge_service.handle_post_request_or_response_transaction(
                state_machine_id, record
            ),
            return_exceptions=True,
        )

        # ------------------------------------------------------------------
        # Classify each outcome
        # ------------------------------------------------------------------
        if isinstance(relayer_outcome, BaseException):
            log.error(
                'dispatcher.relayer_failed',
                error=str(relayer_outcome),
                error_type=type(relayer_outcome).__name__,
            )
            result.relayer_error = relayer_outcome
            result.errors.append(
                f'RelayerService: {type(relayer_outcome).__name__}: {relayer_outcome}'
            )
        else:
            log.info('dispatcher.relayer_complete')

        if isinstance(hyperbridge_outcome, BaseException):
            log.error(
                'dispatcher.hyperbridge_failed',
                error=str(hyperbridge_outcome),
                error_type=type(hyperbridge_outcome).__name__,
            )
            result.hyperbridge_error = hyperbridge_outcome
            result.errors.append(
                f'HyperbridgeService: {type(hyperbridge_outcome).__name__}: {hyperbridge_outcome}'
            )
        else:
            log.info('dispatcher.hyperbridge_complete')

        # ------------------------------------------------------------------
        # Finalize
        # ------------------------------------------------------------------
        result.completed_at = datetime.now()
        result.dispatch_time_ms = int((time.monotonic() - t0) * 1000)

        log.info(
            'dispatcher.complete',
            succeeded=result.succeeded,
            relayer_success=result.relayer_success,
            hyperbridge_success=result.hyperbridge_success,
            dispatch_time_ms=result.dispatch_time_ms,
        )

        return result
