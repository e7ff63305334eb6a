"""
Handler-contract transaction handlers invoked by the indexing framework.

Each handler:
1. Logs the transaction milestone
2. Classifies it to a canonical state machine id
3. Dispatches it to both bookkeeping services concurrently
4. Raises if either service failed, so the framework retries the record
"""

from __future__ import annotations

from dispatcher.dispatcher import DispatchResult, TransactionDispatcher

from ..logging import PipelineTimer, get_logger, logging_context
from ..models.transaction import TransactionMethod, TransactionRecord
from ..pipeline.classifier import TransactionClassifier

logger = get_logger(__name__)


class TransactionHandler:
    """
    Classify-then-dispatch entry point for handler transactions.

    Stateless across invocations: every record is processed independently,
    and re-delivery of the same record is safe as long as the downstream
    services deduplicate by transaction hash.
    """

    def __init__(
        self,
        classifier: TransactionClassifier,
        dispatcher: TransactionDispatcher,
    ):
        self.classifier = classifier
        self.dispatcher = dispatcher

    async def handle_post_request_transaction(self, record: TransactionRecord) -> DispatchResult:
        """Handle a handlePostRequests transaction."""
        return await self.handle(record, TransactionMethod.POST_REQUEST)

    async def handle_post_response_transaction(self, record: TransactionRecord) -> DispatchResult:
        """Handle a handlePostResponses transaction."""
        return await self.handle(record, TransactionMethod.POST_RESPONSE)

    async def handle(
        self,
        record: TransactionRecord,
        method: TransactionMethod,
    ) -> DispatchResult:
        """
        Classify and dispatch one transaction.

        Args:
            record: Transaction delivered by the indexing framework
            method: Handler entry point the transaction called

        Returns:
            DispatchResult for a fully successful dispatch

        Raises:
            ConfigurationError: If the indexer's chain id is unresolvable
            DownstreamCallFailure: If either downstream service failed
        """
        timer = PipelineTimer()

        with logging_context(
            transaction_hash=record.transaction_hash,
            block_number=record.block_number,
        ):
            logger.info('transaction.handling', method=method.value)

            with timer.stage('classification'):
                classified = self.classifier.classify(record)

            with logging_context(state_machine_id=classified.dispatch_state_machine_id):
                with timer.stage('dispatch'):
                    result = await self.dispatcher.dispatch(classified)

                if not result.succeeded:
                    logger.error(
                        'transaction.dispatch_failed',
                        method=method.value,
                        errors=result.errors,
                        **timer.summary(),
                    )
                    result.raise_for_failure()

                logger.info(
                    'transaction.handled',
                    method=method.value,
                    resolved=classified.resolved,
                    **timer.summary(),
                )
                return result
