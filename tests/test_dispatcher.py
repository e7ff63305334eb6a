"""
Tests for TransactionDispatcher with mocked downstream services.

Tests cover:
- Both services succeed: succeeded=True, reported once
- Partial failure: one raises, overall failure, survivor still ran
- Total failure: both raise, both exceptions captured
- Concurrent execution: both services run in parallel (timing verification)
- No call is abandoned when the other fails early
- DispatchResult properties, raise_for_failure and to_dict serialization

Run with: pytest tests/test_dispatcher.py -v

No network access required; both services are fully mocked.
"""

import asyncio
import time
from unittest.mock import AsyncMock

import pytest

from dispatcher.dispatcher import DispatchResult, TransactionDispatcher
from ismp_indexer.errors import DownstreamCallFailure, ServiceTimeoutError
from ismp_indexer.models.transaction import (
    UNRESOLVED_STATE_MACHINE_ID,
    ClassifiedTransaction,
    TransactionRecord,
)


# =============================================================================
# Fixtures
# =============================================================================


def _make_transaction(state_machine_id: str | None = 'POLKADOT-2000') -> ClassifiedTransaction:
    """Build a standard classified transaction."""
    record = TransactionRecord(
        block_number=1_204_311,
        transaction_hash='0xabc123',
        raw_chain_descriptor='{"stateId":{"Polkadot":"2000"}}',
        payload={'requests': []},
    )
    return ClassifiedTransaction(record=record, state_machine_id=state_machine_id)


@pytest.fixture
def mock_relayer():
    """Mocked relayer accounting service."""
    service = AsyncMock()
    service.handle_post_request_or_response_transaction = AsyncMock(return_value=None)
    return service


@pytest.fixture
def mock_hyperbridge():
    """Mocked bridge aggregation service."""
    service = AsyncMock()
    service.handle_post_request_or_response_transaction = AsyncMock(return_value=None)
    return service


@pytest.fixture
def dispatcher(mock_relayer, mock_hyperbridge):
    """TransactionDispatcher with mocked services."""
    return TransactionDispatcher(
        relayer_service=mock_relayer,
        hyperbridge_service=mock_hyperbridge,
    )


# =============================================================================
# Test: Both Succeed
# =============================================================================


class TestBothSucceed:
    """Happy path: both services complete successfully."""

    @pytest.mark.asyncio
    async def test_succeeded_true(self, dispatcher):
        result = await dispatcher.dispatch(_make_transaction())

        assert result.succeeded is True
        assert result.relayer_success is True
        assert result.hyperbridge_success is True
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_each_service_called_exactly_once(
        self, dispatcher, mock_relayer, mock_hyperbridge
    ):
        await dispatcher.dispatch(_make_transaction())

        mock_relayer.handle_post_request_or_response_transaction.assert_awaited_once()
        mock_hyperbridge.handle_post_request_or_response_transaction.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_raise_for_failure_is_noop(self, dispatcher):
        result = await dispatcher.dispatch(_make_transaction())
        result.raise_for_failure()


# =============================================================================
# Test: Partial Failure
# =============================================================================


class TestPartialFailure:
    """One service fails, so the whole dispatch is reported as failed."""

    @pytest.mark.asyncio
    async def test_hyperbridge_fails_relayer_succeeds(self, mock_relayer, mock_hyperbridge):
        mock_hyperbridge.handle_post_request_or_response_transaction = AsyncMock(
            side_effect=ServiceTimeoutError('hyperbridge service timed out')
        )
        disp = TransactionDispatcher(mock_relayer, mock_hyperbridge)
        result = await disp.dispatch(_make_transaction())

        assert result.relayer_success is True
        assert result.hyperbridge_success is False
        assert isinstance(result.hyperbridge_error, ServiceTimeoutError)
        assert result.succeeded is False

    @pytest.mark.asyncio
    async def test_relayer_fails_hyperbridge_succeeds(self, mock_relayer, mock_hyperbridge):
        mock_relayer.handle_post_request_or_response_transaction = AsyncMock(
            side_effect=RuntimeError('relayer store unavailable')
        )
        disp = TransactionDispatcher(mock_relayer, mock_hyperbridge)
        result = await disp.dispatch(_make_transaction())

        assert result.relayer_success is False
        assert result.hyperbridge_success is True
        assert result.succeeded is False
        mock_hyperbridge.handle_post_request_or_response_transaction.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_service_error_in_errors_list(self, mock_relayer, mock_hyperbridge):
        mock_relayer.handle_post_request_or_response_transaction = AsyncMock(
            side_effect=RuntimeError('relayer store unavailable')
        )
        disp = TransactionDispatcher(mock_relayer, mock_hyperbridge)
        result = await disp.dispatch(_make_transaction())

        assert len(result.errors) == 1
        assert 'RelayerService' in result.errors[0]
        assert 'relayer store unavailable' in result.errors[0]

    @pytest.mark.asyncio
    async def test_raise_for_failure(self, mock_relayer, mock_hyperbridge):
        error = RuntimeError('relayer store unavailable')
        mock_relayer.handle_post_request_or_response_transaction = AsyncMock(side_effect=error)
        disp = TransactionDispatcher(mock_relayer, mock_hyperbridge)
        result = await disp.dispatch(_make_transaction())

        with pytest.raises(DownstreamCallFailure) as exc_info:
            result.raise_for_failure()

        assert exc_info.value.errors == [error]
        assert exc_info.value.context['state_machine_id'] == 'POLKADOT-2000'

    @pytest.mark.asyncio
    async def test_failure_does_not_abandon_other_call(self, mock_relayer, mock_hyperbridge):
        """A fast failure still waits for the slower service to finish."""
        finished = []

        async def slow_hyperbridge(state_machine_id, record):
            await asyncio.sleep(0.05)
            finished.append(record.transaction_hash)

        mock_relayer.handle_post_request_or_response_transaction = AsyncMock(
            side_effect=RuntimeError('fails immediately')
        )
        mock_hyperbridge.handle_post_request_or_response_transaction = AsyncMock(
            side_effect=slow_hyperbridge
        )
        disp = TransactionDispatcher(mock_relayer, mock_hyperbridge)
        result = await disp.dispatch(_make_transaction())

        assert finished == ['0xabc123']
        assert result.hyperbridge_success is True
        assert result.succeeded is False


# =============================================================================
# Test: Total Failure
# =============================================================================


class TestTotalFailure:
    """Both services fail and both exceptions are preserved."""

    @pytest.mark.asyncio
    async def test_both_exceptions_captured(self, mock_relayer, mock_hyperbridge):
        relayer_error = RuntimeError('relayer down')
        hyperbridge_error = ServiceTimeoutError('hyperbridge down')
        mock_relayer.handle_post_request_or_response_transaction = AsyncMock(
            side_effect=relayer_error
        )
        mock_hyperbridge.handle_post_request_or_response_transaction = AsyncMock(
            side_effect=hyperbridge_error
        )
        disp = TransactionDispatcher(mock_relayer, mock_hyperbridge)
        result = await disp.dispatch(_make_transaction())

        assert result.succeeded is False
        assert result.relayer_error is relayer_error
        assert result.hyperbridge_error is hyperbridge_error
        assert len(result.errors) == 2

        with pytest.raises(DownstreamCallFailure) as exc_info:
            result.raise_for_failure()
        assert exc_info.value.errors == [relayer_error, hyperbridge_error]


# =============================================================================
# Test: Concurrent Execution
# =============================================================================


class TestConcurrentExecution:
    """Verify both services run in parallel, not sequentially."""

    @pytest.mark.asyncio
    async def test_services_run_concurrently(self, mock_relayer, mock_hyperbridge):
        """
        Both services sleep 0.1s each. If run concurrently, total time
        should be ~0.1s, not ~0.2s.
        """
        async def slow(state_machine_id, record):
            await asyncio.sleep(0.1)

        mock_relayer.handle_post_request_or_response_transaction = AsyncMock(side_effect=slow)
        mock_hyperbridge.handle_post_request_or_response_transaction = AsyncMock(side_effect=slow)

        disp = TransactionDispatcher(mock_relayer, mock_hyperbridge)

        t0 = time.monotonic()
        result = await disp.dispatch(_make_transaction())
        elapsed = time.monotonic() - t0

        assert elapsed < 0.18, f'Expected concurrent execution but took {elapsed:.3f}s'
        assert result.succeeded is True

    @pytest.mark.asyncio
    async def test_both_receive_same_arguments(self, dispatcher, mock_relayer, mock_hyperbridge):
        transaction = _make_transaction()

        await dispatcher.dispatch(transaction)

        relayer_args = mock_relayer.handle_post_request_or_response_transaction.call_args[0]
        hyperbridge_args = mock_hyperbridge.handle_post_request_or_response_transaction.call_args[0]

        assert relayer_args == ('POLKADOT-2000', transaction.record)
        assert relayer_args[1] is transaction.record
        assert hyperbridge_args[1] is transaction.record
        assert hyperbridge_args[0] == 'POLKADOT-2000'

    @pytest.mark.asyncio
    async def test_unresolved_marker_forwarded(self, dispatcher, mock_relayer, mock_hyperbridge):
        result = await dispatcher.dispatch(_make_transaction(state_machine_id=None))

        assert result.state_machine_id == UNRESOLVED_STATE_MACHINE_ID
        relayer_args = mock_relayer.handle_post_request_or_response_transaction.call_args[0]
        assert relayer_args[0] == UNRESOLVED_STATE_MACHINE_ID


# =============================================================================
# Test: DispatchResult
# =============================================================================


class TestDispatchResult:
    """Result context, timing and serialization."""

    @pytest.mark.asyncio
    async def test_result_context(self, dispatcher):
        result = await dispatcher.dispatch(_make_transaction())

        assert result.transaction_hash == '0xabc123'
        assert result.block_number == 1_204_311
        assert result.state_machine_id == 'POLKADOT-2000'

    @pytest.mark.asyncio
    async def test_timing_populated(self, dispatcher):
        result = await dispatcher.dispatch(_make_transaction())

        assert result.started_at is not None
        assert result.completed_at is not None
        assert result.completed_at >= result.started_at
        assert result.dispatch_time_ms is not None
        assert result.dispatch_time_ms >= 0

    def test_to_dict(self):
        result = DispatchResult(
            transaction_hash='0xabc123',
            block_number=10,
            state_machine_id='BSC',
            hyperbridge_error=RuntimeError('down'),
            dispatch_time_ms=12,
            errors=['HyperbridgeService: RuntimeError: down'],
        )

        d = result.to_dict()

        assert d == {
            'transaction_hash': '0xabc123',
            'block_number': 10,
            'state_machine_id': 'BSC',
            'relayer_success': True,
            'hyperbridge_success': False,
            'succeeded': False,
            'dispatch_time_ms': 12,
            'errors': ['HyperbridgeService: RuntimeError: down'],
        }
