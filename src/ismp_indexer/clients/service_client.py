"""
Async HTTP client base for the downstream bookkeeping services.

Each service receives ``(state_machine_id, record)`` for every handler
transaction and must tolerate re-delivery: the indexing framework retries a
whole record when either service fails. Requests carry an
``Idempotency-Key`` equal to the transaction hash so the receiving side can
upsert or deduplicate.

Retry strategy:
- 2xx: success
- 4xx: fail immediately (persistent error, no retry)
- 5xx / timeout / connection error: retry with exponential backoff
"""

from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..errors import (
    ServiceConnectionError,
    ServiceTimeoutError,
    ServiceUnavailableError,
    wrap_service_error,
)
from ..logging import get_logger
from ..models.transaction import TransactionRecord

logger = get_logger(__name__)

_RETRYABLE_ERRORS = (ServiceConnectionError, ServiceTimeoutError, ServiceUnavailableError)


class TransactionServiceClient:
    """
    Posts classified handler transactions to one downstream service.

    Subclasses set ``service_name`` and ``transactions_path``.
    """

    service_name: str = 'transaction'
    transactions_path: str = '/transactions'

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
        backoff_multiplier: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Service root URL
            api_key: Bearer token sent on every request (optional)
            timeout_seconds: Per-request timeout
            max_retries: Retries after the first attempt for retryable failures
            backoff_multiplier: Exponential backoff multiplier in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        if not base_url:
            raise ValueError(f'{self.service_name} service base URL is required')

        self.base_url = base_url.rstrip('/')
        self.max_retries = max_retries
        self.backoff_multiplier = backoff_multiplier

        headers = {'Content-Type': 'application/json'}
        if api_key:
            headers['Authorization'] = f'Bearer {api_key}'

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> 'TransactionServiceClient':
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def handle_post_request_or_response_transaction(
        self,
        state_machine_id: str,
        record: TransactionRecord,
    ) -> None:
        """
        Deliver a classified transaction to the service.

        Args:
            state_machine_id: Canonical id of the transaction's origin
                (or the unresolved marker)
            record: The original transaction record

        Raises:
            ServiceError: If the service rejects the request or remains
                unreachable after retries
        """
        body = {
            'chain': state_machine_id,
            'transaction': record.model_dump(mode='json', by_alias=True),
        }
        await self._post(
            self.transactions_path,
            body,
            idempotency_key=record.transaction_hash,
        )
        logger.info(
            f'{self.service_name}_client.delivered',
            state_machine_id=state_machine_id,
            transaction_hash=record.transaction_hash,
        )

    async def _post(
        self,
        path: str,
        body: dict[str, Any],
        idempotency_key: str,
    ) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(1 + self.max_retries),
            wait=wait_exponential(multiplier=self.backoff_multiplier, min=0, max=10),
            retry=retry_if_exception_type(_RETRYABLE_ERRORS),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._post_once(path, body, idempotency_key)
        raise AssertionError('unreachable')  # AsyncRetrying reraises on exhaustion

    async def _post_once(
        self,
        path: str,
        body: dict[str, Any],
        idempotency_key: str,
    ) -> httpx.Response:
        try:
            response = await self._client.post(
                path,
                json=body,
                headers={'Idempotency-Key': idempotency_key},
            )
            response.raise_for_status()
            return response
        except httpx.HTTPError as e:
            error = wrap_service_error(
                e,
                self.service_name,
                context={'path': path, 'idempotency_key': idempotency_key},
            )
            logger.warning(
                f'{self.service_name}_client.request_failed',
                error=str(error),
                error_type=type(error).__name__,
            )
            raise error from e
