"""
Custom exceptions and error handling for the ISMP transaction indexer.

Provides:
- Typed exception hierarchy for different failure modes
- Error context preservation for debugging
- Wrapping of HTTP client failures from the downstream services

Descriptor resolution failures are deliberately absent here: they are
reported as ``ResolutionFailure`` values by the resolver and never raised.
"""

from typing import Any

import httpx


class IsmpIndexerError(Exception):
    """Base exception for all indexer errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


# =============================================================================
# Client Errors
# =============================================================================


class ClientError(IsmpIndexerError):
    """Base class for client-related errors."""

    pass


class ServiceError(ClientError):
    """Error from a downstream bookkeeping service call."""

    pass


class ServiceConnectionError(ServiceError):
    """Failed to connect to the downstream service."""

    pass


class ServiceTimeoutError(ServiceError):
    """Downstream service did not answer within the configured timeout."""

    pass


class ServiceResponseError(ServiceError):
    """Downstream service answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.status_code = status_code


class ServiceUnavailableError(ServiceResponseError):
    """Downstream service answered with a 5xx status (retryable)."""

    pass


# =============================================================================
# Pipeline Errors
# =============================================================================


class PipelineError(IsmpIndexerError):
    """Base class for pipeline-related errors."""

    pass


class ConfigurationError(PipelineError):
    """The indexer's static chain configuration cannot produce a state machine id."""

    pass


class DownstreamCallFailure(PipelineError):
    """
    One or both downstream services failed for a transaction.

    Surfaced to the hosting framework so it retries the whole record.
    """

    def __init__(
        self,
        message: str,
        errors: list[BaseException] | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.errors = errors or []


# =============================================================================
# Error Handling Utilities
# =============================================================================


def wrap_service_error(
    exc: Exception,
    service: str,
    context: dict[str, Any] | None = None,
) -> ServiceError:
    """
    Wrap an httpx exception in our typed error hierarchy.

    Args:
        exc: The original exception
        service: Name of the downstream service being called
        context: Additional context for debugging

    Returns:
        Typed ServiceError subclass
    """
    ctx = context or {}
    ctx['service'] = service
    ctx['original_error'] = str(exc)
    ctx['error_type'] = type(exc).__name__

    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        if status_code >= 500:
            return ServiceUnavailableError(
                f"{service} service unavailable: HTTP {status_code}",
                status_code=status_code,
                context=ctx,
            )
        return ServiceResponseError(
            f"{service} service rejected request: HTTP {status_code}",
            status_code=status_code,
            context=ctx,
        )
    elif isinstance(exc, httpx.TimeoutException):
        return ServiceTimeoutError(
            f"{service} service timed out: {exc}",
            context=ctx,
        )
    elif isinstance(exc, httpx.TransportError):
        return ServiceConnectionError(
            f"{service} service connection failed: {exc}",
            context=ctx,
        )
    else:
        return ServiceError(
            f"{service} service error: {exc}",
            context=ctx,
        )
