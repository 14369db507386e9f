"""Retry strategies using Strategy Pattern."""
from .retry_strategy import (
    RetryStrategy,
    LinearBackoffStrategy,
    SYNC_RETRYABLE_ERRORS,
    ASYNC_RETRYABLE_ERRORS,
    NON_RETRYABLE_ERRORS,
    find_payload_error,
)

__all__ = [
    'RetryStrategy',
    'LinearBackoffStrategy',
    'SYNC_RETRYABLE_ERRORS',
    'ASYNC_RETRYABLE_ERRORS',
    'NON_RETRYABLE_ERRORS',
    'find_payload_error',
]
