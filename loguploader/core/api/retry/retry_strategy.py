"""Retry strategies using Strategy Pattern."""
import time
import asyncio
from abc import ABC, abstractmethod
from typing import Optional, Tuple, Type

import aiohttp
import requests

from ...exceptions import PayloadReadError

# Connectivity failures only. A received response is never retried.
SYNC_RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
)
ASYNC_RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (
    aiohttp.ClientConnectionError,
    asyncio.TimeoutError,
)
# TLS failures will not heal by waiting
NON_RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (
    requests.exceptions.SSLError,
    aiohttp.ClientSSLError,
)


def find_payload_error(error: BaseException) -> Optional[PayloadReadError]:
    """
    Finds a payload read failure wrapped inside a transport exception.
    
    requests and aiohttp re-raise errors from the body iterator as their own
    connection errors, keeping the original in the cause, the context or the
    args of the wrapper.
    """
    seen = set()
    pending = [error]
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, PayloadReadError):
            return current
        pending.append(current.__cause__)
        pending.append(current.__context__)
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))
    return None


class RetryStrategy(ABC):
    """Abstract retry strategy."""
    
    @abstractmethod
    def is_retryable(self, error: BaseException) -> bool:
        """Determines if the error may go away on another attempt."""
        pass
    
    @abstractmethod
    def should_retry(self, error: BaseException, retry_count: int, max_retries: int) -> bool:
        """Determines if the failed attempt should be retried."""
        pass
    
    @abstractmethod
    def delay(self, retry_count: int) -> float:
        """Seconds to wait before the next attempt."""
        pass
    
    def wait(self, retry_count: int):
        """Waits before retry."""
        time.sleep(self.delay(retry_count))
    
    async def wait_async(self, retry_count: int):
        """Waits before retry (async)."""
        await asyncio.sleep(self.delay(retry_count))


class LinearBackoffStrategy(RetryStrategy):
    """
    Linear backoff retry strategy.
    
    ``retry_count`` is the number of retries already made, so the first
    retry waits ``delay_seconds``, the second twice that, and so on.
    """
    
    def __init__(
        self,
        delay_seconds: float,
        retryable: Tuple[Type[BaseException], ...] = SYNC_RETRYABLE_ERRORS + ASYNC_RETRYABLE_ERRORS
    ):
        self.delay_seconds = delay_seconds
        self.retryable = retryable
    
    def is_retryable(self, error: BaseException) -> bool:
        """True for transport-level failures that may heal on their own."""
        if isinstance(error, NON_RETRYABLE_ERRORS):
            return False
        if find_payload_error(error) is not None:
            # Local read failure surfacing as a connection error
            return False
        return isinstance(error, self.retryable)
    
    def should_retry(self, error: BaseException, retry_count: int, max_retries: int) -> bool:
        """Retries connectivity errors until max_retries is reached."""
        return self.is_retryable(error) and retry_count < max_retries
    
    def delay(self, retry_count: int) -> float:
        """Waits (retry_count + 1) * delay_seconds."""
        return (retry_count + 1) * self.delay_seconds
