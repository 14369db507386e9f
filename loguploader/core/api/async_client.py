"""
Async request handler.

asyncio twin of RequestHandler: one aiohttp session per upload call,
backoff through asyncio.sleep so the wait can be cancelled with the task.
"""
import asyncio
from typing import Optional, Tuple

import aiohttp

from .request import RequestBuilder, AsyncResponseHandler
from .retry import RetryStrategy, find_payload_error
from ..exceptions import LogUploadError, PayloadReadError, TransportExhaustedError
from ..logging import get_logger
from ..upload.models import LogMetadata
from ..upload.multipart import GzipMultipartBody
from ..upload.protocols import LoggerProtocol


class AsyncRequestHandler:
    """Sends one upload over an aiohttp session, retrying connectivity errors."""
    
    def __init__(
        self,
        session: aiohttp.ClientSession,
        retry_strategy: RetryStrategy,
        max_retries: int,
        logger: Optional[LoggerProtocol] = None
    ):
        """Initializes async request handler."""
        self.session = session
        self.retry_strategy = retry_strategy
        self.max_retries = max_retries
        self.logger = logger or get_logger('loguploader.request')
    
    async def execute(
        self,
        builder: RequestBuilder,
        metadata: LogMetadata,
        body: GzipMultipartBody,
        retry_count: int = 0
    ) -> Tuple[int, int]:
        """
        Executes upload with retry logic.
        
        Returns:
            Tuple of (response status code, number of attempts made)
        """
        attempt = retry_count + 1
        request = builder.build(metadata, body)
        self.logger.debug(f"Attempt {attempt}: POST {request.url}")
        
        try:
            async with self.session.post(
                request.url,
                data=request.body.achunks(),
                headers=request.header_dict
            ) as response:
                status_code = await AsyncResponseHandler.handle(response)
        except LogUploadError as e:
            e.attempts = attempt
            raise
        except PayloadReadError as e:
            raise self._payload_failure(e, attempt) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            payload_error = find_payload_error(e)
            if payload_error is not None:
                raise self._payload_failure(payload_error, attempt) from e
            
            if self.retry_strategy.should_retry(e, retry_count, self.max_retries):
                delay = self.retry_strategy.delay(retry_count)
                self.logger.warning(
                    f"Attempt {attempt} failed: {e!r}. Retrying in {delay:g}s "
                    f"({retry_count + 1}/{self.max_retries})"
                )
                await self.retry_strategy.wait_async(retry_count)
                return await self.execute(builder, metadata, body, retry_count + 1)
            
            retryable = self.retry_strategy.is_retryable(e)
            if retryable:
                self.logger.error(f"Giving up after {attempt} attempts: {e!r}")
            else:
                self.logger.error(f"Attempt {attempt} failed with non-retryable error: {e!r}")
            raise TransportExhaustedError(
                f"Failed to upload log after {attempt} attempts: {e!r}",
                attempts=attempt,
                retryable=retryable
            ) from e
        
        self.logger.debug(f"Attempt {attempt} succeeded with status {status_code}")
        return status_code, attempt
    
    def _payload_failure(self, error: PayloadReadError, attempt: int) -> TransportExhaustedError:
        self.logger.error(f"Attempt {attempt} failed while streaming the payload: {error.__cause__ or error}")
        return TransportExhaustedError(
            f"Failed to upload log, payload could not be streamed: {error.__cause__ or error}",
            attempts=attempt,
            retryable=False
        )
