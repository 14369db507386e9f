"""Request handler executing uploads with retries."""
from typing import Optional, Tuple

import requests

from .request_builder import RequestBuilder
from .response_handler import ResponseHandler
from ..retry import RetryStrategy, find_payload_error
from ...exceptions import LogUploadError, PayloadReadError, TransportExhaustedError
from ...logging import get_logger
from ...upload.models import LogMetadata
from ...upload.multipart import GzipMultipartBody
from ...upload.protocols import LoggerProtocol


class RequestHandler:
    """
    Sends one upload over a requests session, retrying connectivity errors.
    
    Each attempt rebuilds the request around the same body, so the
    Authorization value is fetched anew. Responses are never retried:
    once the server answered, its decision is final.
    """
    
    def __init__(
        self,
        session: requests.Session,
        retry_strategy: RetryStrategy,
        max_retries: int,
        timeout=None,
        logger: Optional[LoggerProtocol] = None
    ):
        """Initializes request handler."""
        self.session = session
        self.retry_strategy = retry_strategy
        self.max_retries = max_retries
        self.timeout = timeout
        self.logger = logger or get_logger('loguploader.request')
    
    def execute(
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
            
        Raises:
            TransportExhaustedError: Connectivity kept failing, or the payload
                could not be read while streaming
            ServerRejectionError: Server answered with a non-200 status
            ResponseDecodingError: Response could not be read
        """
        attempt = retry_count + 1
        request = builder.build(metadata, body)
        self.logger.debug(f"Attempt {attempt}: POST {request.url}")
        
        try:
            with self.session.post(
                request.url,
                data=request.body.chunks(),
                headers=request.header_dict,
                timeout=self.timeout,
                stream=True
            ) as response:
                status_code = ResponseHandler.handle(response)
        except LogUploadError as e:
            e.attempts = attempt
            raise
        except PayloadReadError as e:
            raise self._payload_failure(e, attempt) from e
        except requests.exceptions.RequestException as e:
            payload_error = find_payload_error(e)
            if payload_error is not None:
                raise self._payload_failure(payload_error, attempt) from e
            
            if self.retry_strategy.should_retry(e, retry_count, self.max_retries):
                delay = self.retry_strategy.delay(retry_count)
                self.logger.warning(
                    f"Attempt {attempt} failed: {e}. Retrying in {delay:g}s "
                    f"({retry_count + 1}/{self.max_retries})"
                )
                self.retry_strategy.wait(retry_count)
                return self.execute(builder, metadata, body, retry_count + 1)
            
            retryable = self.retry_strategy.is_retryable(e)
            if retryable:
                self.logger.error(f"Giving up after {attempt} attempts: {e}")
            else:
                self.logger.error(f"Attempt {attempt} failed with non-retryable error: {e}")
            raise TransportExhaustedError(
                f"Failed to upload log after {attempt} attempts: {e}",
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
