"""HTTP layer of the log uploader."""
from .config import UploaderConfig, RetryConfig, TimeoutConfig, UPLOAD_PATH
from .retry import RetryStrategy, LinearBackoffStrategy
from .request import (
    RequestBuilder,
    RequestHandler,
    ResponseHandler,
    AsyncResponseHandler,
)
from .async_client import AsyncRequestHandler
from .session import SessionFactory

__all__ = [
    # Configuration
    'UploaderConfig',
    'RetryConfig',
    'TimeoutConfig',
    'UPLOAD_PATH',
    
    # Retry
    'RetryStrategy',
    'LinearBackoffStrategy',
    
    # Requests
    'RequestBuilder',
    'RequestHandler',
    'ResponseHandler',
    'AsyncResponseHandler',
    'AsyncRequestHandler',
    
    # Sessions
    'SessionFactory',
]
