"""
loguploader - resilient log upload client.

Usage:
    >>> from loguploader import LogUploader, LogMetadata
    >>> 
    >>> uploader = LogUploader("https://logs.example.com", lambda: "Bearer abc")
    >>> metadata = LogMetadata(end_time, logger_name="build", tag="build-1")
    >>> uploader.upload_string("hello", metadata)
"""
import logging
from .client import LogUploader, AsyncLogUploader

# Configuration
from .core.api import (
    UploaderConfig,
    RetryConfig,
    TimeoutConfig,
    RetryStrategy,
    LinearBackoffStrategy,
)

# Models
from .core.upload import (
    LogMetadata,
    FilePayload,
    TextPayload,
    UploadResult,
    HEADER_PROCESS_CONTEXT,
    HEADER_PROCESS_CONTEXT_VARIANT,
    HEADER_TMP,
    HEADER_REQUEST_CONTEXT,
    HEADER_AUTHORIZATION,
)

# Checksums
from .core.crypto import ChecksumStream, compute_md5

# Errors
from .core.exceptions import (
    FailureKind,
    LogUploadError,
    ChecksumComputationError,
    TransportExhaustedError,
    ServerRejectionError,
    ResponseDecodingError,
    ChecksumNotReadyError,
    PayloadReadError,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for loguploader modules.
    
    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'loguploader',
        'loguploader.upload',
        'loguploader.request',
        'loguploader.response',
        'loguploader.checksum',
    ]
    
    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'LogUploader',
    'AsyncLogUploader',
    'UploaderConfig',
    'RetryConfig',
    'TimeoutConfig',
    'RetryStrategy',
    'LinearBackoffStrategy',
    'LogMetadata',
    'FilePayload',
    'TextPayload',
    'UploadResult',
    'HEADER_PROCESS_CONTEXT',
    'HEADER_PROCESS_CONTEXT_VARIANT',
    'HEADER_TMP',
    'HEADER_REQUEST_CONTEXT',
    'HEADER_AUTHORIZATION',
    'ChecksumStream',
    'compute_md5',
    'FailureKind',
    'LogUploadError',
    'ChecksumComputationError',
    'TransportExhaustedError',
    'ServerRejectionError',
    'ResponseDecodingError',
    'ChecksumNotReadyError',
    'PayloadReadError',
    'setup_logging',
]
