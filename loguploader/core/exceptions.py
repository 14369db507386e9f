"""
Exceptions raised by the log upload pipeline.

Every failed upload surfaces as exactly one ``LogUploadError``. The concrete
subclass and its ``kind`` tell the caller what went wrong.
"""
from enum import Enum
from typing import Optional


class FailureKind(str, Enum):
    """Classification of a failed upload."""
    CHECKSUM = 'checksum'
    TRANSPORT = 'transport'
    SERVER_REJECTION = 'server_rejection'
    RESPONSE_DECODING = 'response_decoding'


class LogUploadError(Exception):
    """Base exception for all upload failures."""
    
    kind: FailureKind = FailureKind.TRANSPORT
    
    def __init__(
        self,
        message: str,
        attempts: int = 0,
        status_code: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            attempts: Number of transport attempts made before failing
            status_code: HTTP status code (if a response was received)
        """
        self.attempts = attempts
        self.status_code = status_code
        super().__init__(message)


class ChecksumComputationError(LogUploadError):
    """Payload could not be read while computing its checksum."""
    kind = FailureKind.CHECKSUM


class TransportExhaustedError(LogUploadError):
    """Connectivity failure that persisted through all retries."""
    kind = FailureKind.TRANSPORT
    
    def __init__(
        self,
        message: str,
        attempts: int = 0,
        retryable: bool = True
    ) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            attempts: Number of attempts made
            retryable: False when the last failure was not eligible for retry
        """
        self.retryable = retryable
        super().__init__(message, attempts)


class ServerRejectionError(LogUploadError):
    """The endpoint answered with a status other than 200."""
    kind = FailureKind.SERVER_REJECTION
    
    def __init__(
        self,
        status_code: int,
        server_message: str,
        attempts: int = 0
    ) -> None:
        self.server_message = server_message
        super().__init__(
            f"Failed to upload log, status {status_code} message: {server_message}",
            attempts,
            status_code
        )


class ResponseDecodingError(LogUploadError):
    """A response arrived but its body could not be read or decoded."""
    kind = FailureKind.RESPONSE_DECODING


class ChecksumNotReadyError(RuntimeError):
    """Digest requested before the checksummed source was fully consumed."""
    pass


class PayloadReadError(Exception):
    """
    The payload source failed while the request body was being streamed.
    
    Must not derive from OSError: HTTP clients turn an OSError raised by a
    body iterator into their own connection errors. The original error is
    chained as ``__cause__``.
    """
    pass
