"""
Upload module for log uploads.

Models, the streaming multipart body and the interfaces the upload
pipeline is built on.
"""
from .models import (
    LogMetadata,
    FilePayload,
    TextPayload,
    LogPayload,
    UploadRequest,
    UploadResult,
    format_end_time,
    HEADER_PROCESS_CONTEXT,
    HEADER_PROCESS_CONTEXT_VARIANT,
    HEADER_TMP,
    HEADER_REQUEST_CONTEXT,
    HEADER_AUTHORIZATION,
)
from .multipart import GzipMultipartBody
from .protocols import CredentialSupplier, LoggerProtocol

__all__ = [
    # Models
    'LogMetadata',
    'FilePayload',
    'TextPayload',
    'LogPayload',
    'UploadRequest',
    'UploadResult',
    'format_end_time',
    
    # Header names
    'HEADER_PROCESS_CONTEXT',
    'HEADER_PROCESS_CONTEXT_VARIANT',
    'HEADER_TMP',
    'HEADER_REQUEST_CONTEXT',
    'HEADER_AUTHORIZATION',
    
    # Body
    'GzipMultipartBody',
    
    # Protocols
    'CredentialSupplier',
    'LoggerProtocol',
]
