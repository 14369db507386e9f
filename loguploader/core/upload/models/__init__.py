"""Upload models."""
from .upload_models import (
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
    TEXT_PLAIN_UTF8,
    OCTET_STREAM,
)

__all__ = [
    'LogMetadata',
    'FilePayload',
    'TextPayload',
    'LogPayload',
    'UploadRequest',
    'UploadResult',
    'format_end_time',
    'HEADER_PROCESS_CONTEXT',
    'HEADER_PROCESS_CONTEXT_VARIANT',
    'HEADER_TMP',
    'HEADER_REQUEST_CONTEXT',
    'HEADER_AUTHORIZATION',
    'TEXT_PLAIN_UTF8',
    'OCTET_STREAM',
]
