"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures.
"""
import io
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, AsyncIterator, BinaryIO, Dict, Iterator, Optional, Tuple, Union

import aiofiles

if TYPE_CHECKING:
    from ..multipart import GzipMultipartBody

# Conventional headers understood by the log ingestion service
HEADER_PROCESS_CONTEXT = 'log-process-context'
HEADER_PROCESS_CONTEXT_VARIANT = 'process-context-variant'
HEADER_TMP = 'log-tmp'
HEADER_REQUEST_CONTEXT = 'log-request-context'
HEADER_AUTHORIZATION = 'Authorization'

TEXT_PLAIN_UTF8 = 'text/plain; charset=UTF-8'
OCTET_STREAM = 'application/octet-stream'


def format_end_time(end_time: Union[datetime, str]) -> str:
    """
    Render an end time as ISO-8601 in UTC with a 'Z' suffix.
    
    Naive datetimes are taken to be UTC. Strings are sent as given.
    
    Example:
        >>> format_end_time(datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc))
        '2024-05-01T12:30:00Z'
    """
    if isinstance(end_time, str):
        return end_time
    if end_time.tzinfo is None:
        end_time = end_time.replace(tzinfo=timezone.utc)
    utc = end_time.astimezone(timezone.utc)
    return utc.replace(tzinfo=None).isoformat() + 'Z'


@dataclass(frozen=True)
class LogMetadata:
    """
    Metadata sent alongside an uploaded log.
    
    Attributes:
        end_time: When the logged process finished
        logger_name: Name of the logger that produced the log
        tag: Free-form tag, e.g. a build identifier
        headers: Extra request headers, sent verbatim and in order
    """
    end_time: Union[datetime, str]
    logger_name: str
    tag: str
    headers: Dict[str, str] = field(default_factory=dict)
    
    def __post_init__(self):
        if self.end_time is None:
            raise ValueError("end_time is required")
        if not isinstance(self.logger_name, str):
            raise ValueError(f"logger_name must be a string, got {self.logger_name!r}")
        if not isinstance(self.tag, str):
            raise ValueError(f"tag must be a string, got {self.tag!r}")
        # Own copy so later changes to the caller's dict do not leak in
        object.__setattr__(self, 'headers', dict(self.headers))
    
    @property
    def end_time_text(self) -> str:
        return format_end_time(self.end_time)
    
    @classmethod
    def create(
        cls,
        end_time: Union[datetime, str],
        logger_name: str,
        tag: str,
        process_context: Optional[str] = None,
        process_context_variant: Optional[str] = None,
        tmp: Optional[bool] = None,
        request_context: Optional[str] = None,
        extra_headers: Optional[Dict[str, str]] = None
    ) -> 'LogMetadata':
        """Create metadata filling in the conventional context headers."""
        headers: Dict[str, str] = {}
        if process_context is not None:
            headers[HEADER_PROCESS_CONTEXT] = process_context
        if process_context_variant is not None:
            headers[HEADER_PROCESS_CONTEXT_VARIANT] = process_context_variant
        if tmp is not None:
            headers[HEADER_TMP] = 'true' if tmp else 'false'
        if request_context is not None:
            headers[HEADER_REQUEST_CONTEXT] = request_context
        if extra_headers:
            headers.update(extra_headers)
        return cls(end_time=end_time, logger_name=logger_name, tag=tag, headers=headers)


@dataclass(frozen=True)
class FilePayload:
    """Log stored in a file, sent as a file attachment."""
    path: Path
    content_type: str = OCTET_STREAM
    
    def __post_init__(self):
        if isinstance(self.path, str):
            object.__setattr__(self, 'path', Path(self.path))
    
    @property
    def filename(self) -> Optional[str]:
        return self.path.name
    
    def open(self) -> BinaryIO:
        return open(self.path, 'rb')
    
    def iter_bytes(self, chunk_size: int) -> Iterator[bytes]:
        with self.open() as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                yield chunk
    
    async def aiter_bytes(self, chunk_size: int) -> AsyncIterator[bytes]:
        async with aiofiles.open(self.path, 'rb') as f:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                yield chunk


@dataclass(frozen=True)
class TextPayload:
    """Log held in memory, sent inline as UTF-8 text."""
    text: str
    content_type: str = TEXT_PLAIN_UTF8
    
    @property
    def filename(self) -> Optional[str]:
        return None
    
    @property
    def data(self) -> bytes:
        return self.text.encode('utf-8')
    
    def open(self) -> BinaryIO:
        return io.BytesIO(self.data)
    
    def iter_bytes(self, chunk_size: int) -> Iterator[bytes]:
        data = self.data
        for start in range(0, len(data), chunk_size):
            yield data[start:start + chunk_size]
    
    async def aiter_bytes(self, chunk_size: int) -> AsyncIterator[bytes]:
        for chunk in self.iter_bytes(chunk_size):
            yield chunk


LogPayload = Union[FilePayload, TextPayload]


@dataclass(frozen=True)
class UploadRequest:
    """
    One fully assembled upload request.
    
    Attributes:
        url: Absolute upload endpoint
        body: Compressed multipart body (re-iterable)
        headers: Header pairs in send order
    """
    url: str
    body: 'GzipMultipartBody'
    headers: Tuple[Tuple[str, str], ...]
    
    @property
    def header_dict(self) -> Dict[str, str]:
        """Headers as an ordered dict for HTTP client libraries."""
        return dict(self.headers)


@dataclass(frozen=True)
class UploadResult:
    """
    Result of a successful upload.
    
    Attributes:
        url: Endpoint the log was posted to
        md5sum: Checksum sent with the log
        status_code: HTTP status of the final response
        attempts: Number of attempts needed (1 = no retries)
    """
    url: str
    md5sum: str
    status_code: int = 200
    attempts: int = 1

