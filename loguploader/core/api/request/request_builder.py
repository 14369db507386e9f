"""Request builder for log uploads."""
from typing import List, Optional, Tuple

from ...upload.models import (
    HEADER_AUTHORIZATION,
    LogMetadata,
    LogPayload,
    UploadRequest,
)
from ...upload.multipart import GzipMultipartBody
from ...upload.protocols import CredentialSupplier
from ...crypto.hashing import DEFAULT_CHUNK_SIZE

PAYLOAD_FIELD = 'logfile'


class RequestBuilder:
    """
    Builds upload requests.
    
    The body is built once per upload call. Headers, and with them the
    Authorization value, are built again for every attempt.
    """
    
    def __init__(
        self,
        upload_url: str,
        auth_supplier: CredentialSupplier,
        compression_level: int = 6,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ):
        """Initializes request builder."""
        self.upload_url = upload_url
        self.auth_supplier = auth_supplier
        self.compression_level = compression_level
        self.chunk_size = chunk_size
    
    @staticmethod
    def build_fields(metadata: LogMetadata, md5sum: str) -> List[Tuple[str, str]]:
        """Builds the text parts, in wire order."""
        return [
            ('md5sum', md5sum),
            ('endTime', metadata.end_time_text),
            ('loggerName', metadata.logger_name),
            ('tag', metadata.tag),
        ]
    
    def build_body(
        self,
        metadata: LogMetadata,
        payload: LogPayload,
        md5sum: str,
        boundary: Optional[str] = None
    ) -> GzipMultipartBody:
        """Builds the compressed multipart body."""
        return GzipMultipartBody(
            self.build_fields(metadata, md5sum),
            PAYLOAD_FIELD,
            payload,
            boundary=boundary,
            compression_level=self.compression_level,
            chunk_size=self.chunk_size
        )
    
    def build_headers(self, metadata: LogMetadata, body: GzipMultipartBody) -> List[Tuple[str, str]]:
        """Builds request headers, fetching the Authorization value now."""
        headers = [
            ('Content-Type', body.content_type),
            ('Content-Encoding', body.content_encoding),
        ]
        headers.extend(metadata.headers.items())
        headers.append((HEADER_AUTHORIZATION, self.auth_supplier()))
        return headers
    
    def build(self, metadata: LogMetadata, body: GzipMultipartBody) -> UploadRequest:
        """Builds a fresh request around an existing body."""
        return UploadRequest(
            url=self.upload_url,
            body=body,
            headers=tuple(self.build_headers(metadata, body))
        )
