"""
Gzip-compressed multipart/form-data body.

The body is produced as a stream: text fields first, then the log payload
read chunk by chunk from its source, all fed through one gzip compressor.
Each iteration starts over from the payload source, so the same body can
be sent again on a retry.
"""
import zlib
from typing import AsyncIterator, Iterator, Optional, Sequence, Tuple

from urllib3.fields import RequestField
from urllib3.filepost import choose_boundary

from .models import LogPayload, TEXT_PLAIN_UTF8
from ..exceptions import PayloadReadError
from ..crypto.hashing import DEFAULT_CHUNK_SIZE

CRLF = b'\r\n'


class GzipMultipartBody:
    """
    Re-iterable, gzip-compressed multipart body.
    
    Two bodies built from the same fields, payload and boundary produce
    byte-identical output (the gzip header carries no timestamp).
    """
    
    content_encoding = 'gzip'
    
    def __init__(
        self,
        fields: Sequence[Tuple[str, str]],
        payload_field: str,
        payload: LogPayload,
        boundary: Optional[str] = None,
        compression_level: int = 6,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ):
        """
        Initialize body.
        
        Args:
            fields: Ordered (name, value) text parts
            payload_field: Part name for the payload
            payload: Log payload (file or text)
            boundary: Multipart boundary, random if omitted
            compression_level: zlib compression level (0-9)
            chunk_size: Read size for the payload source
        """
        self._fields = tuple(fields)
        self._payload_field = payload_field
        self._payload = payload
        self._boundary = boundary or choose_boundary()
        self._compression_level = compression_level
        self._chunk_size = chunk_size
    
    @property
    def boundary(self) -> str:
        return self._boundary
    
    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self._boundary}"
    
    @property
    def part_names(self) -> Tuple[str, ...]:
        """Names of all parts in wire order."""
        return tuple(name for name, _ in self._fields) + (self._payload_field,)
    
    @property
    def payload(self) -> LogPayload:
        return self._payload
    
    def _part_header(self, name: str, content_type: str, filename: Optional[str] = None) -> bytes:
        field = RequestField(name=name, data=b'', filename=filename)
        field.make_multipart(content_type=content_type)
        return b'--' + self._boundary.encode('ascii') + CRLF + field.render_headers().encode('utf-8')
    
    def _preamble(self) -> bytes:
        """Framing up to and including the payload part header."""
        parts = []
        for name, value in self._fields:
            parts.append(self._part_header(name, TEXT_PLAIN_UTF8))
            parts.append(value.encode('utf-8'))
            parts.append(CRLF)
        parts.append(self._part_header(
            self._payload_field,
            self._payload.content_type,
            self._payload.filename
        ))
        return b''.join(parts)
    
    def _epilogue(self) -> bytes:
        return CRLF + b'--' + self._boundary.encode('ascii') + b'--' + CRLF
    
    def _compressor(self):
        # wbits 16+ selects the gzip container
        return zlib.compressobj(self._compression_level, zlib.DEFLATED, 16 + zlib.MAX_WBITS)
    
    def _read_payload(self) -> Iterator[bytes]:
        try:
            yield from self._payload.iter_bytes(self._chunk_size)
        except OSError as e:
            raise PayloadReadError(f"Could not read log payload: {e}") from e

    async def _aread_payload(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._payload.aiter_bytes(self._chunk_size):
                yield chunk
        except OSError as e:
            raise PayloadReadError(f"Could not read log payload: {e}") from e

    def chunks(self) -> Iterator[bytes]:
        """Yield the compressed body, reading the payload as it goes."""
        compressor = self._compressor()
        out = compressor.compress(self._preamble())
        if out:
            yield out
        for chunk in self._read_payload():
            out = compressor.compress(chunk)
            if out:
                yield out
        out = compressor.compress(self._epilogue())
        if out:
            yield out
        yield compressor.flush()
    
    async def achunks(self) -> AsyncIterator[bytes]:
        """Async twin of chunks(); file payloads are read with aiofiles."""
        compressor = self._compressor()
        out = compressor.compress(self._preamble())
        if out:
            yield out
        async for chunk in self._aread_payload():
            out = compressor.compress(chunk)
            if out:
                yield out
        out = compressor.compress(self._epilogue())
        if out:
            yield out
        yield compressor.flush()
    
    def __iter__(self) -> Iterator[bytes]:
        return self.chunks()
    
    def to_bytes(self) -> bytes:
        """Materialize the whole compressed body."""
        return b''.join(self.chunks())
