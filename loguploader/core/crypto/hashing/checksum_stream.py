"""Streaming MD5 computation over a binary source."""
from typing import BinaryIO, Optional

from Crypto.Hash import MD5

from ...exceptions import ChecksumNotReadyError
from ...logging import get_logger

logger = get_logger('loguploader.checksum')

DEFAULT_CHUNK_SIZE = 64 * 1024


class ChecksumStream:
    """
    Wraps a binary source and hashes every byte read through it.
    
    The digest is only available once the source reported end-of-input
    (a read returned no data). Asking earlier raises ChecksumNotReadyError
    instead of returning a digest over partial content.
    
    The wrapped source is closed exactly once, by close() or on leaving
    the ``with`` block.
    
    Example:
        >>> with ChecksumStream(open("build.log", "rb")) as stream:
        ...     stream.drain()
        ...     md5sum = stream.hexdigest()
    """
    
    def __init__(self, source: BinaryIO):
        """
        Initialize checksum stream.
        
        Args:
            source: Readable binary file-like object
        """
        self._source = source
        self._md5 = MD5.new()
        self._bytes_read = 0
        self._exhausted = False
        self._closed = False
    
    @property
    def bytes_read(self) -> int:
        """Returns number of bytes consumed so far."""
        return self._bytes_read
    
    @property
    def exhausted(self) -> bool:
        """Returns True once the source reported end-of-input."""
        return self._exhausted
    
    @property
    def closed(self) -> bool:
        return self._closed
    
    def read(self, size: int = -1) -> bytes:
        """
        Read the next chunk, feeding it into the digest.
        
        Args:
            size: Maximum number of bytes, negative reads everything left
            
        Returns:
            Data read; empty bytes at end-of-input
        """
        if self._closed:
            raise ValueError("read from closed ChecksumStream")
        if size == 0:
            return b''

        data = self._source.read(size)
        if data:
            self._md5.update(data)
            self._bytes_read += len(data)
        
        if not data or size is None or size < 0:
            # A read-all call hits end-of-input by definition
            self._exhausted = True
        
        return data
    
    def drain(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
        """
        Read the source to its end.
        
        Returns:
            Total bytes consumed
        """
        while self.read(chunk_size):
            pass
        return self._bytes_read
    
    def digest(self) -> bytes:
        """Returns the 16-byte MD5 digest of everything read."""
        self._ensure_exhausted()
        return self._md5.digest()
    
    def hexdigest(self) -> str:
        """Returns the MD5 digest as 32 lowercase hex characters."""
        self._ensure_exhausted()
        return self._md5.hexdigest()
    
    def _ensure_exhausted(self) -> None:
        if not self._exhausted:
            raise ChecksumNotReadyError(
                f"Checksum requested after {self._bytes_read} bytes, "
                "before the source was fully consumed"
            )
    
    def close(self) -> None:
        """Close the wrapped source. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._source.close()
    
    def __enter__(self) -> 'ChecksumStream':
        return self
    
    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def compute_md5(source: BinaryIO, chunk_size: Optional[int] = None) -> str:
    """
    Consume a source completely and return its MD5 hex digest.
    
    The source is closed afterwards, also when reading fails.
    """
    with ChecksumStream(source) as stream:
        total = stream.drain(chunk_size or DEFAULT_CHUNK_SIZE)
        md5sum = stream.hexdigest()
    logger.debug(f"Computed md5 {md5sum} over {total} bytes")
    return md5sum
