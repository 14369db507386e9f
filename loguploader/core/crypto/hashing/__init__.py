"""
Hashing utilities.
"""
from .checksum_stream import ChecksumStream, compute_md5, DEFAULT_CHUNK_SIZE

__all__ = [
    'ChecksumStream',
    'compute_md5',
    'DEFAULT_CHUNK_SIZE',
]
