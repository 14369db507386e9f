"""Crypto module: integrity checksums for uploaded payloads."""
from .hashing import ChecksumStream, compute_md5

__all__ = [
    'ChecksumStream',
    'compute_md5',
]
