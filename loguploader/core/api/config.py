"""
Uploader configuration module.

Provides the configuration surface of the log uploader: endpoint, retry
bound, backoff unit and transport timeouts.
"""
from dataclasses import dataclass, field
from typing import Dict, Tuple
from urllib.parse import urljoin

UPLOAD_PATH = '/final-log/upload'


@dataclass(frozen=True)
class TimeoutConfig:
    """
    Per-attempt transport timeouts in seconds.
    
    There is no deadline across all attempts of one upload; the retry
    bound is what eventually terminates a call.
    """
    connect: float = 30.0  # Connection timeout
    read: float = 300.0  # Socket read timeout
    
    def to_requests_timeout(self) -> Tuple[float, float]:
        """Convert to the (connect, read) tuple used by requests."""
        return (self.connect, self.read)
    
    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=None,
            sock_connect=self.connect,
            sock_read=self.read
        )


@dataclass(frozen=True)
class RetryConfig:
    """
    Retry configuration.
    
    Retry n (1-indexed) waits n * delay_seconds, e.g. 10, 20, 30, ...
    """
    max_retries: int = 5
    delay_seconds: float = 10.0
    
    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {self.delay_seconds}")


@dataclass(frozen=True)
class UploaderConfig:
    """
    Complete uploader configuration.
    
    Shared read-only by all upload calls made through one uploader.
    """
    base_url: str
    retry: RetryConfig = field(default_factory=RetryConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    
    user_agent: str = 'loguploader/1.0.0'
    verify_ssl: bool = True
    
    # Streaming settings
    chunk_size: int = 64 * 1024
    compression_level: int = 6
    
    # Sent with every request, before caller headers
    extra_headers: Dict[str, str] = field(default_factory=dict)
    
    @property
    def upload_url(self) -> str:
        """Absolute upload endpoint, resolved against the base URL."""
        return urljoin(self.base_url, UPLOAD_PATH)
    
    @property
    def max_retries(self) -> int:
        return self.retry.max_retries
    
    @property
    def delay_seconds(self) -> float:
        return self.retry.delay_seconds
    
    @classmethod
    def create(
        cls,
        base_url: str,
        max_retries: int = 5,
        delay_seconds: float = 10.0,
        **kwargs
    ) -> 'UploaderConfig':
        """Create configuration from the plain retry parameters."""
        return cls(
            base_url=base_url,
            retry=RetryConfig(max_retries=max_retries, delay_seconds=delay_seconds),
            **kwargs
        )
