"""
Log uploader client.

Entry point for uploading logs to the log ingestion service:

    >>> from loguploader import LogUploader, LogMetadata
    >>> uploader = LogUploader("https://logs.example.com", lambda: f"Bearer {token()}")
    >>> uploader.upload_file("build.log", LogMetadata(end_time, "build", "build-42"))

Every upload call is self-contained: it computes the checksum, opens its own
HTTP session, retries connectivity failures with linear backoff and closes
the session whatever the outcome. Calls may run concurrently from several
threads; they share only the immutable configuration.
"""
import asyncio
from pathlib import Path
from typing import Optional, Union

from .core.api import (
    AsyncRequestHandler,
    LinearBackoffStrategy,
    RequestBuilder,
    RequestHandler,
    RetryStrategy,
    SessionFactory,
    UploaderConfig,
)
from .core.crypto import compute_md5
from .core.exceptions import ChecksumComputationError
from .core.logging import get_logger
from .core.upload import (
    CredentialSupplier,
    FilePayload,
    LogMetadata,
    LogPayload,
    TextPayload,
    UploadResult,
)

logger = get_logger('loguploader.upload')


class _BaseUploader:
    """Shared configuration and request assembly for both clients."""
    
    def __init__(
        self,
        base_url: Union[str, UploaderConfig],
        auth_supplier: CredentialSupplier,
        max_retries: int = 5,
        delay_seconds: float = 10.0,
        retry_strategy: Optional[RetryStrategy] = None
    ):
        """
        Initialize uploader.
        
        Args:
            base_url: Base URL of the log ingestion service, or a full config
            auth_supplier: Returns the Authorization header value; called
                once per attempt
            max_retries: Retries after the first attempt (ignored with a config)
            delay_seconds: Backoff unit; waits are 1x, 2x, 3x ... this value
                (ignored with a config)
            retry_strategy: Custom retry strategy
        """
        if isinstance(base_url, UploaderConfig):
            self.config = base_url
        else:
            self.config = UploaderConfig.create(base_url, max_retries, delay_seconds)
        self._auth_supplier = auth_supplier
        self._retry_strategy = retry_strategy or LinearBackoffStrategy(self.config.delay_seconds)
        self._builder = RequestBuilder(
            self.config.upload_url,
            self._auth_supplier,
            compression_level=self.config.compression_level,
            chunk_size=self.config.chunk_size
        )
    
    @property
    def upload_url(self) -> str:
        return self.config.upload_url
    
    @property
    def builder(self) -> RequestBuilder:
        return self._builder
    
    def compute_checksum(self, payload: LogPayload) -> str:
        """
        Read the payload once and return its MD5 hex digest.
        
        Raises:
            ChecksumComputationError: Payload could not be read
        """
        try:
            return compute_md5(payload.open(), self.config.chunk_size)
        except OSError as e:
            logger.error(f"Could not compute checksum: {e}")
            raise ChecksumComputationError("Could not compute file checksums.") from e
    
    def _metadata(self, metadata: LogMetadata) -> LogMetadata:
        if not self.config.extra_headers:
            return metadata
        headers = {**self.config.extra_headers, **metadata.headers}
        return LogMetadata(metadata.end_time, metadata.logger_name, metadata.tag, headers)


class LogUploader(_BaseUploader):
    """Blocking log uploader built on requests."""
    
    def upload_file(
        self,
        logfile: Union[str, Path],
        metadata: LogMetadata,
        md5sum: Optional[str] = None
    ) -> UploadResult:
        """
        Upload a log file.
        
        The file is read once to compute its checksum unless ``md5sum``
        is given, then streamed again as the request body.
        """
        return self.upload(FilePayload(Path(logfile)), metadata, md5sum)
    
    def upload_string(
        self,
        log: str,
        metadata: LogMetadata,
        md5sum: Optional[str] = None
    ) -> UploadResult:
        """Upload a log held in memory, as UTF-8 text."""
        return self.upload(TextPayload(log), metadata, md5sum)
    
    def upload(
        self,
        payload: LogPayload,
        metadata: LogMetadata,
        md5sum: Optional[str] = None
    ) -> UploadResult:
        """
        Upload a payload.
        
        Raises:
            ChecksumComputationError: Payload unreadable
            TransportExhaustedError: Connectivity failed on every attempt
            ServerRejectionError: Server answered with a non-200 status
            ResponseDecodingError: Response could not be read
        """
        if md5sum is None:
            md5sum = self.compute_checksum(payload)
        metadata = self._metadata(metadata)
        body = self._builder.build_body(metadata, payload, md5sum)
        
        logger.info(
            f"Uploading log {metadata.logger_name}/{metadata.tag} "
            f"(md5 {md5sum}) to {self.upload_url}"
        )
        with SessionFactory.create_sync_session(
            self.config.user_agent, self.config.verify_ssl
        ) as session:
            handler = RequestHandler(
                session,
                self._retry_strategy,
                self.config.max_retries,
                timeout=self.config.timeout.to_requests_timeout(),
                logger=logger
            )
            status_code, attempts = handler.execute(self._builder, metadata, body)
        
        logger.info(f"Log {metadata.logger_name}/{metadata.tag} uploaded after {attempts} attempt(s)")
        return UploadResult(
            url=self.upload_url,
            md5sum=md5sum,
            status_code=status_code,
            attempts=attempts
        )


class AsyncLogUploader(_BaseUploader):
    """asyncio log uploader built on aiohttp."""
    
    async def upload_file(
        self,
        logfile: Union[str, Path],
        metadata: LogMetadata,
        md5sum: Optional[str] = None
    ) -> UploadResult:
        """Upload a log file."""
        return await self.upload(FilePayload(Path(logfile)), metadata, md5sum)
    
    async def upload_string(
        self,
        log: str,
        metadata: LogMetadata,
        md5sum: Optional[str] = None
    ) -> UploadResult:
        """Upload a log held in memory, as UTF-8 text."""
        return await self.upload(TextPayload(log), metadata, md5sum)
    
    async def upload(
        self,
        payload: LogPayload,
        metadata: LogMetadata,
        md5sum: Optional[str] = None
    ) -> UploadResult:
        """Upload a payload. Raises the same errors as LogUploader.upload."""
        if md5sum is None:
            md5sum = await self.compute_checksum_async(payload)
        metadata = self._metadata(metadata)
        body = self._builder.build_body(metadata, payload, md5sum)
        
        logger.info(
            f"Uploading log {metadata.logger_name}/{metadata.tag} "
            f"(md5 {md5sum}) to {self.upload_url}"
        )
        session = await SessionFactory.create_async_session(
            self.config.user_agent,
            self.config.timeout.to_aiohttp_timeout(),
            self.config.verify_ssl
        )
        async with session:
            handler = AsyncRequestHandler(
                session,
                self._retry_strategy,
                self.config.max_retries,
                logger=logger
            )
            status_code, attempts = await handler.execute(self._builder, metadata, body)
        
        logger.info(f"Log {metadata.logger_name}/{metadata.tag} uploaded after {attempts} attempt(s)")
        return UploadResult(
            url=self.upload_url,
            md5sum=md5sum,
            status_code=status_code,
            attempts=attempts
        )
    
    async def compute_checksum_async(self, payload: LogPayload) -> str:
        """Checksum computation on a worker thread, keeping the event loop free."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.compute_checksum, payload)
