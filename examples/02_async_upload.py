"""
Upload logs with asyncio
"""
import asyncio
from datetime import datetime, timezone

from loguploader import AsyncLogUploader, LogMetadata, UploaderConfig, TimeoutConfig, RetryConfig


async def main():
    config = UploaderConfig(
        "https://logs.example.com",
        retry=RetryConfig(max_retries=5, delay_seconds=2),
        timeout=TimeoutConfig(connect=10, read=120),
    )
    uploader = AsyncLogUploader(config, lambda: "Bearer abc")
    
    end_time = datetime.now(timezone.utc)
    
    # Independent uploads may run side by side
    results = await asyncio.gather(
        uploader.upload_file("alignment.log", LogMetadata(end_time, "alignment", "build-1")),
        uploader.upload_file("build.log", LogMetadata(end_time, "build", "build-1")),
    )
    for result in results:
        print(f"{result.md5sum}: {result.attempts} attempt(s)")


if __name__ == "__main__":
    asyncio.run(main())
