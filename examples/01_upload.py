"""
Upload a build log
"""
import logging
import os
from datetime import datetime, timezone

from loguploader import LogUploader, LogMetadata, LogUploadError, setup_logging


def get_token() -> str:
    # Called before every attempt, so a refreshed token is picked up
    return f"Bearer {os.environ['LOG_TOKEN']}"


def main():
    logging.basicConfig()
    setup_logging(logging.DEBUG)
    
    uploader = LogUploader(
        "https://logs.example.com",
        get_token,
        max_retries=3,
        delay_seconds=10,  # waits 10s, 20s, 30s
    )
    
    metadata = LogMetadata.create(
        end_time=datetime.now(timezone.utc),
        logger_name="org.example.build",
        tag="build-1234",
        process_context="1234",
        tmp=False,
    )
    
    # Upload a file
    try:
        result = uploader.upload_file("build.log", metadata)
        print(f"Uploaded with md5 {result.md5sum} after {result.attempts} attempt(s)")
    except LogUploadError as e:
        print(f"Upload failed ({e.kind.value}): {e}")
    
    # Upload a string
    uploader.upload_string("Build finished\n", metadata)


if __name__ == "__main__":
    main()
