"""Response handlers for upload responses."""
import asyncio
from email.message import Message
from typing import Mapping, Optional

import aiohttp
import requests

from ...exceptions import ResponseDecodingError, ServerRejectionError
from ...logging import get_logger

logger = get_logger('loguploader.response')

SUCCESS_STATUS = 200
DEFAULT_CHARSET = 'utf-8'


def _decode(body: bytes, charset: Optional[str], status_code: int) -> str:
    try:
        return body.decode(charset or DEFAULT_CHARSET)
    except (UnicodeDecodeError, LookupError) as e:
        raise ResponseDecodingError(
            f"Failed to upload log, status {status_code}: response body is not valid {charset or DEFAULT_CHARSET} text",
            status_code=status_code
        ) from e


def _charset_from_headers(headers: Mapping[str, str]) -> Optional[str]:
    """Charset parameter of the Content-Type header, None when absent."""
    content_type = headers.get('Content-Type')
    if not content_type:
        return None
    message = Message()
    message['Content-Type'] = content_type
    return message.get_content_charset()


class ResponseHandler:
    """
    Interprets upload responses from requests.
    
    Status 200 is success and the body is drained unread. Anything else
    is a final rejection carrying the server's message. Never retried.
    """
    
    @staticmethod
    def handle(response: requests.Response) -> int:
        """
        Classifies a response.
        
        Returns:
            The status code on success
            
        Raises:
            ServerRejectionError: Status other than 200
            ResponseDecodingError: Body could not be read or decoded
        """
        status_code = response.status_code
        try:
            if status_code == SUCCESS_STATUS:
                for _ in response.iter_content(chunk_size=8192):
                    pass
                return status_code
            body = response.content
        except requests.exceptions.RequestException as e:
            raise ResponseDecodingError(
                f"Failed to upload log, could not read response (status {status_code})",
                status_code=status_code
            ) from e
        
        # Header charset only; response.encoding is ISO-8859-1 for bare text/*
        message = _decode(body, _charset_from_headers(response.headers), status_code)
        logger.error(f"Upload rejected with status {status_code}: {message}")
        raise ServerRejectionError(status_code, message)


class AsyncResponseHandler:
    """Interprets upload responses from aiohttp."""
    
    @staticmethod
    async def handle(response: aiohttp.ClientResponse) -> int:
        """Async twin of ResponseHandler.handle."""
        status_code = response.status
        try:
            body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise ResponseDecodingError(
                f"Failed to upload log, could not read response (status {status_code})",
                status_code=status_code
            ) from e
        
        if status_code == SUCCESS_STATUS:
            return status_code
        
        message = _decode(body, response.charset, status_code)
        logger.error(f"Upload rejected with status {status_code}: {message}")
        raise ServerRejectionError(status_code, message)
