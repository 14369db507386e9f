"""Request handling: building, sending and interpreting uploads."""
from .request_builder import RequestBuilder, PAYLOAD_FIELD
from .request_handler import RequestHandler
from .response_handler import ResponseHandler, AsyncResponseHandler

__all__ = [
    'RequestHandler',
    'RequestBuilder',
    'ResponseHandler',
    'AsyncResponseHandler',
    'PAYLOAD_FIELD',
]
