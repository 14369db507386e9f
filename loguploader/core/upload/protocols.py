"""
Protocol definitions for upload module.

Defines the interfaces the upload pipeline depends on.
"""
from typing import Protocol


class CredentialSupplier(Protocol):
    """
    Produces the current Authorization header value.
    
    Called once per attempt, right before the request is sent, so that
    short-lived tokens are fetched as late as possible. Thread safety is
    the supplier's own concern.
    """
    
    def __call__(self) -> str:
        ...


class LoggerProtocol(Protocol):
    """Protocol for logger objects."""
    
    def debug(self, msg: str) -> None: ...
    def info(self, msg: str) -> None: ...
    def warning(self, msg: str) -> None: ...
    def error(self, msg: str) -> None: ...
