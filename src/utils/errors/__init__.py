"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    CSRFOperationCancelledError,
    DecodeError,
    InvalidRequestParametersError,
    SessionError,
    TokenFetchError,
    TransportError,
)

__all__ = [
    "CSRFOperationCancelledError",
    "DecodeError",
    "InvalidRequestParametersError",
    "SessionError",
    "TokenFetchError",
    "TransportError",
]
