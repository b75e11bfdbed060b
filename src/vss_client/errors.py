from __future__ import annotations

from typing import Optional


class VssError(RuntimeError):
    """Base error for the VSS client."""


class UrlParseError(VssError):
    """Base URL plus endpoint path does not form a valid request URL."""


class TransportError(VssError):
    """Network failure or non-success HTTP status from the transport."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(VssError):
    """Failure raised by the delegated auth client."""


class ResponseParseError(VssError):
    """Response body is not JSON or does not match the expected shape."""


class DecryptionError(VssError):
    """Ciphertext failed authentication under the held key."""


class EncodingError(VssError):
    """Decrypted bytes are not valid UTF-8 text or not valid JSON."""


__all__ = [
    "VssError",
    "UrlParseError",
    "TransportError",
    "AuthError",
    "ResponseParseError",
    "DecryptionError",
    "EncodingError",
]
