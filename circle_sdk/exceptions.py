"""
Exceptions for the Circle SDK.
"""
from typing import List, Optional


class CircleError(Exception):
    """Base exception for all Circle SDK errors."""
    pass


class ConfigError(CircleError):
    """Raised when a configuration value is missing or invalid."""
    pass


class DecodeError(CircleError):
    """Raised when hex, base64 or base58 input is malformed."""
    pass


class KeyParseError(DecodeError):
    """
    Raised when a public key cannot be parsed under any supported encoding.

    Every underlying parse failure is kept in ``errors`` so callers can tell
    "wrong encoding tried" apart from "not a key at all".
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = list(errors or [])
        super().__init__(message)


class EncryptionError(CircleError):
    """Raised when the entity secret cannot be encrypted."""
    pass


class TransportError(CircleError):
    """Raised when the HTTP request fails at the network level."""
    pass


class DecodeResponseError(CircleError):
    """Raised when a response body does not match the expected JSON shape."""

    def __init__(self, message: str, body: Optional[str] = None):
        self.body = body
        super().__init__(message)


class ApiError(CircleError):
    """Raised when the Circle API returns a non-success status."""

    def __init__(self, status: int, message: str, code: Optional[int] = None):
        self.status = status
        self.message = message
        self.code = code
        super().__init__(f"API error: {status} - {message}")

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500


class IdentifierError(CircleError, ValueError):
    """Raised when an idempotency key or other UUID value is malformed."""
    pass
