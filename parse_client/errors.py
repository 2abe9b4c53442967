"""
Parse Client Error Classes

Every failure raised by the client derives from ParseError. Callers branch on
the concrete class to learn whether a response body is still open and must
be closed.
"""

from typing import Any, Dict, Optional, Union

import httpx


class ParseError(Exception):
    """Base error class for the Parse client."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "name": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r})"


class ConfigurationError(ParseError):
    """Configuration error."""


class ConstructionError(ParseError):
    """Invalid method or address handed to request building."""


class AddressResolutionError(ParseError):
    """Endpoint could not be resolved against the base address."""

    def __init__(self, endpoint: str, reason: str):
        super().__init__(
            f"cannot resolve endpoint {endpoint!r}: {reason}",
            {"endpoint": endpoint},
        )
        self.endpoint = endpoint


class TransportError(ParseError):
    """Network-level failure (connection refused, timeout, DNS, TLS)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            message,
            {"cause": type(cause).__name__} if cause is not None else None,
        )
        self.cause = cause


class ApplicationError(ParseError):
    """Error reported by the API in a 400 error envelope."""

    def __init__(self, code: Union[int, str], message: str):
        super().__init__(message, {"code": code})
        self.code = code

    def __str__(self) -> str:
        return f"parse error {self.code}: {self.message}"

    def __repr__(self) -> str:
        return f"ApplicationError(code={self.code!r}, message={self.message!r})"


class UnknownError(ParseError):
    """400 response whose body was not a recognizable error envelope."""

    def __init__(self, message: str = "unknown parse error"):
        super().__init__(message)


class ResponseError(ParseError):
    """
    Error that hands the unconsumed response back to the caller.

    The body has not been read; the caller owns the response and must
    close it.
    """

    def __init__(self, message: str, response: httpx.Response):
        super().__init__(message, {"status_code": response.status_code})
        self.response = response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    def close(self) -> None:
        """Close the attached response."""
        self.response.close()


class AuthError(ResponseError):
    """401 Unauthorized."""

    def __init__(self, response: httpx.Response):
        super().__init__("unauthorized", response)


class UnexpectedStatusError(ResponseError):
    """Any status the client has no classification for."""

    def __init__(self, status: int, response: httpx.Response):
        super().__init__(f"got unexpected status code {status}", response)
        self.status = status

    def __repr__(self) -> str:
        return f"UnexpectedStatusError(status={self.status!r})"


def is_parse_error(error: Any) -> bool:
    """Check if error is a ParseError."""
    return isinstance(error, ParseError)


def has_open_response(error: Any) -> bool:
    """Check if error carries a response body the caller must close."""
    return isinstance(error, ResponseError)
