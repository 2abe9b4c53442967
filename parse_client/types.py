"""
Parse Client Type Definitions

Configuration, credential values, the error envelope and the classified
outcome of a dispatched call.
"""

import enum
import json
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Union

import httpx


# Every endpoint is appended to this address.
BASE_URL = "https://api.parse.com/1"

APPLICATION_ID_HEADER = "X-Parse-Application-Id"
REST_API_KEY_HEADER = "X-Parse-REST-API-Key"
MASTER_KEY_HEADER = "X-Parse-Master-Key"
SESSION_TOKEN_HEADER = "X-Parse-Session-Token"

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class Credentials:
    """
    Authentication state sent with every request.

    Immutable; a change produces a new value so a request in flight always
    sees one consistent set of keys.
    """

    application_id: str
    api_key: str
    # Elevated key, empty string means unset
    master_key: str = ""
    # End-user session, empty string means unset
    session_token: str = ""

    def with_master_key(self, master_key: str) -> "Credentials":
        return replace(self, master_key=master_key)

    def with_session_token(self, session_token: str) -> "Credentials":
        return replace(self, session_token=session_token)

    def headers(self) -> Dict[str, str]:
        """Authentication headers for one request."""
        headers = {APPLICATION_ID_HEADER: self.application_id}
        if self.master_key:
            headers[MASTER_KEY_HEADER] = self.master_key
        else:
            headers[REST_API_KEY_HEADER] = self.api_key
        if self.session_token:
            headers[SESSION_TOKEN_HEADER] = self.session_token
        return headers


@dataclass
class ParseConfig:
    """Client configuration options."""

    # Public application identifier
    application_id: str
    # REST API key
    api_key: str
    # Optional master key, takes precedence over api_key when set
    master_key: str = ""
    # Optional session token of an authenticated user
    session_token: str = ""
    # Request timeout in seconds (default: 30)
    timeout: float = 30.0
    # Enable debug logging (default: False)
    debug: bool = False

    def to_credentials(self) -> Credentials:
        return Credentials(
            application_id=self.application_id,
            api_key=self.api_key,
            master_key=self.master_key,
            session_token=self.session_token,
        )


@dataclass(frozen=True)
class ApplicationErrorEnvelope:
    """Error body returned by the API with status 400."""

    code: Union[int, str]
    message: str

    @classmethod
    def from_dict(cls, data: Any) -> Optional["ApplicationErrorEnvelope"]:
        """Create from a decoded body, or None if it has the wrong shape."""
        if not isinstance(data, dict):
            return None
        code = data.get("code")
        message = data.get("error")
        if isinstance(code, bool) or not isinstance(code, (int, str)):
            return None
        if not isinstance(message, str):
            return None
        return cls(code=code, message=message)

    @classmethod
    def from_body(cls, body: bytes) -> Optional["ApplicationErrorEnvelope"]:
        """Parse a raw response body."""
        try:
            data = json.loads(body)
        except ValueError:
            return None
        return cls.from_dict(data)


class OutcomeKind(enum.Enum):
    SUCCESS = "success"
    APPLICATION_ERROR = "application_error"
    UNKNOWN_ERROR = "unknown_error"
    UNAUTHORIZED = "unauthorized"
    UNEXPECTED_STATUS = "unexpected_status"


@dataclass(frozen=True)
class Outcome:
    """
    Classified result of one response.

    ``response`` is set when the body is still open (success, unauthorized,
    unexpected status). ``error`` is set for every kind but success.
    """

    kind: OutcomeKind
    response: Optional[httpx.Response] = None
    error: Optional[Exception] = None

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def unwrap(self) -> httpx.Response:
        """Return the response on success, raise the error otherwise."""
        if self.error is not None:
            raise self.error
        if self.response is None:
            raise ValueError(f"{self.kind.value} outcome has neither a response nor an error")
        return self.response
