"""
Parse REST Client
parse-client

An authenticated HTTP client for the Parse REST API. Builds requests with
the application, REST API / master key and session token headers, sends
them over httpx and classifies responses into success or typed errors.
"""

from .client import Dispatcher, classify_response, create_dispatcher, resolve_endpoint
from .session import Session
from .types import (
    BASE_URL,
    APPLICATION_ID_HEADER,
    REST_API_KEY_HEADER,
    MASTER_KEY_HEADER,
    SESSION_TOKEN_HEADER,
    Credentials,
    ParseConfig,
    ApplicationErrorEnvelope,
    Outcome,
    OutcomeKind,
)
from .errors import (
    ParseError,
    ConfigurationError,
    ConstructionError,
    AddressResolutionError,
    TransportError,
    ApplicationError,
    UnknownError,
    ResponseError,
    AuthError,
    UnexpectedStatusError,
    is_parse_error,
    has_open_response,
)
from .tracing import TraceSink, NullSink, LoggerSink, StreamSink

__version__ = "0.1.0"
__all__ = [
    # Client
    "Dispatcher",
    "Session",
    "classify_response",
    "create_dispatcher",
    "resolve_endpoint",
    # Types
    "BASE_URL",
    "APPLICATION_ID_HEADER",
    "REST_API_KEY_HEADER",
    "MASTER_KEY_HEADER",
    "SESSION_TOKEN_HEADER",
    "Credentials",
    "ParseConfig",
    "ApplicationErrorEnvelope",
    "Outcome",
    "OutcomeKind",
    # Errors
    "ParseError",
    "ConfigurationError",
    "ConstructionError",
    "AddressResolutionError",
    "TransportError",
    "ApplicationError",
    "UnknownError",
    "ResponseError",
    "AuthError",
    "UnexpectedStatusError",
    "is_parse_error",
    "has_open_response",
    # Tracing
    "TraceSink",
    "NullSink",
    "LoggerSink",
    "StreamSink",
]
