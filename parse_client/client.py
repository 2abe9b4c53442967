"""
Parse Client Dispatcher

Resolves endpoints against the Parse API base address, sends authenticated
requests and classifies the responses. A call makes a single attempt; there
is no retry, caching or batching.
"""

import logging
from typing import Any, Optional

import httpx

from .errors import (
    AddressResolutionError,
    ApplicationError,
    AuthError,
    ConfigurationError,
    TransportError,
    UnexpectedStatusError,
    UnknownError,
)
from .session import RequestBody, Session
from .types import (
    BASE_URL,
    JSON_CONTENT_TYPE,
    ApplicationErrorEnvelope,
    Outcome,
    OutcomeKind,
    ParseConfig,
)


logger = logging.getLogger("parse_client")

SUCCESS_STATUSES = (200, 201)


def resolve_endpoint(endpoint: str) -> httpx.URL:
    """Resolve an endpoint path against BASE_URL."""
    try:
        return httpx.URL(BASE_URL + endpoint)
    except (httpx.InvalidURL, TypeError) as e:
        raise AddressResolutionError(str(endpoint), str(e)) from e


def classify_response(response: httpx.Response) -> Outcome:
    """
    Classify a response by status code.

    Only a 400 body is consumed here (and the response closed). Every other
    outcome hands back the response unread; the caller closes it.
    """
    status = response.status_code

    if status in SUCCESS_STATUSES:
        return Outcome(OutcomeKind.SUCCESS, response=response)

    if status == 400:
        try:
            body = response.read()
        except httpx.DecodingError:
            return Outcome(OutcomeKind.UNKNOWN_ERROR, error=UnknownError())
        finally:
            response.close()
        envelope = ApplicationErrorEnvelope.from_body(body)
        if envelope is None:
            return Outcome(OutcomeKind.UNKNOWN_ERROR, error=UnknownError())
        return Outcome(
            OutcomeKind.APPLICATION_ERROR,
            error=ApplicationError(envelope.code, envelope.message),
        )

    if status == 401:
        return Outcome(OutcomeKind.UNAUTHORIZED, response=response, error=AuthError(response))

    return Outcome(
        OutcomeKind.UNEXPECTED_STATUS,
        response=response,
        error=UnexpectedStatusError(status, response),
    )


class Dispatcher:
    """
    Parse Dispatcher - sends requests built by a Session.

    Holds no per-call state, so one instance may serve concurrent callers
    as long as the Session is not being reconfigured meanwhile.
    """

    def __init__(
        self,
        session: Session,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
        debug: bool = False,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            session: Session providing credentials and tracing
            http_client: Optional httpx.Client to send through; owned by the
                caller when given
            timeout: Default request timeout in seconds
            debug: Emit debug log records for every call
        """
        self.session = session
        self._debug = debug
        self._owns_client = http_client is None
        self._http_client = http_client if http_client is not None else httpx.Client(timeout=timeout)

        self._log("Dispatcher initialized (base_url=%s)", BASE_URL)

    @classmethod
    def from_config(cls, config: ParseConfig, http_client: Optional[httpx.Client] = None) -> "Dispatcher":
        """Create a dispatcher and its session from a ParseConfig."""
        cls._validate_config(config)
        return cls(
            Session.from_config(config),
            http_client=http_client,
            timeout=config.timeout,
            debug=config.debug,
        )

    @staticmethod
    def _validate_config(config: ParseConfig) -> None:
        """Validate configuration."""
        if not config.application_id:
            raise ConfigurationError("application_id is required")
        if not config.api_key:
            raise ConfigurationError("api_key is required")
        if config.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

    def _log(self, message: str, *args: Any) -> None:
        """Log debug message."""
        if self._debug:
            logger.debug(f"[Parse] {message}", *args)

    # =========================================================================
    # Sending
    # =========================================================================

    def send_simple(self, method: str, endpoint: str) -> httpx.Response:
        """Send a JSON request without a body."""
        return self.send(method, endpoint, JSON_CONTENT_TYPE, None)

    def send_with_body(self, method: str, endpoint: str, body: RequestBody) -> httpx.Response:
        """Send a JSON request with the given body."""
        return self.send(method, endpoint, JSON_CONTENT_TYPE, body)

    def send(
        self,
        method: str,
        endpoint: str,
        content_type: str,
        body: RequestBody = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """
        Send one request and classify the response.

        Args:
            method: HTTP method
            endpoint: Path appended to BASE_URL, e.g. "/classes/GameScore"
            content_type: Value of the Content-Type header
            body: Optional request body
            timeout: Per-call timeout in seconds, overriding the default

        Returns:
            The 200/201 response, body unread. The caller must close it.

        Raises:
            AddressResolutionError: If the endpoint cannot be resolved
            ConstructionError: If the request cannot be built
            TransportError: If the request could not be completed
            ApplicationError: On 400 with an error envelope
            UnknownError: On 400 without a recognizable envelope
            AuthError: On 401; ``error.response`` must be closed
            UnexpectedStatusError: On any other status; ``error.response``
                must be closed
        """
        url = resolve_endpoint(endpoint)
        request = self.session.build_request(method, url, content_type, body)
        # Requests built outside the client carry no timeout unless set here
        request.extensions["timeout"] = (
            httpx.Timeout(timeout) if timeout is not None else self._http_client.timeout
        ).as_dict()

        self.session.trace("request", request.method, request.url)
        self._log("%s %s", request.method, request.url)

        try:
            response = self._http_client.send(request, stream=True)
        except httpx.RequestError as e:
            raise self._transport_error(request, e) from e

        try:
            outcome = classify_response(response)
        except httpx.RequestError as e:
            # Connection dropped while reading a 400 body
            raise self._transport_error(request, e) from e

        self.session.trace("response", request.method, request.url, response.status_code, outcome.kind.value)
        self._log("%s %s -> %s (%s)", request.method, request.url, response.status_code, outcome.kind.value)

        return outcome.unwrap()

    def _transport_error(self, request: httpx.Request, error: httpx.RequestError) -> TransportError:
        """Log and trace a network failure, and wrap it."""
        logger.error("Request failed: %s %s: %s", request.method, request.url, error)
        self.session.trace("transport error", request.method, request.url, error)
        if isinstance(error, httpx.TimeoutException):
            return TransportError(f"request timed out: {error}", error)
        return TransportError(str(error) or type(error).__name__, error)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the HTTP client if this dispatcher created it."""
        if self._owns_client:
            self._http_client.close()

    def __enter__(self) -> "Dispatcher":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def create_dispatcher(config: ParseConfig) -> Dispatcher:
    """Create a new Parse dispatcher."""
    return Dispatcher.from_config(config)
