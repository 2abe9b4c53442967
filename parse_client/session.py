"""
Parse Client Session

Identity and authentication state for one client, and construction of
authenticated requests from it.
"""

import logging
import re
from typing import Any, Optional, Union

import httpx

from .errors import ConstructionError
from .tracing import LoggerSink, NullSink, StreamSink, TraceSink
from .types import Credentials, ParseConfig


logger = logging.getLogger("parse_client")

# RFC 7230 token characters
_METHOD_REGEX = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")

RequestBody = Union[bytes, str, Any, None]


class Session:
    """
    Parse Session - holds the keys sent with every request.

    Credentials live in an immutable value that the setters replace as a
    whole. Each request reads that value once, so a request never mixes
    keys from before and after a change. Changing keys while other threads
    are dispatching is still racy in the sense that those requests may use
    either configuration.
    """

    def __init__(
        self,
        application_id: str,
        api_key: str,
        sink: Optional[TraceSink] = None,
    ) -> None:
        self._credentials = Credentials(application_id=application_id, api_key=api_key)
        self._sink: TraceSink = sink if sink is not None else NullSink()

    @classmethod
    def from_config(cls, config: ParseConfig, sink: Optional[TraceSink] = None) -> "Session":
        """Create a session from a ParseConfig."""
        session = cls(config.application_id, config.api_key, sink)
        session._credentials = config.to_credentials()
        return session

    # =========================================================================
    # Credentials
    # =========================================================================

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def application_id(self) -> str:
        return self._credentials.application_id

    @property
    def api_key(self) -> str:
        return self._credentials.api_key

    @property
    def master_key(self) -> str:
        return self._credentials.master_key

    @property
    def session_token(self) -> str:
        return self._credentials.session_token

    def set_master_key(self, master_key: str) -> None:
        """
        Send the master key in place of the REST API key on later requests.

        An empty string restores the REST API key.
        """
        self._credentials = self._credentials.with_master_key(master_key)

    def set_session_token(self, session_token: str) -> None:
        """
        Authenticate later requests as the user owning the token.

        An empty string stops sending the token.
        """
        self._credentials = self._credentials.with_session_token(session_token)

    # =========================================================================
    # Diagnostics
    # =========================================================================

    @property
    def diagnostics_enabled(self) -> bool:
        return not isinstance(self._sink, NullSink)

    def enable_diagnostics(self, sink: Union[TraceSink, logging.Logger, Any, None]) -> None:
        """
        Trace requests to the given sink.

        Accepts a TraceSink, a logging.Logger, or a writable text stream.
        None, or anything that cannot take lines, turns tracing off.
        """
        if isinstance(sink, logging.Logger):
            self._sink = LoggerSink(sink)
        elif isinstance(sink, TraceSink):
            self._sink = sink
        elif hasattr(sink, "write"):
            self._sink = StreamSink(sink)
        else:
            if sink is not None:
                logger.debug("unsupported trace sink %s, tracing disabled", type(sink).__name__)
            self._sink = NullSink()

    def disable_diagnostics(self) -> None:
        """Stop tracing."""
        self._sink = NullSink()

    def trace(self, *args: Any) -> None:
        """Write one trace line. Never raises."""
        sink = self._sink
        if isinstance(sink, NullSink):
            return
        try:
            sink.write_line(" ".join(str(arg) for arg in args))
        except Exception as e:
            logger.debug("trace sink %r failed: %s", sink, e)

    # =========================================================================
    # Requests
    # =========================================================================

    def build_request(
        self,
        method: str,
        url: Union[str, httpx.URL],
        content_type: str,
        body: RequestBody = None,
    ) -> httpx.Request:
        """
        Build an authenticated request.

        Args:
            method: HTTP method
            url: Absolute target address
            content_type: Value of the Content-Type header
            body: Optional request body (bytes, str or an iterable of bytes)

        Returns:
            httpx.Request ready to be sent

        Raises:
            ConstructionError: If the method or address is malformed
        """
        if not method or not _METHOD_REGEX.fullmatch(method):
            raise ConstructionError(f"invalid method {method!r}", {"method": method})
        try:
            target = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise ConstructionError(f"invalid url {url!r}: {e}", {"url": str(url)}) from e
        if not target.is_absolute_url:
            raise ConstructionError(f"url {url!r} is not absolute", {"url": str(url)})

        headers = self._credentials.headers()
        headers["Content-Type"] = content_type

        # Header values are sent as UTF-8 bytes
        encoded = {name: value.encode("utf-8") for name, value in headers.items()}

        return httpx.Request(method, target, headers=encoded, content=body)

    def __repr__(self) -> str:
        return (
            f"Session(application_id={self.application_id!r}, "
            f"master_key={'set' if self.master_key else 'unset'}, "
            f"session_token={'set' if self.session_token else 'unset'})"
        )
