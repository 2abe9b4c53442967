"""
Tests for Parse Session

Header selection, request construction and diagnostic tracing.
"""

import io
import logging
import string

import httpx
import pytest
from hypothesis import given, settings, strategies as st

from parse_client import (
    APPLICATION_ID_HEADER,
    MASTER_KEY_HEADER,
    REST_API_KEY_HEADER,
    SESSION_TOKEN_HEADER,
    ConstructionError,
    Credentials,
    LoggerSink,
    NullSink,
    ParseConfig,
    Session,
    StreamSink,
)


URL = "https://api.parse.com/1/classes/GameScore"

header_value = st.text(alphabet=string.ascii_letters + string.digits, min_size=1, max_size=40)
optional_value = st.one_of(st.just(""), header_value)


class RecordingSink:
    """Collects trace lines."""

    def __init__(self) -> None:
        self.lines = []

    def write_line(self, line: str) -> None:
        self.lines.append(line)


class BrokenSink:
    def write_line(self, line: str) -> None:
        raise OSError("disk full")


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def session() -> Session:
    """Session with only the default credentials."""
    return Session("app_123", "rest_key_456")


# =============================================================================
# Header Selection Tests
# =============================================================================

class TestHeaderSelection:
    """Tests for authentication header selection."""

    def test_default_headers(self, session: Session):
        """Test application id and REST API key are sent by default."""
        request = session.build_request("GET", URL, "application/json")

        assert request.headers[APPLICATION_ID_HEADER] == "app_123"
        assert request.headers[REST_API_KEY_HEADER] == "rest_key_456"
        assert MASTER_KEY_HEADER not in request.headers
        assert SESSION_TOKEN_HEADER not in request.headers
        assert request.headers["Content-Type"] == "application/json"

    def test_master_key_replaces_api_key(self, session: Session):
        """Test master key takes precedence over the REST API key."""
        session.set_master_key("master_789")

        request = session.build_request("GET", URL, "application/json")

        assert request.headers[MASTER_KEY_HEADER] == "master_789"
        assert REST_API_KEY_HEADER not in request.headers

    def test_clearing_master_key_restores_api_key(self, session: Session):
        """Test empty master key falls back to the REST API key."""
        session.set_master_key("master_789")
        session.set_master_key("")

        request = session.build_request("GET", URL, "application/json")

        assert request.headers[REST_API_KEY_HEADER] == "rest_key_456"
        assert MASTER_KEY_HEADER not in request.headers

    def test_session_token_sent_alongside_auth_header(self, session: Session):
        """Test session token is independent of the key choice."""
        session.set_session_token("r:token")
        session.set_master_key("master_789")

        request = session.build_request("POST", URL, "application/json", b"{}")

        assert request.headers[SESSION_TOKEN_HEADER] == "r:token"
        assert request.headers[MASTER_KEY_HEADER] == "master_789"

    def test_clearing_session_token(self, session: Session):
        """Test empty session token removes the header."""
        session.set_session_token("r:token")
        session.set_session_token("")

        request = session.build_request("GET", URL, "application/json")

        assert SESSION_TOKEN_HEADER not in request.headers

    def test_content_type_from_parameter(self, session: Session):
        """Test content type is taken verbatim from the argument."""
        request = session.build_request("POST", URL, "image/png", b"\x89PNG")

        assert request.headers["Content-Type"] == "image/png"
        assert request.content == b"\x89PNG"

    def test_setters_replace_credentials(self, session: Session):
        """Test setters swap in a new credentials value."""
        before = session.credentials
        session.set_master_key("master_789")

        assert before.master_key == ""
        assert session.credentials is not before
        assert session.master_key == "master_789"
        assert session.application_id == "app_123"
        assert session.api_key == "rest_key_456"

    def test_from_config(self):
        """Test session built from configuration."""
        session = Session.from_config(ParseConfig(
            application_id="app_123",
            api_key="rest_key_456",
            session_token="r:token",
        ))

        request = session.build_request("GET", URL, "application/json")

        assert request.headers[SESSION_TOKEN_HEADER] == "r:token"
        assert request.headers[REST_API_KEY_HEADER] == "rest_key_456"

    def test_repr_hides_secrets(self, session: Session):
        """Test keys do not leak into repr."""
        session.set_master_key("master_789")

        assert "master_789" not in repr(session)
        assert "rest_key_456" not in repr(session)


class TestHeaderProperties:
    """Property tests for header selection."""

    @given(app_id=header_value, api_key=header_value, master_key=header_value, token=optional_value)
    @settings(max_examples=100)
    def test_master_key_excludes_api_key(self, app_id: str, api_key: str, master_key: str, token: str):
        """
        Property: With a master key set, the REST API key header is never sent.
        """
        session = Session(app_id, api_key)
        session.set_master_key(master_key)
        session.set_session_token(token)

        headers = session.build_request("GET", URL, "application/json").headers

        assert headers[MASTER_KEY_HEADER] == master_key
        assert REST_API_KEY_HEADER not in headers
        assert headers[APPLICATION_ID_HEADER] == app_id

    @given(app_id=header_value, api_key=header_value, token=optional_value)
    @settings(max_examples=100)
    def test_api_key_without_master_key(self, app_id: str, api_key: str, token: str):
        """
        Property: Without a master key, only the REST API key header is sent.
        """
        session = Session(app_id, api_key)
        session.set_session_token(token)

        headers = session.build_request("GET", URL, "application/json").headers

        assert headers[REST_API_KEY_HEADER] == api_key
        assert MASTER_KEY_HEADER not in headers

    @given(master_key=optional_value, token=optional_value)
    @settings(max_examples=100)
    def test_session_token_header(self, master_key: str, token: str):
        """
        Property: The session token header equals the token, or is absent
        when the token is empty.
        """
        session = Session("app_123", "rest_key_456")
        session.set_master_key(master_key)
        session.set_session_token(token)

        headers = session.build_request("GET", URL, "application/json").headers

        if token:
            assert headers[SESSION_TOKEN_HEADER] == token
        else:
            assert SESSION_TOKEN_HEADER not in headers

    @given(master_key=optional_value, token=optional_value)
    @settings(max_examples=50)
    def test_credentials_headers_match_request(self, master_key: str, token: str):
        """
        Property: Requests carry exactly the credential headers plus Content-Type.
        """
        credentials = Credentials("app_123", "rest_key_456", master_key, token)
        session = Session("app_123", "rest_key_456")
        session.set_master_key(master_key)
        session.set_session_token(token)

        headers = session.build_request("GET", URL, "text/plain").headers

        for name, value in credentials.headers().items():
            assert headers[name] == value
        assert headers["Content-Type"] == "text/plain"


# =============================================================================
# Request Construction Tests
# =============================================================================

class TestBuildRequest:
    """Tests for request construction failures."""

    @pytest.mark.parametrize("method", ["", "GE T", "GET\n", "P@ST"])
    def test_invalid_method(self, session: Session, method: str):
        """Test malformed methods are rejected."""
        with pytest.raises(ConstructionError):
            session.build_request(method, URL, "application/json")

    def test_relative_url(self, session: Session):
        """Test a relative address is rejected."""
        with pytest.raises(ConstructionError) as exc_info:
            session.build_request("GET", "/classes/GameScore", "application/json")
        assert "not absolute" in str(exc_info.value)

    def test_malformed_url(self, session: Session):
        """Test an unparseable address is rejected."""
        with pytest.raises(ConstructionError):
            session.build_request("GET", "https://api.parse.com/1/\x00", "application/json")

    def test_non_ascii_credentials(self, session: Session):
        """Test non-ASCII keys and tokens are sent as UTF-8."""
        session.set_session_token("tök")
        session.set_master_key("schlüssel")

        request = session.build_request("GET", URL, "application/json")

        assert (b"X-Parse-Session-Token", "tök".encode("utf-8")) in request.headers.raw
        assert (b"X-Parse-Master-Key", "schlüssel".encode("utf-8")) in request.headers.raw
        assert request.headers[SESSION_TOKEN_HEADER] == "tök"

    def test_accepts_httpx_url(self, session: Session):
        """Test an httpx.URL target is accepted."""
        request = session.build_request("DELETE", httpx.URL(URL), "application/json")

        assert request.method == "DELETE"
        assert request.url == httpx.URL(URL)


# =============================================================================
# Diagnostics Tests
# =============================================================================

class TestDiagnostics:
    """Tests for trace sinks."""

    def test_disabled_by_default(self, session: Session):
        """Test tracing is a no-op without a sink."""
        assert not session.diagnostics_enabled
        session.trace("ignored")

    def test_enable_and_disable(self, session: Session):
        """Test lines stop after diagnostics are disabled."""
        sink = RecordingSink()
        session.enable_diagnostics(sink)
        session.trace("first", 1)

        session.disable_diagnostics()
        session.trace("second", 2)

        assert sink.lines == ["first 1"]
        assert not session.diagnostics_enabled

    def test_sink_failure_is_swallowed(self, session: Session):
        """Test a failing sink never raises out of trace."""
        session.enable_diagnostics(BrokenSink())

        session.trace("still fine")

    def test_logger_sink(self, session: Session, caplog):
        """Test a logging.Logger is wrapped in a LoggerSink."""
        trace_logger = logging.getLogger("parse_client.tests.trace")
        session.enable_diagnostics(trace_logger)

        with caplog.at_level(logging.INFO, logger="parse_client.tests.trace"):
            session.trace("GET", URL)

        assert f"GET {URL}" in caplog.messages

    def test_stream_sink(self, session: Session):
        """Test a text stream is wrapped in a StreamSink."""
        stream = io.StringIO()
        session.enable_diagnostics(stream)

        session.trace("a", "b")
        session.trace("c")

        assert stream.getvalue() == "a b\nc\n"

    def test_unsupported_sink_disables_tracing(self, session: Session):
        """Test objects that cannot take lines turn tracing off without raising."""
        session.enable_diagnostics(RecordingSink())

        session.enable_diagnostics(42)
        session.trace("dropped")

        assert not session.diagnostics_enabled

    def test_none_sink_disables_tracing(self, session: Session):
        """Test None behaves like disable_diagnostics."""
        sink = RecordingSink()
        session.enable_diagnostics(sink)

        session.enable_diagnostics(None)
        session.trace("dropped")

        assert sink.lines == []
        assert not session.diagnostics_enabled

    def test_sink_passed_at_construction(self):
        """Test a sink can be injected when the session is created."""
        sink = RecordingSink()
        session = Session("app_123", "rest_key_456", sink)

        session.trace("hello")

        assert sink.lines == ["hello"]

    def test_builtin_sinks_satisfy_protocol(self):
        """Test bundled sinks implement write_line."""
        from parse_client import TraceSink

        assert isinstance(NullSink(), TraceSink)
        assert isinstance(StreamSink(io.StringIO()), TraceSink)
        assert isinstance(LoggerSink(logging.getLogger("x")), TraceSink)
