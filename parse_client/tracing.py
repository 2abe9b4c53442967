"""
Parse Client Diagnostic Sinks

Destinations for the human-readable trace lines a Session writes while it
dispatches requests.
"""

import logging
import threading
from typing import Protocol, TextIO, runtime_checkable


@runtime_checkable
class TraceSink(Protocol):
    """Trace sink interface for custom implementations."""

    def write_line(self, line: str) -> None:
        """Record one trace line."""
        ...


class NullSink:
    """Discards every line (default)."""

    def write_line(self, line: str) -> None:
        pass


class LoggerSink:
    """Forwards trace lines to a logging.Logger."""

    def __init__(self, logger: logging.Logger, level: int = logging.INFO) -> None:
        self._logger = logger
        self._level = level

    def write_line(self, line: str) -> None:
        self._logger.log(self._level, "%s", line)


class StreamSink:
    """Writes trace lines to a text stream such as sys.stderr or a file."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def write_line(self, line: str) -> None:
        with self._lock:
            self._stream.write(line + "\n")
            self._stream.flush()
