"""Scoped capture of operation-level diagnostic output.

While a capture is active, records from the operation loggers are routed
into an in-memory buffer instead of the caller's handlers. Routing is
process-wide logging state, so captures are serialized by a re-entrant
lock held from :meth:`DiagnosticCapture.begin_capture` to
:meth:`DiagnosticCapture.end_capture`. Nested captures on the same thread
unwind in LIFO order and each restores exactly the routing it replaced.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from io import StringIO

from repopub.config.logging import build_formatter
from repopub.errors import MisuseError

# Loggers that emit operation-level output during execute().
OPERATION_LOGGERS: tuple[str, ...] = (
    "repopub.services.deploy",
    "repopub.infrastructure.engine",
)

_routing_lock = threading.RLock()
_active: list[CaptureToken] = []


@dataclass(frozen=True)
class LoggerRouting:
    """Snapshot of a logger's routing-relevant attributes."""

    handlers: tuple[logging.Handler, ...]
    propagate: bool
    level: int

    @classmethod
    def of(cls, logger: logging.Logger) -> LoggerRouting:
        return cls(handlers=tuple(logger.handlers), propagate=logger.propagate, level=logger.level)

    def apply(self, logger: logging.Logger) -> None:
        logger.handlers = list(self.handlers)
        logger.propagate = self.propagate
        logger.setLevel(self.level)


@dataclass(eq=False)
class CaptureToken:
    """Handle for one active capture; pass it back to ``end_capture``."""

    buffer: StringIO
    handler: logging.Handler
    previous: dict[str, LoggerRouting] = field(default_factory=dict)
    closed: bool = False

    @property
    def text(self) -> str:
        return self.buffer.getvalue()


class DiagnosticCapture:
    """Capture facility over a fixed set of logger names."""

    def __init__(
        self,
        logger_names: tuple[str, ...] = OPERATION_LOGGERS,
        *,
        level: int = logging.DEBUG,
    ) -> None:
        self._logger_names = logger_names
        self._level = level

    @property
    def logger_names(self) -> tuple[str, ...]:
        return self._logger_names

    def routing(self) -> dict[str, LoggerRouting]:
        """Current routing of every captured logger."""
        return {name: LoggerRouting.of(logging.getLogger(name)) for name in self._logger_names}

    def begin_capture(self) -> CaptureToken:
        """Redirect the operation loggers into a fresh buffer."""
        buffer = StringIO()
        handler = logging.StreamHandler(buffer)
        handler.setFormatter(build_formatter(log_json=False, colors=False))

        _routing_lock.acquire()
        previous: dict[str, LoggerRouting] = {}
        try:
            previous = self.routing()
            for name in self._logger_names:
                logger = logging.getLogger(name)
                logger.handlers = [handler]
                logger.propagate = False
                logger.setLevel(self._level)
        except BaseException:
            for name, routing in previous.items():
                routing.apply(logging.getLogger(name))
            _routing_lock.release()
            raise

        token = CaptureToken(buffer=buffer, handler=handler, previous=previous)
        _active.append(token)
        return token

    def end_capture(self, token: CaptureToken) -> str:
        """Restore the routing replaced by *token* and return the captured text.

        Raises:
            MisuseError: If *token* is not the innermost active capture.
        """
        if token.closed or not _active or _active[-1] is not token:
            msg = "Diagnostic capture ended out of order"
            raise MisuseError(msg)
        try:
            _active.pop()
            for name, routing in token.previous.items():
                routing.apply(logging.getLogger(name))
            token.handler.flush()
            token.closed = True
            return token.text
        finally:
            _routing_lock.release()

    @contextmanager
    def capture(self) -> Iterator[CaptureToken]:
        """Context-managed ``begin_capture``/``end_capture`` pair."""
        token = self.begin_capture()
        try:
            yield token
        finally:
            self.end_capture(token)
