"""Line-oriented SQL logging for sessions.

Tests pass a sink to `start_logging` and then assert on the SQL the ORM
emitted, e.g. that a count was translated to ``SELECT count(*)`` rather than
evaluated in Python.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Protocol

from sqlalchemy import Connection, event
from sqlalchemy.orm import Session, SessionTransaction

logger = logging.getLogger(__name__)

_SINK_KEY = "bookstore_fixtures.sql_log.sinks"


class LineWriter(Protocol):
    """Anything that accepts whole lines of text."""

    def write_line(self, line: str) -> None: ...


class StringLineWriter:
    """Collects written lines in memory."""

    def __init__(self) -> None:
        self._buffer = io.StringIO()

    def write_line(self, line: str) -> None:
        self._buffer.write(line)
        self._buffer.write("\n")

    def getvalue(self) -> str:
        return self._buffer.getvalue()

    def lines(self) -> list[str]:
        return self.getvalue().splitlines()


class LoggingLineWriter:
    """Forwards lines to a standard library logger."""

    def __init__(self, target: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = target or logger
        self._level = level

    def write_line(self, line: str) -> None:
        self._logger.log(self._level, "%s", line)


def start_logging(session: Session, sink: LineWriter) -> Session:
    """Write every SQL statement `session` executes from now on to `sink`.

    Several sinks may be attached to one session. Returns the session so
    calls can be chained.
    """
    sinks: list[LineWriter] | None = session.info.get(_SINK_KEY)
    if sinks is not None:
        sinks.append(sink)
        return session

    sinks = session.info[_SINK_KEY] = [sink]

    def _write_statement(
        conn: Connection,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        for target in sinks:
            target.write_line(statement)
            if parameters:
                target.write_line(f"-- parameters: {parameters!r}")

    def _attach(sess: Session, transaction: SessionTransaction, connection: Connection) -> None:
        if not event.contains(connection, "before_cursor_execute", _write_statement):
            event.listen(connection, "before_cursor_execute", _write_statement)

    event.listen(session, "after_begin", _attach)

    # Connections checked out before this call never see after_begin again.
    if session.in_transaction():
        _attach(session, session.get_transaction(), session.connection())
    return session
