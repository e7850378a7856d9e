"""Tests for the line-oriented SQL log sinks."""

import logging

from sqlalchemy import select

from bookstore_fixtures.db.sql_log import LoggingLineWriter, StringLineWriter, start_logging
from bookstore_fixtures.models import Author, Book


def test_string_line_writer_collects_lines():
    writer = StringLineWriter()
    writer.write_line("first")
    writer.write_line("second")

    assert writer.getvalue() == "first\nsecond\n"
    assert writer.lines() == ["first", "second"]


def test_logging_line_writer_forwards_to_logger(caplog):
    target = logging.getLogger("tests.sql_log")
    writer = LoggingLineWriter(target, level=logging.WARNING)

    with caplog.at_level(logging.WARNING, logger="tests.sql_log"):
        writer.write_line("SELECT 1")

    assert [(r.name, r.levelno, r.getMessage()) for r in caplog.records] == [
        ("tests.sql_log", logging.WARNING, "SELECT 1")
    ]


def test_start_logging_captures_statements_and_parameters(registry, isolated_url):
    registry.init_db(isolated_url)
    sink = StringLineWriter()

    with registry.create_session(isolated_url) as session:
        assert start_logging(session, sink) is session
        session.scalars(select(Author).where(Author.name == "Damon Williams")).all()

    log = sink.getvalue()
    assert "FROM authors" in log
    assert "-- parameters: ('Damon Williams',)" in log


def test_logging_starts_mid_transaction(registry, isolated_url):
    registry.init_db(isolated_url)
    sink = StringLineWriter()

    with registry.create_session(isolated_url) as session:
        session.scalars(select(Book)).all()
        start_logging(session, sink)
        session.scalars(select(Author)).all()

    assert "FROM books" not in sink.getvalue()
    assert "FROM authors" in sink.getvalue()


def test_several_sinks_receive_the_same_statements(registry, isolated_url):
    registry.init_db(isolated_url)
    first, second = StringLineWriter(), StringLineWriter()

    with registry.create_session(isolated_url, log_sink=first) as session:
        start_logging(session, second)
        session.scalars(select(Author)).all()

    assert first.getvalue() == second.getvalue() != ""


def test_other_sessions_are_not_logged(registry, isolated_url):
    registry.init_db(isolated_url)
    sink = StringLineWriter()

    with registry.create_session(isolated_url, log_sink=sink):
        pass
    with registry.create_session(isolated_url) as session:
        session.scalars(select(Author)).all()

    assert sink.getvalue() == ""
