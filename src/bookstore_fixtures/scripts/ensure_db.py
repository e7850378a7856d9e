"""Utility script to provision an isolated book store database."""
from __future__ import annotations

import argparse
import logging
import sys

from bookstore_fixtures.core.settings import settings
from bookstore_fixtures.db.naming import derive
from bookstore_fixtures.db.provision import build_engine, ensure_database_exists, recreate_database
from bookstore_fixtures.db.seeding import seed_books
from bookstore_fixtures.db.session import create_tables
from bookstore_fixtures.loaders.book_json import load_books


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ensure, reset or seed a book store database")
    parser.add_argument(
        "--url",
        default=None,
        help="Override base database URL (defaults to effective settings URL)",
    )
    parser.add_argument(
        "--scope",
        default=None,
        help="Derive an isolated database for this scope (e.g. a test class name).",
    )
    parser.add_argument(
        "--sub-scope",
        default="",
        help="Optional sub-scope appended after --scope (e.g. a test name).",
    )
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop the database before creating it again.",
    )
    parser.add_argument(
        "--seed",
        default=settings.seed_data_path,
        help="Seed the database from this JSON file.",
    )
    return parser


def run(args: argparse.Namespace) -> str:
    """Provision the database described by `args` and return its URL."""
    url = args.url or settings.effective_database_url
    if args.scope:
        url = derive(url, args.scope, args.sub_scope)

    if args.drop:
        recreate_database(url)
    else:
        ensure_database_exists(url)

    engine = build_engine(url, echo=settings.sql_debug)
    try:
        create_tables(engine)
        if args.seed:
            count = seed_books(engine, load_books(args.seed))
            print(f"[ensure_db] seeded {count} books from {args.seed}")
    finally:
        engine.dispose()
    return url


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=settings.log_level)
    args = build_parser().parse_args(argv)
    try:
        url = run(args)
    except Exception as exc:
        print(f"[ensure_db] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"[ensure_db] database ready at {url}")


if __name__ == "__main__":
    main()
