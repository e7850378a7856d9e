"""Per-test database naming.

Every test (or test class) gets its own database so that tests can run in
parallel without reading each other's rows. The database name is derived from
a base URL plus the caller-supplied scope (usually the test class name) and
sub-scope (usually the test function name):

    derive("postgresql+psycopg://u:p@db/bookstore", "QueryTests", "test_count")
    -> "postgresql+psycopg://u:p@db/bookstore-QueryTests-test_count"

Only the database segment of the URL changes; driver, credentials, host, port
and query string are kept as given. An identifier without a scheme is treated
as a bare database name.
"""

from __future__ import annotations

import hashlib
import posixpath
import threading
from dataclasses import dataclass

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from bookstore_fixtures.core.errors import InvalidArgumentError

SEPARATOR = "-"
MEMORY_DATABASE_PREFIX = "file:memdb"
_SQLITE_MEMORY_NAMES = frozenset({"", ":memory:"})
_SHARED_MEMORY_QUERY = {"mode": "memory", "cache": "shared", "uri": "true"}

# PostgreSQL silently truncates identifiers longer than NAMEDATALEN - 1 bytes.
POSTGRES_MAX_NAME_BYTES = 63
NAME_HASH_BYTES = 4


@dataclass(frozen=True)
class IsolatedDatabaseUrl:
    """Rendered connection URL of an isolated database.

    Equality and hashing are by URL text, so instances can key registries.
    """

    url: str

    def __str__(self) -> str:
        return self.url

    @property
    def database(self) -> str | None:
        """Return the database segment of the URL."""
        return make_url(self.url).database


def isolation_suffix(scope: str, sub_scope: str = "") -> str:
    """Return the suffix appended to the base database name.

    Raises:
        InvalidArgumentError: If `scope` is empty or None.
    """
    if not scope:
        raise InvalidArgumentError("scope must be a non-empty string")
    if not sub_scope:
        return f"{SEPARATOR}{scope}"
    return f"{SEPARATOR}{scope}{SEPARATOR}{sub_scope}"


def is_memory_database(url: URL) -> bool:
    """Return True for SQLite URLs that never touch the filesystem."""
    if url.get_backend_name() != "sqlite":
        return False
    return (url.database or "") in _SQLITE_MEMORY_NAMES or url.query.get("mode") == "memory"


def shorten_name(name: str, max_bytes: int = POSTGRES_MAX_NAME_BYTES) -> str:
    """Fit `name` into `max_bytes` UTF-8 bytes without losing uniqueness.

    Names that already fit are returned unchanged. Longer names keep as much
    of their prefix as fits and end with a short blake2b digest of the full
    name, so two long names sharing a prefix still differ.
    """
    encoded = name.encode("utf-8")
    if len(encoded) <= max_bytes:
        return name
    digest = hashlib.blake2b(encoded, digest_size=NAME_HASH_BYTES).hexdigest()
    keep = max_bytes - len(SEPARATOR) - len(digest)
    prefix = encoded[:keep].decode("utf-8", errors="ignore")
    return f"{prefix}{SEPARATOR}{digest}"


def _apply_suffix(url: URL, suffix: str) -> URL:
    database = url.database or ""
    backend = url.get_backend_name()
    if backend == "postgresql":
        return url.set(database=shorten_name(f"{database}{suffix}"))
    if backend != "sqlite":
        return url.set(database=f"{database}{suffix}")

    if database in _SQLITE_MEMORY_NAMES:
        # A private in-memory database cannot be shared; name a shared-cache one.
        return url.set(
            database=f"{MEMORY_DATABASE_PREFIX}{suffix}",
            query={**url.query, **_SHARED_MEMORY_QUERY},
        )

    root, ext = posixpath.splitext(database)
    if ext and root and not root.endswith("/"):
        # Keep the file extension last so tooling still recognises the file.
        return url.set(database=f"{root}{suffix}{ext}")
    return url.set(database=f"{database}{suffix}")


def derive(base_identifier: str, scope: str, sub_scope: str = "") -> str:
    """Derive the identifier of the isolated database for `(scope, sub_scope)`.

    Args:
        base_identifier: SQLAlchemy-style URL of the shared base database, or a
            bare database name.
        scope: Logical scope, typically the test class name. Must be non-empty.
        sub_scope: Optional sub-scope, typically the test function name.

    Returns:
        `base_identifier` with the isolation suffix appended to its database name.

    Raises:
        InvalidArgumentError: If `scope` is empty or `base_identifier` is a
            malformed URL.
    """
    suffix = isolation_suffix(scope, sub_scope)
    if "://" not in (base_identifier or ""):
        return f"{base_identifier or ''}{suffix}"

    try:
        url = make_url(base_identifier)
    except ArgumentError as exc:
        raise InvalidArgumentError(f"Unparseable database URL: {base_identifier!r}") from exc

    return _apply_suffix(url, suffix).render_as_string(hide_password=False)


class IsolatedDatabaseNamer:
    """Derives and remembers isolated database URLs for one base URL.

    The cache lives as long as the namer, normally one test session.
    """

    def __init__(self, base_identifier: str) -> None:
        self.base_identifier = base_identifier
        self._cache: dict[tuple[str, str], IsolatedDatabaseUrl] = {}
        self._lock = threading.Lock()

    def derive(self, scope: str, sub_scope: str = "") -> IsolatedDatabaseUrl:
        """Return the isolated URL for `(scope, sub_scope)`, computing it at most once."""
        key = (scope, sub_scope)
        with self._lock:
            cached = self._cache.get(key)
            if cached is None:
                cached = IsolatedDatabaseUrl(derive(self.base_identifier, scope, sub_scope))
                self._cache[key] = cached
            return cached

    def for_test(self, class_name: str | None, test_name: str) -> IsolatedDatabaseUrl:
        """Return the URL for a test; module-level tests use the test name as scope."""
        if class_name:
            return self.derive(class_name, test_name)
        return self.derive(test_name)

    def known(self) -> list[IsolatedDatabaseUrl]:
        """Return every URL derived so far."""
        with self._lock:
            return list(self._cache.values())

    def reset(self) -> None:
        """Forget every derived URL."""
        with self._lock:
            self._cache.clear()
