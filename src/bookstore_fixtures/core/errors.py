"""Exception hierarchy for the book store fixtures."""


class InvalidArgumentError(ValueError):
    """Raised when a caller passes an argument outside the accepted domain."""


class BookstoreFixturesError(RuntimeError):
    """Base exception raised for harness failures."""


class DatabaseNotInitializedError(BookstoreFixturesError):
    """Raised when a session is requested for a database that was never initialized.

    Call `DatabaseRegistry.init_db` for the URL before asking for sessions.
    """


class SeedDataError(BookstoreFixturesError):
    """Raised when a seed file cannot be decoded into domain records."""
