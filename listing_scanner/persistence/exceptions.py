"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so callers can catch
them with a single except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the database cannot be initialized or is not initialized yet.

    Examples:
    - Empty or malformed database URL
    - Database file not accessible
    - get_session() called before init_database()
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised when a write violates a table constraint.

    For the listing log this means two writers claimed the same
    ``(sheet, row_number)``.
    """

    pass
