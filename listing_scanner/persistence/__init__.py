"""Persistence layer: the append-only listing log stored through SQLAlchemy.

Example usage:
    >>> from listing_scanner.persistence import init_database, get_session, ListingLogRepository
    >>> init_database("sqlite:///./data/listing_scanner.db")
    >>> with get_session() as session:
    ...     ListingLogRepository(session).append(annotated_listings, sheet="main")
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import DatabaseConnectionError, DataIntegrityError, PersistenceError
from .repositories import MAIN_SHEET, TEST_SHEET, ListingLogRepository

__all__ = [
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "ListingLogRepository",
    "MAIN_SHEET",
    "TEST_SHEET",
    "PersistenceError",
    "DatabaseConnectionError",
    "DataIntegrityError",
]
