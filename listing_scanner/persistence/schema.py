"""ORM model for the append-only listing log.

The log mirrors a spreadsheet: each ``sheet`` is an independent table of
rows numbered from 1, and each row holds one observed listing in the column
order scraped, matched terms, listed, title, description, link.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Index, Integer, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from listing_scanner.domain.models import AnnotatedListing, LogEntry

logger = logging.getLogger(__name__)

Base = declarative_base()


class ListingLogModel(Base):
    """ORM model for the listing_log table."""

    __tablename__ = "listing_log"

    sheet = Column(String(50), primary_key=True, nullable=False)
    row_number = Column(Integer, primary_key=True, nullable=False, autoincrement=False)

    # Timestamps stored as ISO 8601 strings
    scraped_at = Column(String(50), nullable=False)
    matched_terms = Column(Text, nullable=False, default="")
    listed_at = Column(String(50), nullable=True)
    title = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    link = Column(Text, nullable=True)

    __table_args__ = (Index("idx_listing_log_link", "link"),)

    def to_domain(self) -> LogEntry:
        return LogEntry(
            sheet=self.sheet,
            row_number=self.row_number,
            scraped_date=_parse_datetime(self.scraped_at),
            match=self.matched_terms or "",
            listed_date=_parse_datetime(self.listed_at),
            title=self.title,
            description=self.description,
            link=self.link,
        )

    @classmethod
    def from_listing(
        cls, listing: AnnotatedListing, sheet: str, row_number: int
    ) -> "ListingLogModel":
        return cls(
            sheet=sheet,
            row_number=row_number,
            scraped_at=_format_datetime(listing.scraped_date),
            matched_terms=listing.match_summary,
            listed_at=_format_datetime(listing.listed_date),
            title=listing.title,
            description=listing.description,
            link=listing.link,
        )


def _format_datetime(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.strptime(value.rstrip("Z"), "%Y-%m-%dT%H:%M:%S.%f").replace(
        tzinfo=timezone.utc
    )


def create_schema(engine: Engine) -> None:
    """Create the log table and index if they don't exist (idempotent)."""
    Base.metadata.create_all(engine, checkfirst=True)
    logger.debug(f"Database schema ready. Tables: {', '.join(inspect(engine).get_table_names())}")
