"""Repository for the append-only listing log."""

import logging
from typing import List, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from listing_scanner.domain.models import AnnotatedListing, LogEntry

from .exceptions import DataIntegrityError, PersistenceError
from .schema import ListingLogModel

logger = logging.getLogger(__name__)

MAIN_SHEET = "main"
TEST_SHEET = "test"


class ListingLogRepository:
    """Appends listings to, and reads rows back from, a log sheet.

    Writes are not locked: two concurrent appends to the same sheet can
    compute the same starting row, and the second one then fails with
    DataIntegrityError.
    """

    def __init__(self, session: Session):
        self.session = session

    def last_row_number(self, sheet: str = MAIN_SHEET) -> int:
        """Highest occupied row number in ``sheet`` (0 when empty)."""
        try:
            stmt = select(func.max(ListingLogModel.row_number)).where(
                ListingLogModel.sheet == sheet
            )
            return self.session.execute(stmt).scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Error reading last row of sheet {sheet}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to read listing log: {e}") from e

    def append(self, listings: Sequence[AnnotatedListing], sheet: str = MAIN_SHEET) -> int:
        """Append one row per listing after the last occupied row.

        Rows are written in input order with the columns scraped date, match,
        listed date, title, description, link. An empty input writes nothing.

        Args:
            listings: Annotated listings (matched or not)
            sheet: Target sheet name

        Returns:
            Number of rows written

        Raises:
            DataIntegrityError: If a target row is already occupied
            PersistenceError: On any other database error
        """
        if not listings:
            return 0

        start = self.last_row_number(sheet) + 1
        try:
            self.session.add_all(
                ListingLogModel.from_listing(listing, sheet, start + offset)
                for offset, listing in enumerate(listings)
            )
            self.session.flush()
        except IntegrityError as e:
            logger.error(f"Row collision appending to sheet {sheet}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to append to listing log: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error appending to sheet {sheet}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to append to listing log: {e}") from e

        logger.info(
            f"Appended {len(listings)} rows to sheet {sheet}",
            extra={
                "event": "listing_log.appended",
                "sheet": sheet,
                "first_row": start,
                "row_count": len(listings),
            },
        )
        return len(listings)

    def count(self, sheet: str = MAIN_SHEET) -> int:
        try:
            stmt = select(func.count()).select_from(ListingLogModel).where(
                ListingLogModel.sheet == sheet
            )
            return self.session.execute(stmt).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting rows of sheet {sheet}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count listing log rows: {e}") from e

    def get_rows(self, sheet: str = MAIN_SHEET) -> List[LogEntry]:
        """All rows of ``sheet`` ordered by row number."""
        try:
            stmt = (
                select(ListingLogModel)
                .where(ListingLogModel.sheet == sheet)
                .order_by(ListingLogModel.row_number)
            )
            return [row.to_domain() for row in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error reading sheet {sheet}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to read listing log: {e}") from e
