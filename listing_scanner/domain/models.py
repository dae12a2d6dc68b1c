"""Core domain models for scraped listings.

- Listing: one posting as read from a feed page
- AnnotatedListing: a Listing plus the keyword matches found in it

Both are immutable values. A Listing is produced by exactly one parse call;
the match on an AnnotatedListing is computed once and never recomputed.
"""

from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from listing_scanner.utils.timestamps import ensure_utc


class Listing(BaseModel):
    """A single classified-ad posting.

    Text fields are None when the feed item did not carry the tag; they are
    never validated beyond that.
    """

    title: Optional[str] = Field(None, description="Posting title")
    link: Optional[str] = Field(None, description="URL of the posting")
    description: Optional[str] = Field(None, description="Free-text body")
    listed_date: Optional[datetime] = Field(
        None, description="Timestamp reported by the feed (UTC)"
    )
    scraped_date: datetime = Field(..., description="When the feed page was parsed (UTC)")

    @field_validator("listed_date", "scraped_date")
    @classmethod
    def normalize_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "title": "Need help with a spreadsheet",
                "link": "https://boulder.craigslist.org/cpg/d/boulder/7100000001.html",
                "description": "Looking for someone to clean up a CSV export...",
                "listed_date": "2020-05-01T18:00:00Z",
                "scraped_date": "2020-05-01T19:30:00Z",
            }
        },
    }


class AnnotatedListing(Listing):
    """A Listing tagged with the keyword substrings found in it.

    ``match`` keeps the matched text as it appeared in the posting (title
    matches first, then description), de-duplicated case-insensitively.
    """

    match: Tuple[str, ...] = Field(
        default=(), description="Keyword substrings found in title or description"
    )

    @property
    def is_match(self) -> bool:
        return bool(self.match)

    @property
    def match_summary(self) -> str:
        """Comma-separated matches, as written to the listing log."""
        return ", ".join(self.match)

    @classmethod
    def from_listing(cls, listing: Listing, match: Tuple[str, ...] = ()) -> "AnnotatedListing":
        return cls(**listing.model_dump(), match=tuple(match))


class LogEntry(BaseModel):
    """One row of the append-only listing log.

    Rows are addressed by ``(sheet, row_number)``; row numbers start at 1 and
    grow by one per appended listing.
    """

    sheet: str = Field(..., description="Log sheet name, e.g. 'main' or 'test'")
    row_number: int = Field(..., ge=1, description="1-based position within the sheet")
    scraped_date: datetime
    match: str = Field("", description="Comma-separated matched terms")
    listed_date: Optional[datetime] = None
    title: Optional[str] = None
    description: Optional[str] = None
    link: Optional[str] = None

    @field_validator("listed_date", "scraped_date")
    @classmethod
    def normalize_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    model_config = {"frozen": True}
