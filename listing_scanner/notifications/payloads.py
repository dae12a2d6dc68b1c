"""Template context for the listing digest."""

from datetime import datetime
from typing import Dict, Optional, Sequence

from listing_scanner.domain.models import AnnotatedListing
from listing_scanner.utils.timestamps import format_timestamp, utc_now


def build_listing_payload(listing: AnnotatedListing) -> Dict:
    """Flatten one listing into the fields the templates use.

    Missing text fields become empty strings so templates never see None.
    """
    return {
        "title": listing.title or "",
        "link": listing.link or "",
        "description": listing.description or "",
        "listed_at": format_timestamp(listing.listed_date),
        "matched_terms": list(listing.match),
        "match_summary": listing.match_summary,
    }


def build_digest_context(
    listings: Sequence[AnnotatedListing],
    subject: str,
    generated_at: Optional[datetime] = None,
) -> Dict:
    """Build the template context for a digest of ``listings`` in input order."""
    return {
        "subject": subject,
        "listings": [build_listing_payload(listing) for listing in listings],
        "listing_count": len(listings),
        "generated_at": format_timestamp(generated_at or utc_now()),
    }
