"""RSS 1.0 feed decoding.

Search feeds are RDF documents whose ``item`` elements sit directly under the
root ``rdf:RDF`` element, next to the ``channel``. Each item's children are
flattened by local tag name, so ``dc:date`` is read as ``date``.
"""

import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Dict, List, Optional

from listing_scanner.domain.models import Listing
from listing_scanner.logging import get_logger
from listing_scanner.utils.timestamps import parse_iso_datetime, utc_now

from .exceptions import FeedParseError

logger = get_logger(__name__, component="feed")

RSS_NAMESPACE = "http://purl.org/rss/1.0/"

_ITEM_TAG = f"{{{RSS_NAMESPACE}}}item"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _flatten_item(item: ET.Element) -> Dict[str, str]:
    """Map each child's local tag name to its text content.

    The first occurrence of a name wins: core RSS elements precede extension
    elements such as ``dc:title``.
    """
    fields: Dict[str, str] = {}
    for child in item:
        if not isinstance(child.tag, str):
            continue
        name = _local_name(child.tag)
        if name in fields:
            logger.debug(
                f"Ignoring duplicate <{child.tag}> in feed item",
                extra={"event": "feed.parse.duplicate_field", "field": name},
            )
            continue
        fields[name] = "".join(child.itertext())
    return fields


def _in_rss_namespace(root: ET.Element) -> bool:
    prefix = f"{{{RSS_NAMESPACE}}}"
    return any(
        isinstance(el.tag, str) and el.tag.startswith(prefix) for el in root.iter()
    )


def parse_feed(document: str, scraped_at: Optional[datetime] = None) -> List[Listing]:
    """Decode an RSS 1.0 document into Listings.

    Args:
        document: Raw XML text of one feed page
        scraped_at: Timestamp shared by every Listing of this call
            (defaults to now)

    Returns:
        One Listing per item, in document order. Missing tags leave the field
        None and an unparseable date leaves ``listed_date`` None.

    Raises:
        FeedParseError: If the document is not well-formed XML or contains no
            element in the RSS 1.0 namespace
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        raise FeedParseError(f"Malformed feed document: {e}") from e

    if not _in_rss_namespace(root):
        raise FeedParseError(
            f"Feed document has no elements in the RSS 1.0 namespace ({RSS_NAMESPACE})"
        )

    scraped_date = scraped_at or utc_now()
    listings = []
    for item in root.findall(_ITEM_TAG):
        fields = _flatten_item(item)
        listings.append(
            Listing(
                title=fields.get("title"),
                link=fields.get("link"),
                description=fields.get("description"),
                listed_date=parse_iso_datetime(fields.get("date")),
                scraped_date=scraped_date,
            )
        )

    logger.debug(
        f"Parsed {len(listings)} listings",
        extra={"event": "feed.parse.completed", "listing_count": len(listings)},
    )
    return listings
