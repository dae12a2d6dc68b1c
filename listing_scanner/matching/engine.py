"""Keyword relevance filter.

All configured keywords are joined into a single case-insensitive
alternation which is run independently against a listing's title and its
description. Matching is plain substring matching unless word boundaries
are requested, so "data" is found inside "database" by default.
"""

import logging
import re
from typing import Iterable, List, Optional, Sequence

from listing_scanner.domain.models import AnnotatedListing, Listing
from listing_scanner.logging import get_logger

from .models import MatchResult

logger = get_logger(__name__, component="matching")

# An unescaped quantifier followed by "+", e.g. "c++"
_STACKED_QUANTIFIER = re.compile(r"(?<!\\)(?:[*+?]|\})\+")


def build_keyword_pattern(keywords: Sequence[str], word_boundaries: bool = False) -> re.Pattern:
    """Compile keywords into one case-insensitive alternation.

    Keywords are used as regex fragments, so ``"java(script)?"`` works and an
    unbalanced fragment fails. Literal regex characters must be escaped:
    ``"c\\+\\+"`` matches "C++". A stacked quantifier such as ``"c++"`` is
    rejected on every Python version, even where it would compile as a
    possessive quantifier.

    Args:
        keywords: Ordered keyword strings (assumed non-empty)
        word_boundaries: Anchor the alternation on ``\\b`` at both ends

    Returns:
        Compiled pattern

    Raises:
        re.error: If a keyword stacks quantifiers or the joined pattern is not
            a valid regular expression
    """
    for keyword in keywords:
        if _STACKED_QUANTIFIER.search(keyword):
            raise re.error(
                f"keyword '{keyword}' repeats a quantifier; escape literal characters, "
                f"e.g. '{re.escape(keyword)}'"
            )

    alternation = "|".join(keywords)
    if word_boundaries:
        alternation = rf"\b(?:{alternation})\b"
    return re.compile(alternation, re.IGNORECASE)


class KeywordMatcher:
    """Tags listings with the keyword substrings they contain."""

    def __init__(
        self,
        keywords: Sequence[str],
        word_boundaries: bool = False,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.keywords = list(keywords)
        self.word_boundaries = word_boundaries
        self.pattern = build_keyword_pattern(self.keywords, word_boundaries)
        self.logger = logger_instance or logger

    def evaluate(self, listing: Listing) -> MatchResult:
        """Run the pattern over title and description separately.

        A missing field is searched as empty text.
        """
        return MatchResult(
            title_matches=self._find(listing.title),
            description_matches=self._find(listing.description),
        )

    def _find(self, text: Optional[str]) -> List[str]:
        # group(0) so keywords containing groups still report the whole hit
        return [m.group(0) for m in self.pattern.finditer(text or "") if m.group(0)]

    def annotate(self, listing: Listing) -> AnnotatedListing:
        result = self.evaluate(listing)
        if result.is_match:
            self.logger.debug(
                f"Listing matched: {listing.title}",
                extra={"link": listing.link, "terms": list(result.terms)},
            )
        return AnnotatedListing.from_listing(listing, match=result.terms)

    def annotate_all(self, listings: Iterable[Listing]) -> List[AnnotatedListing]:
        return [self.annotate(listing) for listing in listings]


def filter_matches(listings: Iterable[AnnotatedListing]) -> List[AnnotatedListing]:
    """Keep only listings with a non-empty match, preserving order."""
    return [listing for listing in listings if listing.match]
