"""Keyword relevance filtering.

- KeywordMatcher: annotates listings with the keyword substrings they contain
- MatchResult: per-field matches for one listing
- filter_matches: reduces annotated listings to the matched subset
"""

from .engine import KeywordMatcher, build_keyword_pattern, filter_matches
from .models import MatchResult

__all__ = [
    "KeywordMatcher",
    "MatchResult",
    "build_keyword_pattern",
    "filter_matches",
]
