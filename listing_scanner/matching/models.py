"""Result type for keyword evaluation."""

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass(frozen=True)
class MatchResult:
    """Outcome of testing one listing against the keyword pattern.

    Attributes:
        title_matches: Every substring the pattern found in the title, in order
        description_matches: Every substring found in the description, in order
    """

    title_matches: List[str] = field(default_factory=list)
    description_matches: List[str] = field(default_factory=list)

    @property
    def is_match(self) -> bool:
        return bool(self.title_matches or self.description_matches)

    @property
    def terms(self) -> Tuple[str, ...]:
        """Title matches then description matches, first spelling kept per term."""
        seen = set()
        terms = []
        for text in [*self.title_matches, *self.description_matches]:
            key = text.lower()
            if key not in seen:
                seen.add(key)
                terms.append(text)
        return tuple(terms)
