"""
Keyword and brand tagging of article records.
"""
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Pattern, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagResult:
    keywords: Tuple[str, ...] = ()
    brands: Tuple[str, ...] = ()


class Tagger:
    """
    Matches article text against keyword and brand vocabularies.

    Matching is case-insensitive and anchored on word boundaries, so "ai"
    matches "AI retail" but not "retail". Matches keep vocabulary order.
    """

    def __init__(self, keywords: Iterable[str] = (), brands: Iterable[str] = ()):
        self.keywords = self._compile(keywords)
        self.brands = self._compile(brands)
        logger.debug(f"Tagger initialized with {len(self.keywords)} keywords and {len(self.brands)} brands")

    @staticmethod
    def _compile(vocabulary: Iterable[str]) -> List[Tuple[str, Pattern]]:
        return [
            (term, re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE))
            for term in vocabulary
        ]

    def tag(self, title: str, excerpt: str) -> TagResult:
        """
        Tag an article by its title and excerpt.

        Args:
            title: Article title
            excerpt: Sanitized article excerpt

        Returns:
            TagResult with the matched keywords and brands
        """
        text = f"{title} {excerpt}".lower()
        return TagResult(
            keywords=tuple(term for term, pattern in self.keywords if pattern.search(text)),
            brands=tuple(term for term, pattern in self.brands if pattern.search(text)),
        )
