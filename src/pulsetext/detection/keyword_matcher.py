"""
Keyword presence matching using the Aho-Corasick algorithm.

Provides case-insensitive multi-pattern matching for election topic and
place-name keywords. A keyword is reported at most once per text no matter
how often it occurs.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

import ahocorasick_rs as ahocorasick

logger = logging.getLogger(__name__)


class MatchMode(str, Enum):
    """How a keyword must sit in the text to count as present."""

    SUBSTRING = "substring"  # anywhere, including inside longer words
    WORD = "word"  # not flanked by word characters


@dataclass(frozen=True)
class KeywordMatch:
    """A keyword found in text."""

    keyword: str
    category: str
    subcategory: str | None = None


def normalize_keyword(keyword: str) -> str:
    """Normalize a keyword the same way matched text is normalized."""
    return keyword.lower()


class KeywordMatcher:
    """Aho-Corasick based keyword presence matcher.

    All keywords are compiled into a single automaton so that a text is
    scanned once regardless of how many keyword lists are registered.
    """

    def __init__(self, match_mode: MatchMode | str = MatchMode.SUBSTRING):
        """Initialize keyword matcher.

        Args:
            match_mode: ``substring`` or ``word``.
        """
        self.match_mode = MatchMode(match_mode)
        # (keyword, category, subcategory) in registration order
        self._entries: list[tuple[str, str, str | None]] = []
        self._seen_entries: set[tuple[str, str, str | None]] = set()
        self._categories: dict[str, int] = {}
        self._automaton: ahocorasick.AhoCorasick | None = None
        self._patterns: list[str] = []
        self._boundary_patterns: dict[str, re.Pattern[str]] = {}
        self._built = False

    def add_keywords(
        self,
        keywords: list[str] | tuple[str, ...],
        category: str = "default",
        subcategory: str | None = None,
    ) -> None:
        """Register keywords under a category.

        Args:
            keywords: Keywords to add. Blank keywords are skipped.
            category: Category name, e.g. a topic or constituency id.
            subcategory: Optional subcategory, e.g. a party/polarity list.
        """
        added = 0
        for keyword in keywords:
            key = normalize_keyword(keyword)
            if not key.strip():
                logger.warning(f"Skipping blank keyword in category '{category}'")
                continue
            entry = (key, category, subcategory)
            if entry in self._seen_entries:
                continue
            self._seen_entries.add(entry)
            self._entries.append(entry)
            added += 1

        self._categories[category] = self._categories.get(category, 0) + added
        self._built = False
        logger.debug(f"Added {added} keywords to '{category}' ({subcategory})")

    def add_category(
        self,
        name: str,
        keywords: list[str] | tuple[str, ...],
        subcategories: dict[str, list[str] | tuple[str, ...]] | None = None,
    ) -> None:
        """Register a category with optional subcategory keyword lists."""
        self.add_keywords(keywords, category=name)
        for subcat_name, subcat_keywords in (subcategories or {}).items():
            self.add_keywords(subcat_keywords, category=name, subcategory=subcat_name)

    def build(self) -> None:
        """Build the Aho-Corasick automaton.

        Called lazily by ``present`` when keywords changed since the last build.
        """
        if self._built:
            return

        self._patterns = list(dict.fromkeys(entry[0] for entry in self._entries))

        if not self._patterns:
            logger.warning("No patterns to build automaton")
            self._automaton = None
            self._built = True
            return

        self._automaton = ahocorasick.AhoCorasick(self._patterns)

        if self.match_mode is MatchMode.WORD:
            self._boundary_patterns = {
                pattern: re.compile(r"(?<!\w)" + re.escape(pattern) + r"(?!\w)")
                for pattern in self._patterns
            }

        self._built = True
        logger.info(f"Built automaton with {len(self._patterns)} patterns")

    def present(self, text: str | None) -> set[str]:
        """Return the normalized keywords that occur in text.

        Args:
            text: Text to search. ``None`` is treated as empty.

        Returns:
            Set of normalized keywords.
        """
        if not self._built:
            self.build()

        if not text or self._automaton is None:
            return set()

        search_text = text.lower()
        found = {
            self._patterns[pattern_idx]
            for pattern_idx, _start, _end in self._automaton.find_matches_as_indexes(
                search_text, overlapping=True
            )
        }

        if self.match_mode is MatchMode.WORD:
            found = {
                pattern for pattern in found
                if self._boundary_patterns[pattern].search(search_text)
            }

        return found

    def match(self, text: str | None) -> list[KeywordMatch]:
        """Find registered keywords present in text.

        Args:
            text: Text to search.

        Returns:
            One KeywordMatch per registered (keyword, category, subcategory)
            that is present, in registration order.
        """
        found = self.present(text)
        if not found:
            return []

        return [
            KeywordMatch(keyword=keyword, category=category, subcategory=subcategory)
            for keyword, category, subcategory in self._entries
            if keyword in found
        ]

    def get_categories(self) -> list[str]:
        """Get list of registered categories."""
        return list(self._categories.keys())

    def get_stats(self) -> dict[str, Any]:
        """Get matcher statistics.

        Returns:
            Dictionary with stats.
        """
        return {
            "total_keywords": len(self._entries),
            "unique_patterns": len({entry[0] for entry in self._entries}),
            "categories": len(self._categories),
            "built": self._built,
            "match_mode": self.match_mode.value,
            "category_details": dict(self._categories),
        }
