"""
Constituency detection from place names.

Tags news or social text with a known constituency by scanning place-name
aliases, including Bengali-script spellings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pulsetext.config import AnalysisConfig
from pulsetext.detection.keyword_matcher import KeywordMatcher, MatchMode
from pulsetext.detection.keywords import ConstituencyKeywordEntry, load_constituency_keywords

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConstituencyMatch:
    """A constituency found in text."""

    id: str
    name: str
    district: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"id": self.id, "name": self.name, "district": self.district}


class ConstituencyDetector:
    """First-match constituency detector.

    Entries are checked in table order and the first entry with any alias in
    the text wins. A text naming two constituencies therefore resolves to the
    one listed earlier, which is not necessarily the more salient one; use
    ``detect_all`` to see every candidate.
    """

    def __init__(
        self,
        entries: tuple[ConstituencyKeywordEntry, ...] | list[ConstituencyKeywordEntry] | None = None,
        match_mode: MatchMode | str = MatchMode.SUBSTRING,
    ):
        """Initialize detector.

        Args:
            entries: Constituency table in priority order. Loads the packaged
                table if None.
            match_mode: ``substring`` or ``word``.
        """
        self.entries = tuple(entries) if entries is not None else load_constituency_keywords()

        self._matcher = KeywordMatcher(match_mode=match_mode)
        for entry in self.entries:
            self._matcher.add_keywords(entry.keywords, category=entry.id)
        self._matcher.build()

    def detect_all(self, text: str | None) -> list[ConstituencyMatch]:
        """Every constituency with an alias in text, in table order."""
        present = self._matcher.present(text)
        if not present:
            return []

        return [
            ConstituencyMatch(id=entry.id, name=entry.name, district=entry.district)
            for entry in self.entries
            if any(keyword in present for keyword in entry.keywords)
        ]

    def detect(self, text: str | None) -> ConstituencyMatch | None:
        """First constituency in table order with an alias in text, or None."""
        present = self._matcher.present(text)
        if not present:
            return None

        for entry in self.entries:
            if any(keyword in present for keyword in entry.keywords):
                return ConstituencyMatch(id=entry.id, name=entry.name, district=entry.district)
        return None

    def get_all_constituency_keywords(self) -> list[ConstituencyKeywordEntry]:
        return list(self.entries)

    def get_stats(self) -> dict[str, Any]:
        """Get detector statistics."""
        return {
            "constituencies": len(self.entries),
            "districts": len({entry.district for entry in self.entries}),
            "keyword_matcher": self._matcher.get_stats(),
        }


_default_detector: ConstituencyDetector | None = None


def get_default_detector() -> ConstituencyDetector:
    """Shared detector over the packaged constituency table."""
    global _default_detector
    if _default_detector is None:
        _default_detector = ConstituencyDetector()
    return _default_detector


def detect_constituency(text: str | None) -> ConstituencyMatch | None:
    """Detect a constituency using the packaged table."""
    return get_default_detector().detect(text)


def create_detector(analysis: AnalysisConfig | None = None) -> ConstituencyDetector:
    """Create a detector from the analysis configuration."""
    analysis = analysis or AnalysisConfig()
    return ConstituencyDetector(
        entries=load_constituency_keywords(analysis.constituencies_path),
        match_mode=analysis.match_mode,
    )
