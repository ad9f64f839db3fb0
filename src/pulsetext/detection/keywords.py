"""
Election topic and constituency keyword tables.

Keyword tables are plain JSON data. They are loaded and validated once and
then injected into the analyzer and detector, so the same logic runs against
the shipped Bengal tables or any synthetic table.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_TOPICS_PATH = DATA_DIR / "topics.json"
DEFAULT_CONSTITUENCIES_PATH = DATA_DIR / "constituencies.json"

KEYWORD_LISTS = (
    "party_a_positive",
    "party_a_negative",
    "party_b_positive",
    "party_b_negative",
    "general",
)


class KeywordConfigError(ValueError):
    """Raised when a keyword table is malformed."""


class Topic(str, Enum):
    """Election issue categories, in reporting order."""

    DEVELOPMENT = "development"
    LAW_ORDER = "law_order"
    EMPLOYMENT = "employment"
    CORRUPTION = "corruption"
    MINORITY = "minority"


TOPIC_ORDER: tuple[Topic, ...] = tuple(Topic)


class Party(str, Enum):
    """The two tracked parties, plus the no-winner outcome."""

    PARTY_A = "party_a"
    PARTY_B = "party_b"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class TopicKeywordSet:
    """Keyword lists for one topic."""

    topic: Topic
    label: str
    party_a_positive: tuple[str, ...] = ()
    party_a_negative: tuple[str, ...] = ()
    party_b_positive: tuple[str, ...] = ()
    party_b_negative: tuple[str, ...] = ()
    general: tuple[str, ...] = ()

    def keyword_lists(self) -> dict[str, tuple[str, ...]]:
        """Return the five lists keyed by list name."""
        return {name: getattr(self, name) for name in KEYWORD_LISTS}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "topic": self.topic.value,
            "label": self.label,
            **{name: list(keywords) for name, keywords in self.keyword_lists().items()},
        }


@dataclass(frozen=True)
class TopicDatabase:
    """All topic keyword sets plus the display labels of both parties."""

    topics: tuple[TopicKeywordSet, ...]
    party_labels: dict[str, str] = field(
        default_factory=lambda: {Party.PARTY_A.value: "PartyA", Party.PARTY_B.value: "PartyB"}
    )

    def get(self, topic: Topic | str) -> TopicKeywordSet | None:
        """Look up the keyword set for a topic."""
        topic = Topic(topic)
        for topic_set in self.topics:
            if topic_set.topic is topic:
                return topic_set
        return None

    def label_for(self, party: Party | str) -> str:
        """Display label for a party."""
        party = Party(party)
        return self.party_labels.get(party.value, party.value)


@dataclass(frozen=True)
class ConstituencyKeywordEntry:
    """Place-name aliases for one constituency."""

    id: str
    name: str
    district: str
    keywords: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "district": self.district,
            "keywords": list(self.keywords),
        }


def _clean_keywords(raw: Any, where: str) -> tuple[str, ...]:
    """Lower-case a keyword list, rejecting blanks and non-strings."""
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        raise KeywordConfigError(f"{where}: expected a list of keywords")

    keywords = []
    for keyword in raw:
        if not isinstance(keyword, str) or not keyword.strip():
            raise KeywordConfigError(f"{where}: blank or non-string keyword {keyword!r}")
        keywords.append(keyword.lower())
    return tuple(keywords)


def build_topic_keyword_set(data: dict[str, Any]) -> TopicKeywordSet:
    """Build and validate one TopicKeywordSet from a dictionary.

    Raises:
        KeywordConfigError: If the topic is unknown or every list is empty.
    """
    raw_topic = data.get("topic")
    try:
        topic = Topic(raw_topic)
    except ValueError as e:
        raise KeywordConfigError(f"Unknown topic: {raw_topic!r}") from e

    lists = {
        name: _clean_keywords(data.get(name), f"{topic.value}.{name}")
        for name in KEYWORD_LISTS
    }

    if not any(lists.values()):
        raise KeywordConfigError(f"Topic '{topic.value}' has no keywords in any list")

    if not lists["general"]:
        logger.warning(
            f"Topic '{topic.value}' has no general keywords; "
            "it is only detected through party keywords"
        )

    return TopicKeywordSet(
        topic=topic,
        label=data.get("label") or topic.value.replace("_", " ").title(),
        **lists,
    )


def build_topic_database(data: dict[str, Any]) -> TopicDatabase:
    """Build and validate a TopicDatabase from a dictionary.

    Topics are reordered to the fixed Topic order.

    Raises:
        KeywordConfigError: On duplicate topics or invalid keyword sets.
    """
    topic_sets: dict[Topic, TopicKeywordSet] = {}
    for entry in data.get("topics", []):
        topic_set = build_topic_keyword_set(entry)
        if topic_set.topic in topic_sets:
            raise KeywordConfigError(f"Duplicate topic: {topic_set.topic.value}")
        topic_sets[topic_set.topic] = topic_set

    if not topic_sets:
        raise KeywordConfigError("Topic table is empty")

    party_labels = {
        Party.PARTY_A.value: "PartyA",
        Party.PARTY_B.value: "PartyB",
    }
    party_labels.update(data.get("parties", {}))

    return TopicDatabase(
        topics=tuple(topic_sets[topic] for topic in TOPIC_ORDER if topic in topic_sets),
        party_labels=party_labels,
    )


def build_constituency_entries(data: dict[str, Any]) -> tuple[ConstituencyKeywordEntry, ...]:
    """Build and validate constituency entries, preserving table order.

    Raises:
        KeywordConfigError: On missing fields, empty keyword lists or duplicate ids.
    """
    entries = []
    seen_ids: set[str] = set()

    for raw in data.get("constituencies", []):
        constituency_id = raw.get("id")
        if not constituency_id or not raw.get("name"):
            raise KeywordConfigError(f"Constituency entry missing id or name: {raw!r}")
        if constituency_id in seen_ids:
            raise KeywordConfigError(f"Duplicate constituency id: {constituency_id}")

        keywords = _clean_keywords(raw.get("keywords"), constituency_id)
        if not keywords:
            raise KeywordConfigError(f"Constituency '{constituency_id}' has no keywords")

        seen_ids.add(constituency_id)
        entries.append(ConstituencyKeywordEntry(
            id=constituency_id,
            name=raw["name"],
            district=raw.get("district", ""),
            keywords=keywords,
        ))

    return tuple(entries)


def _read_json(filepath: Path) -> dict[str, Any]:
    with open(filepath, encoding="utf-8") as f:
        return json.load(f)


def load_topic_database(filepath: str | Path | None = None) -> TopicDatabase:
    """Load topic keywords from a JSON file.

    Expected format:
    {
        "parties": {"party_a": "BJP", "party_b": "TMC"},
        "topics": [
            {
                "topic": "development",
                "label": "Development & Infrastructure",
                "party_a_positive": ["double engine sarkar"],
                "party_a_negative": ["jumla"],
                "party_b_positive": ["duare sarkar"],
                "party_b_negative": ["scheme scam"],
                "general": ["development", "road"]
            }
        ]
    }

    Args:
        filepath: Path to JSON file. Defaults to the packaged table.

    Returns:
        Validated TopicDatabase.
    """
    filepath = Path(filepath) if filepath else DEFAULT_TOPICS_PATH
    database = build_topic_database(_read_json(filepath))
    logger.info(f"Loaded {len(database.topics)} topics from {filepath}")
    return database


def load_constituency_keywords(
    filepath: str | Path | None = None,
) -> tuple[ConstituencyKeywordEntry, ...]:
    """Load constituency keywords from a JSON file.

    Args:
        filepath: Path to JSON file. Defaults to the packaged table.

    Returns:
        Validated entries in file order.
    """
    filepath = Path(filepath) if filepath else DEFAULT_CONSTITUENCIES_PATH
    entries = build_constituency_entries(_read_json(filepath))
    logger.info(f"Loaded {len(entries)} constituencies from {filepath}")
    return entries
