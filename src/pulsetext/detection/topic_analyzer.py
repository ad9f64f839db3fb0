"""
Election topic analysis.

Scores text against per-topic party keyword lists and combines the topic
scores into party totals, a seat-impact estimate and a dominant party.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pulsetext.config import AnalysisConfig
from pulsetext.detection.keyword_matcher import KeywordMatcher, MatchMode
from pulsetext.detection.keywords import (
    KEYWORD_LISTS,
    TOPIC_ORDER,
    Party,
    Topic,
    TopicDatabase,
    TopicKeywordSet,
    load_topic_database,
)

logger = logging.getLogger(__name__)

DEFAULT_IMPACT_THRESHOLD = 0.2
# Bad news costs more seats than good news gains.
DEFAULT_POSITIVE_SEAT_WEIGHT = 0.1
DEFAULT_NEGATIVE_SEAT_WEIGHT = 0.15
DEFAULT_DOMINANCE_MARGIN = 0.5


class Impact(str, Enum):
    """Categorical reduction of a party score."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


@dataclass
class TopicAnalysisResult:
    """Result of scoring one text against one topic."""

    topic: Topic
    label: str
    detected: bool = False
    party_a_impact: Impact = Impact.NEUTRAL
    party_b_impact: Impact = Impact.NEUTRAL
    party_a_score: float = 0.0
    party_b_score: float = 0.0
    matched_keywords: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "topic": self.topic.value,
            "label": self.label,
            "detected": self.detected,
            "party_a_impact": self.party_a_impact.value,
            "party_b_impact": self.party_b_impact.value,
            "party_a_score": self.party_a_score,
            "party_b_score": self.party_b_score,
            "matched_keywords": list(self.matched_keywords),
        }


@dataclass
class ElectionAnalysisResult:
    """Combined result of scoring one text against every topic."""

    topics: list[TopicAnalysisResult]
    party_a_total_score: float = 0.0
    party_b_total_score: float = 0.0
    party_a_seat_impact: float = 0.0
    party_b_seat_impact: float = 0.0
    dominant_party: Party = Party.NEUTRAL

    @property
    def detected_topics(self) -> list[Topic]:
        """Topics detected in the text, in reporting order."""
        return [result.topic for result in self.topics if result.detected]

    def get(self, topic: Topic | str) -> TopicAnalysisResult | None:
        """Get the result for one topic."""
        topic = Topic(topic)
        for result in self.topics:
            if result.topic is topic:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "topics": [result.to_dict() for result in self.topics],
            "party_a_total_score": self.party_a_total_score,
            "party_b_total_score": self.party_b_total_score,
            "party_a_seat_impact": self.party_a_seat_impact,
            "party_b_seat_impact": self.party_b_seat_impact,
            "dominant_party": self.dominant_party.value,
        }


@dataclass
class PartyImpact:
    """Per-party impact and score for a single topic."""

    party_a_impact: Impact = Impact.NEUTRAL
    party_b_impact: Impact = Impact.NEUTRAL
    party_a_score: float = 0.0
    party_b_score: float = 0.0


def party_score(positive_count: int, negative_count: int) -> float:
    """Net polarity normalized by total matches, in [-1, 1]."""
    return (positive_count - negative_count) / max(positive_count + negative_count, 1)


def score_to_impact(score: float, threshold: float = DEFAULT_IMPACT_THRESHOLD) -> Impact:
    """Reduce a score to positive, negative or neutral."""
    if score > threshold:
        return Impact.POSITIVE
    if score < -threshold:
        return Impact.NEGATIVE
    return Impact.NEUTRAL


def seat_impact(
    total_score: float,
    positive_weight: float = DEFAULT_POSITIVE_SEAT_WEIGHT,
    negative_weight: float = DEFAULT_NEGATIVE_SEAT_WEIGHT,
) -> float:
    """Linear seat-change heuristic for an aggregate score."""
    if total_score > 0:
        return total_score * positive_weight
    return total_score * negative_weight


def dominant_party(
    party_a_total: float,
    party_b_total: float,
    margin: float = DEFAULT_DOMINANCE_MARGIN,
) -> Party:
    """Party whose total beats the other's by strictly more than margin."""
    if party_a_total > party_b_total + margin:
        return Party.PARTY_A
    if party_b_total > party_a_total + margin:
        return Party.PARTY_B
    return Party.NEUTRAL


def _score_topic(
    present: set[str],
    topic_data: TopicKeywordSet,
    party_labels: dict[str, str],
    impact_threshold: float,
) -> TopicAnalysisResult:
    """Score one topic given the set of keywords present in the text."""
    label_a = party_labels.get(Party.PARTY_A.value, "PartyA")
    label_b = party_labels.get(Party.PARTY_B.value, "PartyB")
    tags = {
        "party_a_positive": f"{label_a}+",
        "party_a_negative": f"{label_a}-",
        "party_b_positive": f"{label_b}+",
        "party_b_negative": f"{label_b}-",
    }

    counts = dict.fromkeys(KEYWORD_LISTS, 0)
    matched_keywords: list[str] = []

    for list_name, keywords in topic_data.keyword_lists().items():
        for keyword in keywords:
            if keyword in present:
                counts[list_name] += 1
                if list_name in tags:
                    matched_keywords.append(f"{tags[list_name]}: {keyword}")

    score_a = party_score(counts["party_a_positive"], counts["party_a_negative"])
    score_b = party_score(counts["party_b_positive"], counts["party_b_negative"])

    return TopicAnalysisResult(
        topic=topic_data.topic,
        label=topic_data.label,
        detected=bool(matched_keywords) or counts["general"] > 0,
        party_a_impact=score_to_impact(score_a, impact_threshold),
        party_b_impact=score_to_impact(score_b, impact_threshold),
        party_a_score=score_a,
        party_b_score=score_b,
        matched_keywords=matched_keywords,
    )


def _register_topic(matcher: KeywordMatcher, topic_data: TopicKeywordSet) -> None:
    for list_name, keywords in topic_data.keyword_lists().items():
        matcher.add_keywords(keywords, category=topic_data.topic.value, subcategory=list_name)


def analyze_topic_text(
    text: str | None,
    topic_data: TopicKeywordSet,
    impact_threshold: float = DEFAULT_IMPACT_THRESHOLD,
    match_mode: MatchMode | str = MatchMode.SUBSTRING,
    party_labels: dict[str, str] | None = None,
) -> TopicAnalysisResult:
    """Score a text against a single topic keyword set.

    Builds a throwaway matcher; use ElectionTopicAnalyzer to score many
    texts against the same table.

    Args:
        text: Text to score. ``None`` is treated as empty.
        topic_data: Keyword lists for the topic.
        impact_threshold: Score magnitude above which impact is non-neutral.
        match_mode: ``substring`` or ``word``.
        party_labels: Labels used to tag matched keywords.

    Returns:
        TopicAnalysisResult for the topic.
    """
    matcher = KeywordMatcher(match_mode=match_mode)
    _register_topic(matcher, topic_data)
    return _score_topic(
        matcher.present(text),
        topic_data,
        party_labels or {},
        impact_threshold,
    )


class ElectionTopicAnalyzer:
    """Keyword-driven election topic and party sentiment analyzer.

    The keyword table is injected at construction and compiled into one
    automaton; analysis methods are pure and safe to call concurrently.

    Example:
        analyzer = ElectionTopicAnalyzer()
        result = analyzer.analyze("TMC denies Sandeshkhali violence claims")
        result.dominant_party  # Party.PARTY_A
    """

    def __init__(
        self,
        topics: TopicDatabase | None = None,
        impact_threshold: float = DEFAULT_IMPACT_THRESHOLD,
        positive_seat_weight: float = DEFAULT_POSITIVE_SEAT_WEIGHT,
        negative_seat_weight: float = DEFAULT_NEGATIVE_SEAT_WEIGHT,
        dominance_margin: float = DEFAULT_DOMINANCE_MARGIN,
        match_mode: MatchMode | str = MatchMode.SUBSTRING,
    ):
        """Initialize analyzer.

        Args:
            topics: Topic keyword table. Loads the packaged table if None.
            impact_threshold: Score magnitude above which impact is non-neutral.
            positive_seat_weight: Seats per point of positive total score.
            negative_seat_weight: Seats per point of negative total score.
            dominance_margin: Deadband a total must exceed to dominate.
            match_mode: ``substring`` or ``word``.
        """
        self.topics = topics if topics is not None else load_topic_database()
        self.impact_threshold = impact_threshold
        self.positive_seat_weight = positive_seat_weight
        self.negative_seat_weight = negative_seat_weight
        self.dominance_margin = dominance_margin

        self._matcher = KeywordMatcher(match_mode=match_mode)
        for topic_data in self.topics.topics:
            _register_topic(self._matcher, topic_data)
        self._matcher.build()

    @property
    def match_mode(self) -> MatchMode:
        return self._matcher.match_mode

    def analyze_topic(self, text: str | None, topic: Topic | str) -> TopicAnalysisResult:
        """Score text against one topic.

        Returns a neutral, undetected result for topics missing from the table.
        """
        topic = Topic(topic)
        topic_data = self.topics.get(topic)
        if topic_data is None:
            return TopicAnalysisResult(topic=topic, label=topic.value)

        return _score_topic(
            self._matcher.present(text),
            topic_data,
            self.topics.party_labels,
            self.impact_threshold,
        )

    def analyze(self, text: str | None) -> ElectionAnalysisResult:
        """Score text against every topic and combine the results.

        Always reports all five topics in enum order; topics missing from the
        keyword table come back neutral and undetected.
        """
        present = self._matcher.present(text)
        results = []
        for topic in TOPIC_ORDER:
            topic_data = self.topics.get(topic)
            if topic_data is None:
                results.append(TopicAnalysisResult(topic=topic, label=topic.value))
                continue
            results.append(
                _score_topic(present, topic_data, self.topics.party_labels, self.impact_threshold)
            )

        party_a_total = sum(result.party_a_score for result in results)
        party_b_total = sum(result.party_b_score for result in results)

        return ElectionAnalysisResult(
            topics=results,
            party_a_total_score=party_a_total,
            party_b_total_score=party_b_total,
            party_a_seat_impact=seat_impact(
                party_a_total, self.positive_seat_weight, self.negative_seat_weight
            ),
            party_b_seat_impact=seat_impact(
                party_b_total, self.positive_seat_weight, self.negative_seat_weight
            ),
            dominant_party=dominant_party(party_a_total, party_b_total, self.dominance_margin),
        )

    def analyze_batch(self, texts: list[str | None]) -> list[ElectionAnalysisResult]:
        """Analyze multiple texts."""
        return [self.analyze(text) for text in texts]

    def detect_topics(self, text: str | None) -> dict[str, bool]:
        """Reduce an analysis to one presence flag per topic."""
        return {result.topic.value: result.detected for result in self.analyze(text).topics}

    def get_topic_party_impact(self, text: str | None, topic: Topic | str) -> PartyImpact:
        """Party impacts and scores for a single topic."""
        result = self.analyze_topic(text, topic)
        return PartyImpact(
            party_a_impact=result.party_a_impact,
            party_b_impact=result.party_b_impact,
            party_a_score=result.party_a_score,
            party_b_score=result.party_b_score,
        )

    def get_all_topic_keywords(self) -> list[TopicKeywordSet]:
        """All topic keyword sets, in reporting order."""
        return list(self.topics.topics)

    def party_label(self, party: Party | str) -> str:
        return self.topics.label_for(party)

    def get_stats(self) -> dict[str, Any]:
        """Get analyzer statistics."""
        return {
            "topics": [topic_data.topic.value for topic_data in self.topics.topics],
            "party_labels": dict(self.topics.party_labels),
            "impact_threshold": self.impact_threshold,
            "positive_seat_weight": self.positive_seat_weight,
            "negative_seat_weight": self.negative_seat_weight,
            "dominance_margin": self.dominance_margin,
            "keyword_matcher": self._matcher.get_stats(),
        }


_default_analyzer: ElectionTopicAnalyzer | None = None


def get_default_analyzer() -> ElectionTopicAnalyzer:
    """Shared analyzer over the packaged keyword table."""
    global _default_analyzer
    if _default_analyzer is None:
        _default_analyzer = ElectionTopicAnalyzer()
    return _default_analyzer


def analyze_election_topics(text: str | None) -> ElectionAnalysisResult:
    """Analyze text with the packaged keyword table."""
    return get_default_analyzer().analyze(text)


def detect_topics(text: str | None) -> dict[str, bool]:
    """Topic presence flags using the packaged keyword table."""
    return get_default_analyzer().detect_topics(text)


def get_topic_party_impact(text: str | None, topic: Topic | str) -> PartyImpact:
    """Single-topic party impact using the packaged keyword table."""
    return get_default_analyzer().get_topic_party_impact(text, topic)


def create_analyzer(analysis: AnalysisConfig | None = None) -> ElectionTopicAnalyzer:
    """Create an analyzer from the analysis configuration.

    Args:
        analysis: Analysis settings. Uses defaults if None.

    Returns:
        Configured ElectionTopicAnalyzer.
    """
    analysis = analysis or AnalysisConfig()
    return ElectionTopicAnalyzer(
        topics=load_topic_database(analysis.topics_path),
        impact_threshold=analysis.impact_threshold,
        positive_seat_weight=analysis.positive_seat_weight,
        negative_seat_weight=analysis.negative_seat_weight,
        dominance_margin=analysis.dominance_margin,
        match_mode=analysis.match_mode,
    )
