"""
Sentiment rollups over many articles.

Summarizes analysed news and social posts per topic for a constituency (or
state-wide) within a lookback window.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from pulsetext.cache import TTLCache
from pulsetext.detection.constituency_detector import ConstituencyDetector, ConstituencyMatch
from pulsetext.detection.keywords import TOPIC_ORDER, Party, Topic
from pulsetext.detection.topic_analyzer import (
    ElectionAnalysisResult,
    ElectionTopicAnalyzer,
    Impact,
    score_to_impact,
)

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "description", "content", "text")
DATE_FIELDS = ("published_at", "created_at", "date")


@dataclass
class TopicSentiment:
    """Aggregated party sentiment for one topic."""

    topic: str
    label: str
    mentions: int = 0
    party_a_mentions: int = 0
    party_b_mentions: int = 0
    party_a_score: float = 0.0
    party_b_score: float = 0.0
    overall_sentiment: Impact = Impact.NEUTRAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "topic": self.topic,
            "label": self.label,
            "mentions": self.mentions,
            "party_a_mentions": self.party_a_mentions,
            "party_b_mentions": self.party_b_mentions,
            "party_a_score": round(self.party_a_score, 4),
            "party_b_score": round(self.party_b_score, 4),
            "overall_sentiment": self.overall_sentiment.value,
        }


@dataclass
class SentimentSummary:
    """Rollup of many analysed articles."""

    constituency: str | None
    days_back: int | None
    total_articles: int = 0
    party_a_dominant: int = 0
    party_b_dominant: int = 0
    neutral: int = 0
    party_a_avg_score: float = 0.0
    party_b_avg_score: float = 0.0
    topics: list[TopicSentiment] = field(default_factory=list)
    constituency_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "constituency": self.constituency,
            "days_back": self.days_back,
            "total_articles": self.total_articles,
            "party_a_dominant": self.party_a_dominant,
            "party_b_dominant": self.party_b_dominant,
            "neutral": self.neutral,
            "party_a_avg_score": round(self.party_a_avg_score, 4),
            "party_b_avg_score": round(self.party_b_avg_score, 4),
            "topics": [topic.to_dict() for topic in self.topics],
            "constituency_counts": dict(self.constituency_counts),
        }


def article_text(article: dict[str, Any]) -> str:
    """Join the text-bearing fields of an article or post."""
    parts = [article.get(name) for name in TEXT_FIELDS]
    return " ".join(part for part in parts if isinstance(part, str) and part.strip())


def parse_published_at(article: dict[str, Any]) -> datetime | None:
    """Best-effort timestamp of an article, timezone-aware UTC."""
    for name in DATE_FIELDS:
        value = article.get(name)
        if value is None:
            continue
        if isinstance(value, datetime):
            parsed = value
        else:
            try:
                parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
            except ValueError:
                logger.debug(f"Unparseable date {value!r} in field '{name}'")
                continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def within_window(
    article: dict[str, Any],
    days_back: int | None,
    now: datetime | None = None,
) -> bool:
    """Whether an article falls inside the lookback window.

    Articles without a usable date are kept.
    """
    if days_back is None:
        return True
    published = parse_published_at(article)
    if published is None:
        return True
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return published >= now - timedelta(days=days_back)


@dataclass
class ScoredArticle:
    """An article that passed the filters, with its analysis."""

    article: dict[str, Any]
    text: str
    constituency: ConstituencyMatch | None
    analysis: ElectionAnalysisResult


def score_articles(
    articles: Iterable[dict[str, Any]],
    analyzer: ElectionTopicAnalyzer,
    detector: ConstituencyDetector | None = None,
    constituency: str | None = None,
    days_back: int | None = 30,
    now: datetime | None = None,
) -> list[ScoredArticle]:
    """Filter articles by window and constituency, then analyze each once.

    Args:
        articles: Article or post dictionaries.
        analyzer: Topic analyzer to score each article.
        detector: Constituency detector. Required to filter by constituency.
        constituency: Constituency id or name to restrict to. None for all.
        days_back: Lookback window in days. None for no date filter.
        now: Reference time for the window.

    Returns:
        Scored articles in input order.
    """
    if constituency and detector is None:
        raise ValueError("A ConstituencyDetector is required to filter by constituency")

    wanted = constituency.lower() if constituency else None
    scored = []

    for article in articles:
        if not within_window(article, days_back, now):
            continue

        text = article_text(article)
        match = detector.detect(text) if detector else None
        if wanted and (
            match is None or wanted not in (match.id.lower(), match.name.lower())
        ):
            continue

        scored.append(ScoredArticle(
            article=article,
            text=text,
            constituency=match,
            analysis=analyzer.analyze(text),
        ))

    return scored


def build_summary(
    scored: list[ScoredArticle],
    analyzer: ElectionTopicAnalyzer,
    constituency: str | None = None,
    days_back: int | None = 30,
) -> SentimentSummary:
    """Roll scored articles up into per-topic and per-party sentiment."""
    topic_scores: dict[Topic, dict[str, list[float]]] = {
        topic: {"a": [], "b": []} for topic in TOPIC_ORDER
    }
    topic_mentions: Counter[Topic] = Counter()
    constituency_counts: Counter[str] = Counter()
    dominance: Counter[Party] = Counter()

    for item in scored:
        if item.constituency:
            constituency_counts[item.constituency.name] += 1

        result = item.analysis
        dominance[result.dominant_party] += 1

        for topic_result in result.topics:
            if not topic_result.detected:
                continue
            bucket = topic_scores[topic_result.topic]
            topic_mentions[topic_result.topic] += 1
            if topic_result.party_a_score != 0:
                bucket["a"].append(topic_result.party_a_score)
            if topic_result.party_b_score != 0:
                bucket["b"].append(topic_result.party_b_score)

    topics = []
    for topic in TOPIC_ORDER:
        topic_data = analyzer.topics.get(topic)
        bucket = topic_scores[topic]
        mean_a = sum(bucket["a"]) / len(bucket["a"]) if bucket["a"] else 0.0
        mean_b = sum(bucket["b"]) / len(bucket["b"]) if bucket["b"] else 0.0
        topics.append(TopicSentiment(
            topic=topic.value,
            label=topic_data.label if topic_data else topic.value,
            mentions=topic_mentions[topic],
            party_a_mentions=len(bucket["a"]),
            party_b_mentions=len(bucket["b"]),
            party_a_score=mean_a,
            party_b_score=mean_b,
            overall_sentiment=score_to_impact((mean_a + mean_b) / 2, analyzer.impact_threshold),
        ))

    total = len(scored)
    totals_a = sum(item.analysis.party_a_total_score for item in scored)
    totals_b = sum(item.analysis.party_b_total_score for item in scored)

    return SentimentSummary(
        constituency=constituency,
        days_back=days_back,
        total_articles=total,
        party_a_dominant=dominance[Party.PARTY_A],
        party_b_dominant=dominance[Party.PARTY_B],
        neutral=dominance[Party.NEUTRAL],
        party_a_avg_score=totals_a / total if total else 0.0,
        party_b_avg_score=totals_b / total if total else 0.0,
        topics=topics,
        constituency_counts=dict(constituency_counts.most_common()),
    )


def summarize_articles(
    articles: list[dict[str, Any]],
    analyzer: ElectionTopicAnalyzer,
    detector: ConstituencyDetector | None = None,
    constituency: str | None = None,
    days_back: int | None = 30,
    now: datetime | None = None,
) -> SentimentSummary:
    """Summarize party sentiment per topic across articles.

    Args:
        articles: Article or post dictionaries.
        analyzer: Topic analyzer to score each article.
        detector: Constituency detector. Required to filter by constituency.
        constituency: Constituency id or name to restrict to. None for all.
        days_back: Lookback window in days. None for no date filter.
        now: Reference time for the window.

    Returns:
        SentimentSummary for the selected articles, one topic entry per Topic.
    """
    scored = score_articles(
        articles,
        analyzer,
        detector=detector,
        constituency=constituency,
        days_back=days_back,
        now=now,
    )
    summary = build_summary(scored, analyzer, constituency=constituency, days_back=days_back)
    logger.info(
        f"Summarized {summary.total_articles} of {len(articles)} articles "
        f"(constituency={constituency}, days_back={days_back})"
    )
    return summary


def articles_digest(articles: list[dict[str, Any]]) -> str:
    """Content hash of an article list, for cache keys."""
    payload = json.dumps(
        [article_text(article) for article in articles], ensure_ascii=False
    ).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


class CachedSummarizer:
    """Memoizes rollups keyed by constituency, lookback window, reference time
    and content.

    Example:
        summarizer = CachedSummarizer(analyzer, detector, TTLCache(ttl_seconds=900))
        summary = summarizer.summarize(articles, constituency="Bhowanipore", days_back=7)
    """

    def __init__(
        self,
        analyzer: ElectionTopicAnalyzer,
        detector: ConstituencyDetector | None = None,
        cache: TTLCache | None = None,
    ):
        self.analyzer = analyzer
        self.detector = detector
        self.cache = cache or TTLCache()

    def summarize(
        self,
        articles: list[dict[str, Any]],
        constituency: str | None = None,
        days_back: int | None = 30,
        now: datetime | None = None,
    ) -> SentimentSummary:
        # now=None means "current time"; the cache TTL bounds how stale that gets
        key = (constituency, days_back, now, articles_digest(articles))
        summary = self.cache.get(key)
        if summary is None:
            summary = summarize_articles(
                articles,
                self.analyzer,
                detector=self.detector,
                constituency=constituency,
                days_back=days_back,
                now=now,
            )
            self.cache.set(key, summary)
        return summary
