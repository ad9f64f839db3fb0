"""
Election topic detection for pulsetext.

Provides keyword tables, keyword matching, topic/party scoring,
constituency detection and multi-article rollups.
"""

from pulsetext.detection.constituency_detector import (
    ConstituencyDetector,
    ConstituencyMatch,
    detect_constituency,
)
from pulsetext.detection.keyword_matcher import KeywordMatch, KeywordMatcher, MatchMode
from pulsetext.detection.keywords import (
    ConstituencyKeywordEntry,
    KeywordConfigError,
    Party,
    Topic,
    TopicDatabase,
    TopicKeywordSet,
    load_constituency_keywords,
    load_topic_database,
)
from pulsetext.detection.rollup import (
    CachedSummarizer,
    ScoredArticle,
    SentimentSummary,
    build_summary,
    score_articles,
    summarize_articles,
)
from pulsetext.detection.topic_analyzer import (
    ElectionAnalysisResult,
    ElectionTopicAnalyzer,
    Impact,
    TopicAnalysisResult,
    analyze_election_topics,
    analyze_topic_text,
    detect_topics,
    get_topic_party_impact,
)

__all__ = [
    "CachedSummarizer",
    "ConstituencyDetector",
    "ConstituencyKeywordEntry",
    "ConstituencyMatch",
    "ElectionAnalysisResult",
    "ElectionTopicAnalyzer",
    "Impact",
    "KeywordConfigError",
    "KeywordMatch",
    "KeywordMatcher",
    "MatchMode",
    "Party",
    "ScoredArticle",
    "SentimentSummary",
    "Topic",
    "TopicAnalysisResult",
    "TopicDatabase",
    "TopicKeywordSet",
    "analyze_election_topics",
    "analyze_topic_text",
    "build_summary",
    "detect_constituency",
    "detect_topics",
    "get_topic_party_impact",
    "load_constituency_keywords",
    "load_topic_database",
    "score_articles",
    "summarize_articles",
]
