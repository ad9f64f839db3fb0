"""Tests for keyword matcher."""

import pytest

from pulsetext.detection.keyword_matcher import KeywordMatch, KeywordMatcher, MatchMode


@pytest.fixture
def matcher():
    matcher = KeywordMatcher()
    matcher.add_category(
        "law_order",
        ["police"],
        subcategories={"party_a_negative": ["riot"], "party_b_positive": ["peace"]},
    )
    matcher.add_keywords(["peace", "north gate"], category="places")
    return matcher


class TestPresent:
    """Tests for keyword presence."""

    def test_case_insensitive(self, matcher):
        assert matcher.present("POLICE arrive after the Riot") == {"police", "riot"}

    def test_repeated_keyword_reported_once(self, matcher):
        assert matcher.present("riot riot riot") == {"riot"}

    def test_none_and_empty_text(self, matcher):
        assert matcher.present(None) == set()
        assert matcher.present("") == set()

    def test_multi_word_keyword(self, matcher):
        assert "north gate" in matcher.present("Crowds at North Gate today")

    def test_substring_mode_matches_inside_words(self, matcher):
        assert matcher.present("A patriotic and peaceful rally") == {"riot", "peace"}

    def test_word_mode_requires_boundaries(self):
        matcher = KeywordMatcher(match_mode=MatchMode.WORD)
        matcher.add_keywords(["riot", "peace"])

        assert matcher.present("A patriotic and peaceful rally") == set()
        assert matcher.present("Peace after the riot.") == {"riot", "peace"}

    def test_match_mode_from_string(self):
        assert KeywordMatcher(match_mode="word").match_mode is MatchMode.WORD

    def test_invalid_match_mode(self):
        with pytest.raises(ValueError):
            KeywordMatcher(match_mode="fuzzy")

    def test_bengali_keywords(self):
        matcher = KeywordMatcher()
        matcher.add_keywords(["সন্দেশখালি"])

        assert matcher.present("সন্দেশখালি নিয়ে বিক্ষোভ") == {"সন্দেশখালি"}

    def test_no_keywords(self, caplog):
        matcher = KeywordMatcher()
        matcher.build()

        assert matcher.present("anything at all") == set()
        assert "No patterns" in caplog.text

    def test_adding_keywords_rebuilds(self, matcher):
        assert matcher.present("budget session") == set()
        matcher.add_keywords(["budget"], category="economy")
        assert matcher.present("budget session") == {"budget"}


class TestMatch:
    """Tests for categorized matches."""

    def test_registration_order(self, matcher):
        matches = matcher.match("Peace returns; police withdraw")

        assert matches == [
            KeywordMatch(keyword="police", category="law_order"),
            KeywordMatch(keyword="peace", category="law_order", subcategory="party_b_positive"),
            KeywordMatch(keyword="peace", category="places"),
        ]

    def test_no_match(self, matcher):
        assert matcher.match("The weather is pleasant") == []


class TestAddKeywords:
    """Tests for keyword registration."""

    def test_blank_keywords_skipped(self):
        matcher = KeywordMatcher()
        matcher.add_keywords(["", "   ", "vote"])

        assert matcher.get_stats()["total_keywords"] == 1

    def test_duplicates_ignored(self):
        matcher = KeywordMatcher()
        matcher.add_keywords(["Vote", "vote"], category="elections")

        assert matcher.get_stats()["total_keywords"] == 1

    def test_stats(self, matcher):
        matcher.build()
        stats = matcher.get_stats()

        assert stats["total_keywords"] == 5
        assert stats["unique_patterns"] == 4
        assert stats["built"] is True
        assert stats["match_mode"] == "substring"
        assert matcher.get_categories() == ["law_order", "places"]
