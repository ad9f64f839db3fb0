"""Pytest fixtures and configuration."""

import json

import pytest

from pulsetext.detection.constituency_detector import ConstituencyDetector
from pulsetext.detection.keywords import build_constituency_entries, build_topic_database
from pulsetext.detection.topic_analyzer import ElectionTopicAnalyzer


@pytest.fixture
def topic_table():
    """Small two-topic keyword table with one keyword per list."""
    return {
        "parties": {"party_a": "Alpha", "party_b": "Beta"},
        "topics": [
            {
                "topic": "law_order",
                "label": "Law & Order",
                "party_a_positive": ["safe state"],
                "party_a_negative": ["riot"],
                "party_b_positive": ["peace"],
                "party_b_negative": ["goons"],
                "general": ["police"],
            },
            {
                "topic": "development",
                "label": "Development",
                "party_a_positive": ["metro line"],
                "party_a_negative": ["false promise"],
                "party_b_positive": ["duare sarkar"],
                "party_b_negative": ["scheme scam"],
                "general": ["road"],
            },
        ],
    }


@pytest.fixture
def constituency_table():
    """Two constituencies; Northfield is listed first."""
    return {
        "constituencies": [
            {
                "id": "north",
                "name": "Northfield",
                "district": "Upper",
                "keywords": ["northfield", "north gate"],
            },
            {
                "id": "south",
                "name": "Southport",
                "district": "Lower",
                "keywords": ["southport"],
            },
        ],
    }


@pytest.fixture
def topic_database(topic_table):
    return build_topic_database(topic_table)


@pytest.fixture
def analyzer(topic_database):
    """Analyzer over the synthetic topic table."""
    return ElectionTopicAnalyzer(topics=topic_database)


@pytest.fixture
def detector(constituency_table):
    """Detector over the synthetic constituency table."""
    return ConstituencyDetector(entries=build_constituency_entries(constituency_table))


@pytest.fixture
def topics_file(topic_table, tmp_path):
    file_path = tmp_path / "topics.json"
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(topic_table, f)
    return file_path


@pytest.fixture
def constituencies_file(constituency_table, tmp_path):
    file_path = tmp_path / "constituencies.json"
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(constituency_table, f)
    return file_path


@pytest.fixture
def sample_articles():
    """Articles spanning both constituencies, one outside a 30-day window."""
    return [
        {
            "id": "1",
            "title": "Metro line reaches Northfield",
            "description": "Commuters welcome the new service",
            "published_at": "2024-03-10T08:00:00Z",
        },
        {
            "id": "2",
            "text": "Goons attack shop in Southport, police silent",
            "created_at": "2024-03-09T12:00:00Z",
        },
        {
            "id": "3",
            "title": "Old riot recalled",
            "published_at": "2023-01-01T00:00:00Z",
        },
        {
            "id": "4",
            "content": "Duare sarkar camp held in Northfield",
        },
    ]


@pytest.fixture
def sample_articles_file(sample_articles, tmp_path):
    """Create a temporary file with sample articles."""
    file_path = tmp_path / "articles.json"
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump({"items": sample_articles}, f)
    return file_path


@pytest.fixture
def sample_config_file(tmp_path, topics_file, constituencies_file):
    """Create a temporary config file pointing at the synthetic tables."""
    import yaml

    config_path = tmp_path / "config.yaml"
    config_data = {
        "analysis": {
            "topics_path": str(topics_file),
            "constituencies_path": str(constituencies_file),
        },
        "storage": {
            "raw_data_path": str(tmp_path / "raw"),
            "processed_data_path": str(tmp_path / "processed"),
        },
        "log_level": "WARNING",
    }
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path
