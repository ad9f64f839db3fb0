"""
pulsetext - Keyword-driven election topic and sentiment analysis

Scores news and social text for election topics, per-party sentiment,
seat-impact estimates and constituency mentions.
"""

__version__ = "0.1.0"

from pulsetext.config import Config, load_config

__all__ = [
    "__version__",
    "Config",
    "load_config",
]
