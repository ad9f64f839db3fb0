"""
Command-line interface for pulsetext.

Provides CLI commands for text analysis, batch scoring and the API proxy.
"""

__all__ = ["main"]
