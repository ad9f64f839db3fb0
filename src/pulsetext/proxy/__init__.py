"""
HTTP proxy for third-party APIs used by the dashboard.
"""

from pulsetext.proxy.app import create_app
from pulsetext.proxy.client import (
    TransientUpstreamError,
    UpstreamClient,
    UpstreamError,
    UpstreamRateLimited,
)

__all__ = [
    "TransientUpstreamError",
    "UpstreamClient",
    "UpstreamError",
    "UpstreamRateLimited",
    "create_app",
]
