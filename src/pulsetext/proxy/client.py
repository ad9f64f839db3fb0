"""
Upstream API client for the proxy.

Wraps the social-media search API and the hosted model inference API with
bearer-token auth and exponential-backoff retries.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pulsetext.config import UpstreamConfig

logger = logging.getLogger(__name__)

SEARCH_TWEET_FIELDS = "created_at,public_metrics,author_id,entities"
SEARCH_USER_FIELDS = "name,username,profile_image_url"
DEFAULT_INFERENCE_OPTIONS = {"wait_for_model": True, "use_cache": False}


class UpstreamError(Exception):
    """Raised when an upstream API call fails."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Upstream error {status_code}: {message}")


class UpstreamRateLimited(UpstreamError):
    """Raised when the upstream API answers 429."""

    def __init__(self, message: str = "Upstream rate limit exceeded"):
        super().__init__(429, message)


class TransientUpstreamError(UpstreamError):
    """Connection failures and 5xx responses, which are retried."""


class UpstreamClient:
    """HTTP client for the search and inference APIs.

    Example:
        client = UpstreamClient(config.upstream)
        data = client.search_recent("BJP Bengal", max_results=20)
    """

    def __init__(
        self,
        config: UpstreamConfig | None = None,
        session: requests.Session | None = None,
    ):
        """Initialize upstream client.

        Args:
            config: Upstream settings. Uses defaults if None.
            session: HTTP session, injectable for tests.
        """
        self.config = config or UpstreamConfig()
        self._session = session or requests.Session()
        self._session.headers.update({
            "User-Agent": "pulsetext/0.1.0",
        })

    @property
    def search_configured(self) -> bool:
        return bool(self.config.search_bearer_token)

    @property
    def inference_configured(self) -> bool:
        return bool(self.config.inference_api_key)

    def _send(
        self,
        method: str,
        url: str,
        token: str,
        **kwargs: Any,
    ) -> Any:
        """Send one request and classify the failure, if any."""
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        try:
            response = self._session.request(
                method,
                url,
                headers=headers,
                timeout=self.config.request_timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise TransientUpstreamError(503, str(e)) from e

        if response.status_code == 429:
            raise UpstreamRateLimited(response.text or "Upstream rate limit exceeded")
        if response.status_code >= 500:
            raise TransientUpstreamError(response.status_code, response.text)
        if response.status_code >= 400:
            raise UpstreamError(response.status_code, response.text)

        return response.json()

    def _request(self, method: str, url: str, token: str, **kwargs: Any) -> Any:
        """Make a request, retrying transient failures with exponential backoff.

        Raises:
            UpstreamRateLimited: On 429, without retrying.
            UpstreamError: On other failures once retries are exhausted.
        """
        retryer = Retrying(
            retry=retry_if_exception_type(TransientUpstreamError),
            stop=stop_after_attempt(self.config.retry_max_attempts),
            wait=wait_exponential(
                multiplier=self.config.retry_base_delay,
                max=self.config.retry_max_delay,
            ),
            before_sleep=lambda state: logger.warning(
                f"Retrying {method} {url} (attempt {state.attempt_number}): "
                f"{state.outcome.exception()}"
            ),
            reraise=True,
        )
        logger.debug(f"Upstream request: {method} {url}")
        return retryer(self._send, method, url, token, **kwargs)

    def search_recent(self, query: str, max_results: int = 10) -> dict[str, Any]:
        """Search recent posts, excluding reposts.

        Args:
            query: Search query.
            max_results: Clamped to the API's 10-100 range.

        Returns:
            Upstream JSON body.
        """
        if not self.search_configured:
            raise UpstreamError(500, "Search API bearer token not configured")

        params = {
            "query": f"{query} -is:retweet",
            "max_results": min(max(int(max_results), 10), 100),
            "tweet.fields": SEARCH_TWEET_FIELDS,
            "user.fields": SEARCH_USER_FIELDS,
            "expansions": "author_id",
        }
        url = f"{self.config.search_api_base.rstrip('/')}/tweets/search/recent"
        return self._request("GET", url, self.config.search_bearer_token, params=params)

    def inference(
        self,
        model: str,
        inputs: Any,
        options: dict[str, Any] | None = None,
    ) -> Any:
        """Run a hosted model on inputs.

        Args:
            model: Model id, e.g. ``ai4bharat/IndicBERTv2-MLM-only``.
            inputs: Model inputs, passed through unchanged.
            options: Overrides for the default inference options.

        Returns:
            Upstream JSON body.
        """
        if not self.inference_configured:
            raise UpstreamError(500, "Inference API key not configured")

        body = {
            "inputs": inputs,
            "options": {**DEFAULT_INFERENCE_OPTIONS, **(options or {})},
        }
        url = f"{self.config.inference_api_base.rstrip('/')}/{model}"
        return self._request("POST", url, self.config.inference_api_key, json=body)
