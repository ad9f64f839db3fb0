"""Tests for the upstream API client."""

import pytest
import requests

from pulsetext.config import UpstreamConfig
from pulsetext.proxy.client import (
    TransientUpstreamError,
    UpstreamClient,
    UpstreamError,
    UpstreamRateLimited,
)


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=""):
        self.status_code = status_code
        self._json = json_data if json_data is not None else {}
        self.text = text

    def json(self):
        return self._json


class FakeSession:
    """Returns queued responses (or raises queued exceptions) in order."""

    def __init__(self, responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def upstream_config():
    return UpstreamConfig(
        search_bearer_token="search-token",
        inference_api_key="hf-key",
        search_api_base="https://search.test/2",
        inference_api_base="https://inference.test/models",
        retry_max_attempts=3,
        retry_base_delay=0,
    )


class TestSearchRecent:
    """Tests for recent search."""

    def test_request_shape(self, upstream_config):
        session = FakeSession([FakeResponse(json_data={"data": [{"id": "1"}]})])
        client = UpstreamClient(upstream_config, session=session)

        data = client.search_recent("Bengal election", max_results=5)

        assert data == {"data": [{"id": "1"}]}
        call = session.calls[0]
        assert call["method"] == "GET"
        assert call["url"] == "https://search.test/2/tweets/search/recent"
        assert call["params"]["query"] == "Bengal election -is:retweet"
        assert call["params"]["max_results"] == 10
        assert call["headers"]["Authorization"] == "Bearer search-token"
        assert call["timeout"] == 30

    def test_max_results_upper_clamp(self, upstream_config):
        session = FakeSession([FakeResponse()])
        UpstreamClient(upstream_config, session=session).search_recent("x", max_results=500)

        assert session.calls[0]["params"]["max_results"] == 100

    def test_missing_token(self):
        session = FakeSession([])
        client = UpstreamClient(UpstreamConfig(), session=session)

        with pytest.raises(UpstreamError) as exc_info:
            client.search_recent("x")

        assert exc_info.value.status_code == 500
        assert session.calls == []


class TestInference:
    """Tests for model inference."""

    def test_options_merged(self, upstream_config):
        session = FakeSession([FakeResponse(json_data=[{"label": "POSITIVE"}])])
        client = UpstreamClient(upstream_config, session=session)

        data = client.inference("org/model", "great news", options={"use_cache": True})

        assert data == [{"label": "POSITIVE"}]
        call = session.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == "https://inference.test/models/org/model"
        assert call["json"] == {
            "inputs": "great news",
            "options": {"wait_for_model": True, "use_cache": True},
        }
        assert call["headers"]["Authorization"] == "Bearer hf-key"

    def test_missing_key(self):
        client = UpstreamClient(UpstreamConfig(), session=FakeSession([]))

        assert client.inference_configured is False
        with pytest.raises(UpstreamError):
            client.inference("org/model", "text")


class TestRetries:
    """Tests for retry behaviour."""

    def test_server_error_retried(self, upstream_config):
        session = FakeSession([FakeResponse(503, text="busy"), FakeResponse(json_data={"ok": 1})])
        client = UpstreamClient(upstream_config, session=session)

        assert client.search_recent("x") == {"ok": 1}
        assert len(session.calls) == 2

    def test_connection_error_retried(self, upstream_config):
        session = FakeSession([requests.ConnectionError("reset"), FakeResponse(json_data={"ok": 1})])
        client = UpstreamClient(upstream_config, session=session)

        assert client.inference("org/model", "x") == {"ok": 1}
        assert len(session.calls) == 2

    def test_gives_up_after_max_attempts(self, upstream_config):
        session = FakeSession([FakeResponse(500, text="boom")] * 3)
        client = UpstreamClient(upstream_config, session=session)

        with pytest.raises(TransientUpstreamError) as exc_info:
            client.search_recent("x")

        assert exc_info.value.status_code == 500
        assert len(session.calls) == 3

    def test_rate_limit_not_retried(self, upstream_config):
        session = FakeSession([FakeResponse(429, text="slow down"), FakeResponse()])
        client = UpstreamClient(upstream_config, session=session)

        with pytest.raises(UpstreamRateLimited) as exc_info:
            client.search_recent("x")

        assert exc_info.value.status_code == 429
        assert len(session.calls) == 1

    def test_client_error_not_retried(self, upstream_config):
        session = FakeSession([FakeResponse(401, text="unauthorized"), FakeResponse()])
        client = UpstreamClient(upstream_config, session=session)

        with pytest.raises(UpstreamError) as exc_info:
            client.search_recent("x")

        assert exc_info.value.status_code == 401
        assert not isinstance(exc_info.value, TransientUpstreamError)
        assert len(session.calls) == 1
