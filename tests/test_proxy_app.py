"""Tests for the API proxy application."""

import pytest
from fastapi.testclient import TestClient

from pulsetext.config import Config
from pulsetext.proxy.app import create_app
from pulsetext.proxy.client import UpstreamError, UpstreamRateLimited


class FakeUpstream:
    """Stands in for UpstreamClient."""

    def __init__(self, search_configured=True, inference_configured=True):
        self.search_configured = search_configured
        self.inference_configured = inference_configured
        self.search_calls = []
        self.inference_calls = []
        self.search_error = None

    def search_recent(self, query, max_results=10):
        self.search_calls.append((query, max_results))
        if self.search_error:
            raise self.search_error
        return {"data": [{"id": "1", "text": query}], "meta": {"result_count": 1}}

    def inference(self, model, inputs, options=None):
        self.inference_calls.append((model, inputs, options))
        return [[{"label": "positive", "score": 0.9}]]


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def client(upstream, analyzer, detector):
    app = create_app(Config(), client=upstream, analyzer=analyzer, detector=detector)
    return TestClient(app)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["search_token_configured"] is True


class TestSearch:
    """Tests for the search route."""

    def test_missing_query(self, client, upstream):
        response = client.get("/api/twitter/search")

        assert response.status_code == 400
        assert response.json()["error"] == "Query parameter required"
        assert upstream.search_calls == []

    def test_cached(self, client, upstream):
        first = client.get("/api/twitter/search", params={"query": "bengal", "max_results": 20})
        second = client.get("/api/twitter/search", params={"query": "bengal", "max_results": 20})

        assert first.status_code == 200
        assert first.headers["X-Cache"] == "MISS"
        assert second.headers["X-Cache"] == "HIT"
        assert second.json() == first.json()
        assert upstream.search_calls == [("bengal", 20)]

    def test_non_integer_max_results(self, client, upstream):
        response = client.get(
            "/api/twitter/search", params={"query": "bengal", "max_results": "abc"}
        )

        assert response.status_code == 400
        body = response.json()
        assert set(body) == {"error", "message"}
        assert body["error"] == "Invalid request"
        assert "max_results" in body["message"]
        assert upstream.search_calls == []

    def test_rate_limit_passed_through(self, client, upstream):
        upstream.search_error = UpstreamRateLimited()

        response = client.get("/api/twitter/search", params={"query": "bengal"})

        assert response.status_code == 429
        assert set(response.json()) == {"error", "message"}

    def test_other_upstream_errors_are_500(self, client, upstream):
        upstream.search_error = UpstreamError(401, "unauthorized")

        response = client.get("/api/twitter/search", params={"query": "bengal"})

        assert response.status_code == 500
        assert response.json()["message"] == "unauthorized"

    def test_unexpected_error(self, upstream, analyzer, detector):
        upstream.search_error = RuntimeError("boom")
        app = create_app(Config(), client=upstream, analyzer=analyzer, detector=detector)
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/api/twitter/search", params={"query": "bengal"})

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"


class TestInference:
    """Tests for the inference route."""

    def test_missing_model(self, client):
        response = client.post("/api/inference", json={"inputs": "text"})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing model parameter"

    def test_missing_inputs(self, client):
        response = client.post("/api/inference", json={"model": "org/model"})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing inputs parameter"

    def test_key_not_configured(self, analyzer, detector):
        upstream = FakeUpstream(inference_configured=False)
        app = create_app(Config(), client=upstream, analyzer=analyzer, detector=detector)

        response = TestClient(app).post(
            "/api/inference", json={"model": "org/model", "inputs": "text"}
        )

        assert response.status_code == 500
        assert upstream.inference_calls == []

    def test_malformed_json(self, client, upstream):
        response = client.post(
            "/api/inference",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        body = response.json()
        assert set(body) == {"error", "message"}
        assert body["error"] == "Invalid request"
        assert upstream.inference_calls == []

    def test_passthrough(self, client, upstream):
        response = client.post(
            "/api/inference",
            json={"model": "org/model", "inputs": "text", "options": {"use_cache": True}},
        )

        assert response.status_code == 200
        assert response.json() == [[{"label": "positive", "score": 0.9}]]
        assert upstream.inference_calls == [("org/model", "text", {"use_cache": True})]


class TestAnalyze:
    """Tests for the analysis route."""

    def test_missing_text(self, client):
        response = client.post("/api/analyze", json={})

        assert response.status_code == 400

    def test_analysis(self, client):
        response = client.post(
            "/api/analyze", json={"text": "Metro line to Northfield, but goons attacked"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["analysis"]["dominant_party"] == "party_a"
        assert body["analysis"]["party_b_total_score"] == -1.0
        assert body["constituency"]["id"] == "north"
        assert body["party_labels"] == {"party_a": "Alpha", "party_b": "Beta"}

    def test_no_constituency(self, client):
        body = client.post("/api/analyze", json={"text": "Quiet day"}).json()

        assert body["constituency"] is None
        assert body["analysis"]["dominant_party"] == "neutral"
