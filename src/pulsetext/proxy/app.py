"""
Reverse proxy in front of the search and inference APIs.

Keeps API tokens server-side, caches search results for a few minutes and
exposes the election topic analyzer over HTTP.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pulsetext.cache import TTLCache, cached, text_cache_key
from pulsetext.config import Config
from pulsetext.detection.constituency_detector import ConstituencyDetector, create_detector
from pulsetext.detection.topic_analyzer import ElectionTopicAnalyzer, create_analyzer
from pulsetext.proxy.client import UpstreamClient, UpstreamError

logger = logging.getLogger(__name__)


class InferenceIn(BaseModel):
    model: Optional[str] = None
    inputs: Any = None
    options: Optional[Dict[str, Any]] = None


class AnalyzeIn(BaseModel):
    text: Optional[str] = None


def error_response(status_code: int, error: str, message: str = "") -> JSONResponse:
    """JSON error envelope shared by all routes."""
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


def _proxy_status(exc: UpstreamError) -> int:
    # 429 is passed through; everything else is reported as a proxy failure
    return 429 if exc.status_code == 429 else 500


def _validation_message(exc: RequestValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
        for error in exc.errors()
    )


def create_app(
    config: Config | None = None,
    client: UpstreamClient | None = None,
    analyzer: ElectionTopicAnalyzer | None = None,
    detector: ConstituencyDetector | None = None,
) -> FastAPI:
    """Build the proxy application.

    Args:
        config: Loaded configuration. Uses defaults if None.
        client: Upstream client, injectable for tests.
        analyzer: Topic analyzer. Built from config if None.
        detector: Constituency detector. Built from config if None.

    Returns:
        FastAPI application.
    """
    config = config or Config()
    client = client or UpstreamClient(config.upstream)
    analyzer = analyzer or create_analyzer(config.analysis)
    detector = detector or create_detector(config.analysis)

    search_cache = TTLCache(
        ttl_seconds=config.upstream.search_cache_ttl,
        max_entries=config.cache.max_entries,
    )
    analysis_cache = TTLCache(
        ttl_seconds=config.cache.ttl_seconds,
        max_entries=config.cache.max_entries,
    )

    @cached(analysis_cache, key=lambda text: text_cache_key(text))
    def analyze_text(text: str) -> dict[str, Any]:
        match = detector.detect(text)
        return {
            "analysis": analyzer.analyze(text).to_dict(),
            "constituency": match.to_dict() if match else None,
            "party_labels": dict(analyzer.topics.party_labels),
        }

    app = FastAPI(title="pulsetext proxy", version="0.1.0")
    app.state.config = config
    app.state.client = client
    app.state.search_cache = search_cache

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning(f"Invalid request on {request.url.path}: {exc.errors()}")
        return error_response(400, "Invalid request", _validation_message(exc))

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.error(f"Upstream failure on {request.url.path}: {exc}")
        return error_response(_proxy_status(exc), "Upstream request failed", exc.message)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unexpected error on {request.url.path}")
        return error_response(500, "Internal server error", str(exc))

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "search_token_configured": client.search_configured,
            "inference_key_configured": client.inference_configured,
        }

    @app.get("/api/twitter/search")
    def search(
        query: Optional[str] = Query(default=None),
        max_results: int = Query(default=10),
    ) -> JSONResponse:
        if not query:
            return error_response(400, "Query parameter required", "Missing 'query'")

        cache_key = f"search:{query}:{max_results}"
        data = search_cache.get(cache_key)
        if data is not None:
            return JSONResponse(content=data, headers={"X-Cache": "HIT"})

        data = client.search_recent(query, max_results=max_results)
        search_cache.set(cache_key, data)
        return JSONResponse(content=data, headers={"X-Cache": "MISS"})

    @app.post("/api/inference")
    def inference(body: InferenceIn) -> JSONResponse:
        if not body.model:
            return error_response(400, "Missing model parameter", "Field 'model' is required")
        if body.inputs is None or body.inputs == "":
            return error_response(400, "Missing inputs parameter", "Field 'inputs' is required")
        if not client.inference_configured:
            return error_response(500, "Inference API key not configured")

        started = datetime.now(timezone.utc)
        data = client.inference(body.model, body.inputs, body.options)
        elapsed_ms = (datetime.now(timezone.utc) - started).total_seconds() * 1000
        logger.info(f"Inference for {body.model} took {elapsed_ms:.0f}ms")
        return JSONResponse(content=data, headers={"X-Response-Time": f"{elapsed_ms:.0f}ms"})

    @app.post("/api/analyze")
    def analyze(body: AnalyzeIn) -> JSONResponse:
        if body.text is None:
            return error_response(400, "Missing text parameter", "Field 'text' is required")
        return JSONResponse(content=analyze_text(body.text))

    return app
