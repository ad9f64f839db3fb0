"""
Configuration management for pulsetext.

Provides YAML-based configuration loading with environment variable
override support and validation.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Default paths
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "configs" / "config.yaml"
DEFAULT_CREDENTIALS_PATH = Path(__file__).parent.parent.parent / "configs" / "credentials.yaml"

VALID_MATCH_MODES = {"substring", "word"}


@dataclass
class AnalysisConfig:
    """Topic scoring and constituency detection configuration."""

    impact_threshold: float = 0.2
    positive_seat_weight: float = 0.1
    negative_seat_weight: float = 0.15
    dominance_margin: float = 0.5
    match_mode: str = "substring"  # substring, word

    # None uses the tables packaged with pulsetext
    topics_path: Path | None = None
    constituencies_path: Path | None = None


@dataclass
class CacheConfig:
    """Result cache configuration."""

    ttl_seconds: int = 900  # 15 minutes
    max_entries: int = 1024


@dataclass
class UpstreamConfig:
    """Third-party API configuration for the proxy."""

    search_bearer_token: str = ""
    search_api_base: str = "https://api.twitter.com/2"
    inference_api_key: str = ""
    inference_api_base: str = "https://router.huggingface.co/hf-inference/models"
    request_timeout: int = 30
    retry_max_attempts: int = 3
    retry_base_delay: float = 2.0
    retry_max_delay: float = 60.0
    search_cache_ttl: int = 300  # 5 minutes


@dataclass
class StorageConfig:
    """Data storage configuration."""

    raw_data_path: Path = field(default_factory=lambda: Path("data/raw"))
    processed_data_path: Path = field(default_factory=lambda: Path("data/processed"))


@dataclass
class ServerConfig:
    """Proxy server configuration."""

    host: str = "127.0.0.1"
    port: int = 3001
    cors_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )


@dataclass
class Config:
    """Main configuration container."""

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides to configuration.

    Environment variables follow the pattern: PULSETEXT_SECTION_KEY
    For example: PULSETEXT_UPSTREAM_SEARCH_BEARER_TOKEN
    """
    env_mappings = {
        "PULSETEXT_UPSTREAM_SEARCH_BEARER_TOKEN": ("upstream", "search_bearer_token"),
        "PULSETEXT_UPSTREAM_INFERENCE_API_KEY": ("upstream", "inference_api_key"),
        "PULSETEXT_ANALYSIS_MATCH_MODE": ("analysis", "match_mode"),
        "PULSETEXT_ANALYSIS_TOPICS_PATH": ("analysis", "topics_path"),
        "PULSETEXT_ANALYSIS_CONSTITUENCIES_PATH": ("analysis", "constituencies_path"),
        "PULSETEXT_CACHE_TTL_SECONDS": ("cache", "ttl_seconds"),
        "PULSETEXT_SERVER_PORT": ("server", "port"),
        "PULSETEXT_LOG_LEVEL": ("log_level",),
    }

    for env_var, path in env_mappings.items():
        value = os.environ.get(env_var)
        if value is not None:
            if len(path) == 1:
                config_dict[path[0]] = value
            elif len(path) == 2:
                if path[0] not in config_dict:
                    config_dict[path[0]] = {}
                config_dict[path[0]][path[1]] = value
            logger.debug(f"Applied environment override: {env_var}")

    return config_dict


def _optional_path(value: Any) -> Path | None:
    return Path(value) if value else None


def _dict_to_config(config_dict: dict[str, Any]) -> Config:
    """Convert a dictionary to a Config object."""
    analysis_dict = config_dict.get("analysis", {})
    analysis = AnalysisConfig(
        impact_threshold=float(analysis_dict.get("impact_threshold", 0.2)),
        positive_seat_weight=float(analysis_dict.get("positive_seat_weight", 0.1)),
        negative_seat_weight=float(analysis_dict.get("negative_seat_weight", 0.15)),
        dominance_margin=float(analysis_dict.get("dominance_margin", 0.5)),
        match_mode=analysis_dict.get("match_mode", "substring"),
        topics_path=_optional_path(analysis_dict.get("topics_path")),
        constituencies_path=_optional_path(analysis_dict.get("constituencies_path")),
    )

    cache_dict = config_dict.get("cache", {})
    cache = CacheConfig(
        ttl_seconds=int(cache_dict.get("ttl_seconds", 900)),
        max_entries=int(cache_dict.get("max_entries", 1024)),
    )

    upstream_dict = config_dict.get("upstream", {})
    upstream = UpstreamConfig(
        search_bearer_token=upstream_dict.get("search_bearer_token", ""),
        search_api_base=upstream_dict.get("search_api_base", "https://api.twitter.com/2"),
        inference_api_key=upstream_dict.get("inference_api_key", ""),
        inference_api_base=upstream_dict.get(
            "inference_api_base", "https://router.huggingface.co/hf-inference/models"
        ),
        request_timeout=int(upstream_dict.get("request_timeout", 30)),
        retry_max_attempts=int(upstream_dict.get("retry_max_attempts", 3)),
        retry_base_delay=float(upstream_dict.get("retry_base_delay", 2.0)),
        retry_max_delay=float(upstream_dict.get("retry_max_delay", 60.0)),
        search_cache_ttl=int(upstream_dict.get("search_cache_ttl", 300)),
    )

    storage_dict = config_dict.get("storage", {})
    storage = StorageConfig(
        raw_data_path=Path(storage_dict.get("raw_data_path", "data/raw")),
        processed_data_path=Path(storage_dict.get("processed_data_path", "data/processed")),
    )

    server_dict = config_dict.get("server", {})
    server = ServerConfig(
        host=server_dict.get("host", "127.0.0.1"),
        port=int(server_dict.get("port", 3001)),
        cors_origins=server_dict.get(
            "cors_origins", ["http://localhost:5173", "http://127.0.0.1:5173"]
        ),
    )

    log_file = config_dict.get("log_file")

    return Config(
        analysis=analysis,
        cache=cache,
        upstream=upstream,
        storage=storage,
        server=server,
        log_level=config_dict.get("log_level", "INFO"),
        log_file=Path(log_file) if log_file else None,
    )


def load_config(
    config_path: str | Path | None = None,
    credentials_path: str | Path | None = None,
) -> Config:
    """Load configuration from YAML files with environment variable overrides.

    Args:
        config_path: Path to main config.yaml file. Defaults to configs/config.yaml.
        credentials_path: Path to credentials.yaml file. Defaults to configs/credentials.yaml.

    Returns:
        Config object with all settings loaded.

    Raises:
        yaml.YAMLError: If config file is invalid YAML.
    """
    config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    credentials_path = Path(credentials_path) if credentials_path else DEFAULT_CREDENTIALS_PATH

    config_dict: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            config_dict = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
    else:
        logger.warning(f"Config file not found: {config_path}, using defaults")

    # API tokens live in a separate, uncommitted file
    if credentials_path.exists():
        with open(credentials_path) as f:
            credentials_dict = yaml.safe_load(f) or {}
        config_dict = _deep_merge(config_dict, credentials_dict)
        logger.info(f"Loaded credentials from {credentials_path}")
    else:
        logger.debug(f"Credentials file not found: {credentials_path}")

    config_dict = _apply_env_overrides(config_dict)
    config = _dict_to_config(config_dict)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        filename=str(config.log_file) if config.log_file else None,
    )

    return config


def validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of warnings/errors.

    Args:
        config: Config object to validate.

    Returns:
        List of warning/error messages. Empty list if valid.
    """
    issues: list[str] = []
    analysis = config.analysis

    if analysis.match_mode not in VALID_MATCH_MODES:
        issues.append(
            f"Invalid match mode: {analysis.match_mode}. Must be one of {VALID_MATCH_MODES}"
        )

    if not 0 <= analysis.impact_threshold < 1:
        issues.append(f"impact_threshold must be in [0, 1): {analysis.impact_threshold}")

    if analysis.positive_seat_weight < 0 or analysis.negative_seat_weight < 0:
        issues.append("Seat weights must be non-negative")

    if analysis.dominance_margin < 0:
        issues.append(f"dominance_margin must be non-negative: {analysis.dominance_margin}")

    for path_attr in ["topics_path", "constituencies_path"]:
        path = getattr(analysis, path_attr)
        if path is not None and not path.exists():
            issues.append(f"Keyword file for {path_attr} does not exist: {path}")

    if config.cache.ttl_seconds <= 0:
        issues.append(f"Cache TTL must be positive: {config.cache.ttl_seconds}")

    if not config.upstream.search_bearer_token:
        issues.append("No search API credentials configured. Set upstream.search_bearer_token.")

    if not config.upstream.inference_api_key:
        issues.append("No inference API key configured. Set upstream.inference_api_key.")

    if config.upstream.retry_max_attempts < 1:
        issues.append("retry_max_attempts must be at least 1")

    return issues
