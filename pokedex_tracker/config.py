"""YAML configuration loader and validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from pokedex_tracker.assets import FULL_DEPTH, PLACEHOLDER_URL
from pokedex_tracker.sources import known_sources
from pokedex_tracker.sources.pokeapi_graphql import DEFAULT_ENDPOINT
from pokedex_tracker.tracker import DEFAULT_ACQUIRE_DELAY_MS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")


@dataclass
class SourceConfig:
    """Which catalog source to query and how."""

    name: str = "pokeapi-graphql"
    endpoint: str = DEFAULT_ENDPOINT
    limit: int = 24
    timeout_s: float = 30.0
    local_path: Optional[str] = None  # local-json only


@dataclass
class TrackerConfig:
    """Acquisition simulation settings."""

    acquire_delay_ms: int = DEFAULT_ACQUIRE_DELAY_MS


@dataclass
class AssetConfig:
    """Sprite resolution settings per view."""

    grid_chain_depth: int = FULL_DEPTH
    collection_chain_depth: int = 1
    placeholder_url: str = PLACEHOLDER_URL


@dataclass
class AppConfig:
    """Top-level application configuration."""

    source: SourceConfig = field(default_factory=SourceConfig)
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    assets: AssetConfig = field(default_factory=AssetConfig)


def load_config(
    path: Optional[Path] = None,
    source: Optional[str] = None,
    limit: Optional[int] = None,
) -> AppConfig:
    """Load configuration from a YAML file, falling back to defaults."""
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        logger.info("No config file at %s, using defaults", config_path)
        config = AppConfig()
    else:
        logger.info("Loading config from %s", config_path)
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
        config = _parse_config(raw) if raw else AppConfig()

    # CLI overrides
    if source:
        config.source.name = source
    if limit is not None:
        config.source.limit = limit

    _validate_config(config)
    return config


def _parse_config(raw: Dict[str, Any]) -> AppConfig:
    """Parse raw YAML dict into AppConfig."""
    config = AppConfig()

    if "source" in raw:
        src = raw["source"] or {}
        config.source = SourceConfig(
            name=str(src.get("name", config.source.name)),
            endpoint=str(src.get("endpoint", config.source.endpoint)),
            limit=int(src.get("limit", config.source.limit)),
            timeout_s=float(src.get("timeout_s", config.source.timeout_s)),
            local_path=src.get("local_path"),
        )

    if "tracker" in raw:
        trk = raw["tracker"] or {}
        config.tracker = TrackerConfig(
            acquire_delay_ms=int(trk.get("acquire_delay_ms", config.tracker.acquire_delay_ms)),
        )

    if "assets" in raw:
        ast = raw["assets"] or {}
        config.assets = AssetConfig(
            grid_chain_depth=int(ast.get("grid_chain_depth", config.assets.grid_chain_depth)),
            collection_chain_depth=int(
                ast.get("collection_chain_depth", config.assets.collection_chain_depth)
            ),
            placeholder_url=str(ast.get("placeholder_url", config.assets.placeholder_url)),
        )

    return config


def _validate_config(config: AppConfig) -> None:
    """Validate config and raise on errors."""
    src = config.source
    known = known_sources()
    if src.name not in known:
        raise ValueError(f"Config error: unknown source '{src.name}'. Known: {known}")
    if src.name == "local-json" and not src.local_path:
        raise ValueError("Config error: source 'local-json' requires local_path")
    if src.limit < 1:
        raise ValueError(f"Config error: limit must be at least 1, got {src.limit}")

    if config.tracker.acquire_delay_ms < 0:
        raise ValueError(
            f"Config error: acquire_delay_ms must not be negative, got {config.tracker.acquire_delay_ms}"
        )

    for label, depth in (
        ("grid_chain_depth", config.assets.grid_chain_depth),
        ("collection_chain_depth", config.assets.collection_chain_depth),
    ):
        if not 1 <= depth <= FULL_DEPTH:
            raise ValueError(f"Config error: {label} must be between 1 and {FULL_DEPTH}, got {depth}")

    logger.info(
        "Config validated: source=%s, limit=%d, acquire delay %d ms",
        src.name,
        src.limit,
        config.tracker.acquire_delay_ms,
    )
