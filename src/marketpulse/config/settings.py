"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import sys
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    config_dir = _find_config_dir(config_dir)
    default_path = config_dir / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = config_dir / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        ingestion: dict[str, Any] | None = None,
        storage: dict[str, Any] | None = None,
        polymarket: dict[str, Any] | None = None,
        kalshi: dict[str, Any] | None = None,
        scoring: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.ingestion = ingestion or {}
        self.storage = storage or {}
        self.polymarket = polymarket or {}
        self.kalshi = kalshi or {}
        self.scoring = scoring or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            ingestion=raw.get("ingestion"),
            storage=raw.get("storage"),
            polymarket=raw.get("polymarket"),
            kalshi=raw.get("kalshi"),
            scoring=raw.get("scoring"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/marketpulse.duckdb")

    @property
    def limit_per_source(self) -> int:
        return int(self.ingestion.get("limit_per_source", 100))

    @property
    def http_timeout_sec(self) -> float:
        return float(self.ingestion.get("http_timeout_sec", 30.0))

    @property
    def gamma_api_base(self) -> str:
        return self.polymarket.get("gamma_api_base", "https://gamma-api.polymarket.com")

    @property
    def polymarket_page_size(self) -> int:
        return int(self.polymarket.get("page_size", 50))

    @property
    def kalshi_api_base(self) -> str:
        return self.kalshi.get("api_base", "https://api.elections.kalshi.com/trade-api/v2")

    @property
    def kalshi_page_size(self) -> int:
        return int(self.kalshi.get("page_size", 200))

    @property
    def signal_cooldown_sec(self) -> int:
        return int(self.scoring.get("cooldown_sec", 600))

    @property
    def score_active_only(self) -> bool:
        return bool(self.scoring.get("active_only", True))

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        # stdout is reserved for CLI result JSON
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
