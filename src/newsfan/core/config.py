#!/usr/bin/env python3
"""
Centralized Configuration Manager

Provides a single source of truth for application configuration: the
NewsAPI credential, the aggregation cap and source priority, transport
settings and logging. Values come from the environment, optionally seeded
from a .env file at the project root.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from pathlib import Path

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://newsapi.org"
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; NewsAggregator/1.0)"


@dataclass
class NewsApiConfig:
    """Upstream NewsAPI connection configuration."""
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    request_timeout: int = 10
    user_agent: str = DEFAULT_USER_AGENT


@dataclass
class AggregationConfig:
    """Fan-out and reduction settings."""
    max_articles: int = 10
    source_priority: List[str] = field(default_factory=list)
    sources_file: Optional[str] = None
    match_threshold: float = 0.85
    include_unlisted_sources: bool = False


@dataclass
class ApplicationConfig:
    """Core application configuration."""
    log_level: str = "INFO"
    verbose_logging: bool = False


@dataclass
class Config:
    """Master configuration container."""
    newsapi: NewsApiConfig
    aggregation: AggregationConfig
    app: ApplicationConfig


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _parse_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def read_env_file(env_path: Path) -> Dict[str, str]:
    """
    Parse ``KEY=VALUE`` lines from a .env file.

    Blank lines and ``#`` comments are ignored, one pair of matching quotes
    around a value is stripped, malformed lines are skipped with a warning.
    """
    values: Dict[str, str] = {}
    with open(env_path, 'r', encoding='utf-8') as f:
        for number, raw in enumerate(f, 1):
            entry = raw.strip()
            if not entry or entry.startswith('#'):
                continue

            key, sep, value = entry.partition('=')
            key, value = key.strip(), value.strip()
            if not sep or not key:
                logger.warning(f"Ignoring malformed line {number} in {env_path}")
                continue

            if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                value = value[1:-1]
            values[key] = value
    return values


class ConfigManager:
    """Builds and validates Config from the environment and an optional .env file."""

    def __init__(self, env_file_path: str = ".env", load_env_file: bool = True):
        """
        Args:
            env_file_path: .env location; relative paths resolve from the project root
            load_env_file: Read the .env file at all
        """
        self._config: Optional[Config] = None
        self._env_file_path = env_file_path
        if load_env_file:
            self._seed_environment()

    def _resolve_env_path(self) -> Path:
        env_path = Path(self._env_file_path)
        if env_path.is_absolute():
            return env_path
        # src/newsfan/core -> project root
        return Path(__file__).resolve().parents[3] / env_path

    def _seed_environment(self) -> None:
        """Copy .env values into os.environ without overriding existing ones."""
        env_path = self._resolve_env_path()
        if not env_path.is_file():
            logger.debug(f"No .env file at {env_path}")
            return

        try:
            values = read_env_file(env_path)
        except OSError as e:
            logger.error(f"Could not read {env_path}: {e}")
            return

        seeded = [key for key in values if key not in os.environ]
        for key in seeded:
            os.environ[key] = values[key]
        logger.info(f"Seeded {len(seeded)} of {len(values)} variables from {env_path}")

    def get_config(self, force_reload: bool = False) -> Config:
        """
        Get application configuration.

        Args:
            force_reload: Force reloading configuration from environment

        Returns:
            Complete configuration object

        Raises:
            ConfigurationError: If a required value is missing or invalid
        """
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def validate_startup(self) -> Config:
        """
        Validate configuration once before any request is served.

        Fails fast with ConfigurationError when the NewsAPI credential is
        absent or a value is out of range.
        """
        config = self.get_config(force_reload=True)
        logger.info("Startup configuration check passed")
        return config

    def _build_config(self) -> Config:
        """Build configuration from environment variables."""
        newsapi_config = NewsApiConfig(
            api_key=self._get_required_env('NEWS_API_KEY'),
            base_url=os.getenv('NEWS_API_BASE_URL', DEFAULT_BASE_URL).rstrip('/'),
            request_timeout=self._get_int_env('NEWS_REQUEST_TIMEOUT', 10),
            user_agent=os.getenv('NEWS_USER_AGENT', DEFAULT_USER_AGENT)
        )

        aggregation_config = self.get_aggregation_config()

        app_config = ApplicationConfig(
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            verbose_logging=_parse_bool(os.getenv('VERBOSE_LOGGING'))
        )

        config = Config(
            newsapi=newsapi_config,
            aggregation=aggregation_config,
            app=app_config
        )

        self._validate_config(config)
        return config

    def get_aggregation_config(self) -> AggregationConfig:
        """
        Catalog, priority and cap settings on their own.

        Needs no credential, so catalog inspection works without NEWS_API_KEY.

        Raises:
            ConfigurationError: If a value is malformed or out of range
        """
        aggregation = AggregationConfig(
            max_articles=self._get_int_env('NEWS_MAX_ARTICLES', 10),
            source_priority=_parse_list(os.getenv('NEWS_SOURCE_PRIORITY')),
            sources_file=os.getenv('NEWS_SOURCES_FILE') or None,
            match_threshold=self._get_float_env('NEWS_MATCH_THRESHOLD', 0.85),
            include_unlisted_sources=_parse_bool(os.getenv('NEWS_INCLUDE_UNLISTED_SOURCES'))
        )

        if aggregation.max_articles < 0:
            raise ConfigurationError('NEWS_MAX_ARTICLES', "must not be negative")
        if not 0.0 <= aggregation.match_threshold <= 1.0:
            raise ConfigurationError('NEWS_MATCH_THRESHOLD', "must be between 0 and 1")
        return aggregation

    def _get_required_env(self, key: str) -> str:
        """Get required environment variable."""
        value = os.getenv(key)
        if not value or not value.strip():
            raise ConfigurationError(key, "required environment variable is not set")
        return value.strip()

    def _get_int_env(self, key: str, default: int) -> int:
        raw = os.getenv(key)
        if raw is None or raw.strip() == '':
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(key, f"expected an integer, got {raw!r}")

    def _get_float_env(self, key: str, default: float) -> float:
        raw = os.getenv(key)
        if raw is None or raw.strip() == '':
            return default
        try:
            return float(raw)
        except ValueError:
            raise ConfigurationError(key, f"expected a number, got {raw!r}")

    def _validate_config(self, config: Config) -> None:
        """Validate configuration values."""
        if not config.newsapi.base_url.startswith(('http://', 'https://')):
            raise ConfigurationError('NEWS_API_BASE_URL', "must start with http:// or https://")

        if config.newsapi.request_timeout < 1:
            raise ConfigurationError('NEWS_REQUEST_TIMEOUT', "must be at least 1 second")

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if config.app.log_level not in valid_log_levels:
            raise ConfigurationError('LOG_LEVEL', f"must be one of: {', '.join(valid_log_levels)}")

        logger.debug("Configuration validation passed")

    def update_logging(self) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()

        numeric_level = getattr(logging, config.app.log_level)
        logging.getLogger().setLevel(numeric_level)

        if config.app.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        for handler in logging.getLogger().handlers:
            handler.setLevel(numeric_level)
            formatter = logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S')
            handler.setFormatter(formatter)

    def get_status(self) -> Dict[str, Any]:
        """Summarize configuration without exposing the credential."""
        config = self.get_config()
        return {
            'api_key_configured': bool(config.newsapi.api_key),
            'base_url': config.newsapi.base_url,
            'request_timeout': config.newsapi.request_timeout,
            'max_articles': config.aggregation.max_articles,
            'source_priority': list(config.aggregation.source_priority),
            'include_unlisted_sources': config.aggregation.include_unlisted_sources
        }


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    """Get application configuration."""
    return get_config_manager().get_config()


def reset_config() -> None:
    """Reset configuration manager (useful for testing)."""
    global _config_manager
    _config_manager = None
