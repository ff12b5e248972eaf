"""
Pricing Fetcher - Configuration Settings

Values come from environment variables prefixed PRICING_FETCHER_.
The entry point loads a .env file first (python-dotenv).
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional


ENV_PREFIX = "PRICING_FETCHER_"


class ConfigError(ValueError):
    """Missing or invalid configuration value."""
    pass


def _get(environ: Mapping[str, str], name: str) -> Optional[str]:
    value = environ.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _get_int(environ: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = _get(environ, name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ConfigError(f"{ENV_PREFIX}{name} must be >= {minimum}, got {value}")
    return value


def _get_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = _get(environ, name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}")
    if value < 0:
        raise ConfigError(f"{ENV_PREFIX}{name} must be >= 0, got {value}")
    return value


def _get_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = _get(environ, name)
    if raw is None:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


@dataclass
class FetcherSettings:
    """Download configuration."""
    url: Optional[str] = None
    directory: Path = field(default_factory=lambda: Path("data/prices"))
    schedule: str = "always"
    timeout_seconds: float = 30.0
    max_retries: int = 3
    retry_delay_seconds: float = 5.0
    user_agent: str = "pricing-fetcher/0.1"


@dataclass
class LoggingSettings:
    """Logging configuration."""
    level: str = "INFO"
    json_logs: bool = False
    file: Optional[str] = None


@dataclass
class Settings:
    """Main settings container."""
    fetcher: FetcherSettings = field(default_factory=FetcherSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Raises:
            ConfigError: If a value cannot be parsed.
        """
        if environ is None:
            environ = os.environ

        fetcher = FetcherSettings(
            url=_get(environ, "URL"),
            directory=Path(_get(environ, "DIRECTORY") or "data/prices"),
            schedule=_get(environ, "SCHEDULE") or "always",
            timeout_seconds=_get_float(environ, "TIMEOUT_SECONDS", 30.0),
            max_retries=_get_int(environ, "MAX_RETRIES", 3),
            retry_delay_seconds=_get_float(environ, "RETRY_DELAY_SECONDS", 5.0),
            user_agent=_get(environ, "USER_AGENT") or "pricing-fetcher/0.1",
        )

        level = (_get(environ, "LOG_LEVEL") or "INFO").upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"{ENV_PREFIX}LOG_LEVEL is not a logging level: {level!r}")

        log_settings = LoggingSettings(
            level=level,
            json_logs=_get_bool(environ, "JSON_LOGS", False),
            file=_get(environ, "LOG_FILE"),
        )

        return cls(fetcher=fetcher, logging=log_settings)

    def require_url(self) -> str:
        """Return the configured URL or raise ConfigError."""
        if not self.fetcher.url:
            raise ConfigError(f"{ENV_PREFIX}URL is not set")
        return self.fetcher.url


# Global settings instance (defaults; call Settings.from_env() to read the environment)
settings = Settings()
