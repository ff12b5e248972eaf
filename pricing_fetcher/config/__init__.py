"""
Pricing Fetcher - Configuration
"""
from .settings import Settings, FetcherSettings, LoggingSettings, ConfigError, settings
from .logging import (
    setup_logging,
    get_logger,
    log_fetch,
    log_error,
    JSONFormatter,
    ColoredFormatter,
)

__all__ = [
    "Settings",
    "FetcherSettings",
    "LoggingSettings",
    "ConfigError",
    "settings",
    # Logging
    "setup_logging",
    "get_logger",
    "log_fetch",
    "log_error",
    "JSONFormatter",
    "ColoredFormatter",
]
