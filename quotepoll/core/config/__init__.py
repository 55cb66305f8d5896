"""Configuration management module."""

from quotepoll.core.config.settings import (
    DEFAULT_ALLOW_LIST,
    ConfigManager,
    LoggingConfig,
    PollerConfig,
    QuotePollConfig,
    SourceConfig,
    StoreConfig,
    UniverseConfig,
    load_config,
    load_config_from_env,
)

__all__ = [
    "ConfigManager",
    "QuotePollConfig",
    "PollerConfig",
    "SourceConfig",
    "StoreConfig",
    "UniverseConfig",
    "LoggingConfig",
    "DEFAULT_ALLOW_LIST",
    "load_config",
    "load_config_from_env",
]
