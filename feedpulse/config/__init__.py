"""Configuration management for feedpulse."""

from .loader import Config, load_config, load_sources, save_config, save_sources
from .models import (
    ConfigModel,
    IngestionConfig,
    LoggingConfig,
    PostgresConfig,
    RetentionConfig,
    SchedulerConfig,
    SourceConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "IngestionConfig",
    "LoggingConfig",
    "PostgresConfig",
    "RetentionConfig",
    "SchedulerConfig",
    "SourceConfig",
    "load_config",
    "load_sources",
    "save_config",
    "save_sources",
]
