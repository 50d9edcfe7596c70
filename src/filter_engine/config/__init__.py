"""Configuration module for the filter engine."""

from .settings import (
    config,
    Config,
    AppConfig,
    DisplayConfig,
    NullOptionConfig,
    SearchConfig,
)
from .logging_config import setup_logging, get_logger

__all__ = [
    "config",
    "Config",
    "AppConfig",
    "DisplayConfig",
    "NullOptionConfig",
    "SearchConfig",
    "setup_logging",
    "get_logger",
]
