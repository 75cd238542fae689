"""
Core Module - Foundation components for Rule Responder
======================================================

This module provides the foundational components including:
- Configuration management
- Logging setup
- Exception handling
"""

__version__ = "1.0.0"

from .config import Config, load_config, save_config
from .exceptions import (
    ResponderError,
    ConfigError,
    RuleLoadError,
    IndexBuildError,
    PlaceholderError,
)
from .logging import setup_logging, get_logger

__all__ = [
    "__version__",
    "Config",
    "load_config",
    "save_config",
    "ResponderError",
    "ConfigError",
    "RuleLoadError",
    "IndexBuildError",
    "PlaceholderError",
    "setup_logging",
    "get_logger",
]
