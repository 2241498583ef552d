"""Configuration package with clean public API."""

from .manager import ConfigurationManager
from .schemas import (
    DispatchConfig,
    HandlerKitConfig,
    LogDestination,
    LoggingConfig,
    LogLevel,
    validate_config,
)

__all__ = [
    "HandlerKitConfig",
    "validate_config",
    "DispatchConfig",
    "LoggingConfig",
    "LogLevel",
    "LogDestination",
    "ConfigurationManager",
]
