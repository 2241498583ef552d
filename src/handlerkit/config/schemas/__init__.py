"""Configuration schemas package."""

from .app_schema import HandlerKitConfig, validate_config
from .dispatch_schema import DispatchConfig
from .logging_schema import LogDestination, LogFileConfig, LoggingConfig, LogLevel

__all__ = [
    # Main configuration
    "HandlerKitConfig",
    "validate_config",
    # Sections
    "DispatchConfig",
    "LoggingConfig",
    "LogFileConfig",
    "LogLevel",
    "LogDestination",
]
