"""Root configuration schema."""
from typing import Any, Dict

from pydantic import BaseModel, Field, ValidationError

from handlerkit.domain.base.exceptions import ConfigurationError

from .dispatch_schema import DispatchConfig
from .logging_schema import LoggingConfig


class HandlerKitConfig(BaseModel):
    """Application configuration."""

    version: str = Field("1.0.0", description="Configuration version")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)


def validate_config(config: Dict[str, Any]) -> HandlerKitConfig:
    """
    Validate a configuration dictionary.

    Args:
        config: Raw configuration data

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If validation fails
    """
    try:
        return HandlerKitConfig.model_validate(config)
    except ValidationError as e:
        fields = [".".join(str(part) for part in error["loc"]) for error in e.errors()]
        raise ConfigurationError(f"Invalid configuration: {e}", missing_fields=fields) from e
