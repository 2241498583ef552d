"""Base domain layer - shared kernel for all handlerkit modules."""

from .exceptions import (
    ConfigurationError,
    ContextKeyError,
    ContextTypeError,
    DefinitionNotFoundError,
    EntityNotFoundError,
    HandlerFaultError,
    HandlerKitError,
    HandlerNotFoundError,
    InvalidDefinitionError,
    RevisionConflictError,
    StepLimitExceededError,
    ValidationError,
)

__all__ = [
    "HandlerKitError",
    "ValidationError",
    "InvalidDefinitionError",
    "EntityNotFoundError",
    "HandlerNotFoundError",
    "DefinitionNotFoundError",
    "ContextKeyError",
    "ContextTypeError",
    "RevisionConflictError",
    "StepLimitExceededError",
    "HandlerFaultError",
    "ConfigurationError",
]
