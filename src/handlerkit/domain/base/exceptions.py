"""Base exceptions shared by every layer of handlerkit."""

from typing import Any, Dict, List, Optional


class HandlerKitError(Exception):
    """Base exception for all handlerkit errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging and export."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(HandlerKitError):
    """Raised when a value fails validation."""


class InvalidDefinitionError(ValidationError):
    """Raised when a chain or state machine definition is malformed."""

    def __init__(self, definition: str, problems: List[str]):
        message = f"Invalid definition '{definition}': {'; '.join(problems)}"
        super().__init__(
            message,
            "INVALID_DEFINITION",
            {"definition": definition, "problems": list(problems)},
        )
        self.definition = definition
        self.problems = list(problems)


class EntityNotFoundError(HandlerKitError):
    """Raised when a named entity cannot be found."""

    def __init__(self, entity_type: str, entity_name: str):
        super().__init__(
            f"{entity_type} '{entity_name}' not found",
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_name": entity_name},
        )
        self.entity_type = entity_type
        self.entity_name = entity_name


class HandlerNotFoundError(EntityNotFoundError):
    """Raised when a handler unit is not registered."""

    def __init__(self, name: str):
        super().__init__("Handler", name)


class DefinitionNotFoundError(EntityNotFoundError):
    """Raised when no chain or state machine is registered under a name."""

    def __init__(self, name: str):
        super().__init__("Definition", name)


class ContextKeyError(HandlerKitError, KeyError):
    """Raised when a required context key is missing."""

    def __init__(self, key: str):
        super().__init__(f"Context has no key '{key}'", "CONTEXT_KEY_MISSING", {"key": key})
        self.key = key

    def __str__(self) -> str:
        return self.message


class ContextTypeError(HandlerKitError, TypeError):
    """Raised when a context value has an unexpected type."""

    def __init__(self, key: str, expected: type, actual: type):
        super().__init__(
            f"Context key '{key}' expected {expected.__name__}, got {actual.__name__}",
            "CONTEXT_TYPE_MISMATCH",
            {"key": key, "expected": expected.__name__, "actual": actual.__name__},
        )
        self.key = key


class RevisionConflictError(HandlerKitError):
    """Raised when a context write is based on a stale revision."""

    def __init__(self, expected_revision: int, actual_revision: int):
        super().__init__(
            f"Revision conflict: expected {expected_revision}, found {actual_revision}",
            "REVISION_CONFLICT",
            {"expected_revision": expected_revision, "actual_revision": actual_revision},
        )
        self.expected_revision = expected_revision
        self.actual_revision = actual_revision


class HandlerFaultError(HandlerKitError):
    """Raised when a caller asks for a faulted dispatch to be surfaced as an exception."""

    def __init__(self, handler: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"Handler '{handler}' faulted: {message}",
            "HANDLER_FAULT",
            {"handler": handler},
        )
        self.handler = handler
        self.cause = cause


class StepLimitExceededError(HandlerKitError):
    """Raised inside a state machine run that exceeds its advance limit."""

    def __init__(self, machine: str, limit: int):
        super().__init__(
            f"State machine '{machine}' exceeded the step limit of {limit}",
            "STEP_LIMIT_EXCEEDED",
            {"machine": machine, "limit": limit},
        )
        self.machine = machine
        self.limit = limit


class ConfigurationError(HandlerKitError):
    """Raised when there's an issue with configuration."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message, "CONFIGURATION_ERROR", {"missing_fields": missing_fields or []})
        self.missing_fields = missing_fields or []
