"""Domain layer - handler units, context, chains, state machines and events."""

from .base import (
    ConfigurationError,
    ContextKeyError,
    ContextTypeError,
    DefinitionNotFoundError,
    HandlerFaultError,
    HandlerKitError,
    HandlerNotFoundError,
    InvalidDefinitionError,
    RevisionConflictError,
    StepLimitExceededError,
    ValidationError,
)
from .chain import Chain
from .context import Context, merge_forks
from .events import Event
from .handler import HandlerFault, HandlerUnit, Outcome, OutcomeKind, always
from .state_machine import StateMachine, StateMachineInstance, Transition
from .trace import Trace, TraceEntry

__all__ = [
    # Model
    "HandlerUnit",
    "always",
    "Outcome",
    "OutcomeKind",
    "HandlerFault",
    "Context",
    "merge_forks",
    "Chain",
    "StateMachine",
    "StateMachineInstance",
    "Transition",
    "Event",
    "Trace",
    "TraceEntry",
    # Exceptions
    "HandlerKitError",
    "ValidationError",
    "InvalidDefinitionError",
    "HandlerNotFoundError",
    "DefinitionNotFoundError",
    "ContextKeyError",
    "ContextTypeError",
    "RevisionConflictError",
    "StepLimitExceededError",
    "HandlerFaultError",
    "ConfigurationError",
]
