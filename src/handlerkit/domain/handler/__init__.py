"""Handler unit package."""

from .handler_unit import (
    Action,
    ActionResult,
    HandlerUnit,
    MalformedActionResultError,
    Predicate,
    always,
)
from .outcome import HandlerFault, Outcome, OutcomeKind
from .step import StepResult, cancellation_outcome, execute_step

__all__ = [
    "HandlerUnit",
    "Predicate",
    "Action",
    "ActionResult",
    "MalformedActionResultError",
    "always",
    "Outcome",
    "OutcomeKind",
    "HandlerFault",
    "StepResult",
    "execute_step",
    "cancellation_outcome",
]
