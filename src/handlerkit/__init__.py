"""handlerkit - Root Package.

This package provides an in-process behavior-dispatch and notification core:
interchangeable handler units that can be selected, chained, bound to states,
notified or queued at runtime against a shared context.

Key Components:
    - domain: Handler units, outcomes, context, chains, state machines, events
    - application: Handler and subscription registries, command queue, dispatcher
    - infrastructure: Logging, cancellation, fault context and metrics
    - config: Configuration schemas and manager

Architecture:
    Layers depend inwards only. The domain layer holds no global state; the
    dispatcher is built once by the caller's composition root and passed
    explicitly.

Usage:
    from handlerkit import Context, Dispatcher, Outcome

    dispatcher = Dispatcher()
    dispatcher.register_handler(
        "Basic",
        lambda ctx: ctx.get("issue") == "Basic",
        lambda ctx: (ctx.set("resolved_by", "Basic"), Outcome.handled()),
    )
    dispatcher.build_chain("support", ["Basic"])
    result = dispatcher.run("support", Context({"issue": "Basic"}))
"""

from ._package import PACKAGE_NAME, __version__
from .application import (
    CommandQueue,
    CommandReceipt,
    DispatchResult,
    Dispatcher,
    HandlerRegistry,
    SubscriptionRegistry,
)
from .config import ConfigurationManager, HandlerKitConfig
from .domain import (
    Chain,
    Context,
    Event,
    HandlerFault,
    HandlerUnit,
    Outcome,
    OutcomeKind,
    StateMachine,
    StateMachineInstance,
    Trace,
    TraceEntry,
    Transition,
    always,
    merge_forks,
)
from .domain.base import (
    ConfigurationError,
    DefinitionNotFoundError,
    HandlerFaultError,
    HandlerKitError,
    HandlerNotFoundError,
    InvalidDefinitionError,
    RevisionConflictError,
)
from .infrastructure import CancellationToken, Deadline

__package_name__ = PACKAGE_NAME

__all__ = [
    "__version__",
    "Dispatcher",
    "DispatchResult",
    "HandlerRegistry",
    "SubscriptionRegistry",
    "CommandQueue",
    "CommandReceipt",
    "ConfigurationManager",
    "HandlerKitConfig",
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
    "CancellationToken",
    "Deadline",
    "HandlerKitError",
    "InvalidDefinitionError",
    "HandlerNotFoundError",
    "DefinitionNotFoundError",
    "RevisionConflictError",
    "HandlerFaultError",
    "ConfigurationError",
]
