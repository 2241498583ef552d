"""Application layer - registries, command queue and the dispatcher façade."""

from .command_queue import Command, CommandQueue, CommandReceipt
from .dispatcher import Dispatcher
from .handler_registry import HandlerRegistry
from .result import DispatchResult
from .subscription_registry import SubscriptionRegistry

__all__ = [
    "Dispatcher",
    "DispatchResult",
    "HandlerRegistry",
    "SubscriptionRegistry",
    "CommandQueue",
    "Command",
    "CommandReceipt",
]
