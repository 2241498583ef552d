"""State machine package."""

from .state_machine import StateMachine, StateMachineInstance
from .transition import Transition, TransitionCondition, TransitionPredicate

__all__ = [
    "StateMachine",
    "StateMachineInstance",
    "Transition",
    "TransitionCondition",
    "TransitionPredicate",
]
