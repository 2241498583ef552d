"""Dispatcher - the single entry point composing registries, chains and state machines.

The dispatcher is built once by the caller's composition root and passed
around explicitly. It holds named definitions (chains and state machines share
one namespace) and executes them against caller-owned contexts. It never
retries; retry policy belongs around the whole run() call.
"""

import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from handlerkit.application.command_queue import CommandQueue, CommandReceipt
from handlerkit.application.handler_registry import HandlerRegistry
from handlerkit.application.result import DispatchResult
from handlerkit.application.subscription_registry import SubscriptionRegistry
from handlerkit.config.schemas import DispatchConfig, HandlerKitConfig
from handlerkit.domain.base.exceptions import (
    DefinitionNotFoundError,
    InvalidDefinitionError,
    StepLimitExceededError,
)
from handlerkit.domain.base.ports import CancellationPort
from handlerkit.domain.chain import Chain
from handlerkit.domain.context import Context
from handlerkit.domain.handler import Action, HandlerUnit, Outcome, Predicate, always
from handlerkit.domain.state_machine import StateMachine, StateMachineInstance, Transition
from handlerkit.domain.trace import Trace
from handlerkit.infrastructure.cancellation import Deadline
from handlerkit.infrastructure.error import FaultContext
from handlerkit.infrastructure.logging import get_logger, setup_logging
from handlerkit.infrastructure.monitoring import MetricsCollector

Definition = Union[Chain, StateMachine]
UnitRef = Union[str, HandlerUnit]


class Dispatcher:
    """Façade over handler registration, definitions, notification and execution."""

    def __init__(
        self,
        config: Optional[DispatchConfig] = None,
        handlers: Optional[HandlerRegistry] = None,
        subscriptions: Optional[SubscriptionRegistry] = None,
        commands: Optional[CommandQueue] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self._config = config or DispatchConfig()
        self._handlers = handlers or HandlerRegistry()
        self._subscriptions = subscriptions or SubscriptionRegistry()
        self._commands = commands or CommandQueue()
        self._metrics = metrics or MetricsCollector()
        self._definitions: Dict[str, Definition] = {}
        self._definitions_lock = threading.RLock()
        self._logger = get_logger(__name__)

    @classmethod
    def from_config(cls, config: HandlerKitConfig, configure_logging: bool = False) -> "Dispatcher":
        """
        Build a dispatcher from a validated configuration.

        Args:
            config: Root configuration
            configure_logging: Also install logging handlers from ``config.logging``
        """
        if configure_logging:
            setup_logging(config.logging)
        return cls(config=config.dispatch)

    @property
    def config(self) -> DispatchConfig:
        return self._config

    @property
    def handlers(self) -> HandlerRegistry:
        return self._handlers

    @property
    def subscriptions(self) -> SubscriptionRegistry:
        return self._subscriptions

    @property
    def commands(self) -> CommandQueue:
        return self._commands

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    # Registration API

    def register_handler(self, name: str, predicate: Optional[Predicate], action: Action) -> HandlerUnit:
        """
        Register a handler unit; a None predicate matches every context.

        Registering an existing name supersedes the previous binding.
        """
        return self._handlers.register_handler(name, predicate or always, action)

    def register_unit(self, unit: HandlerUnit) -> HandlerUnit:
        return self._handlers.register(unit)

    def _resolve(self, ref: UnitRef) -> HandlerUnit:
        if isinstance(ref, HandlerUnit):
            return ref
        return self._handlers.get(ref)

    def _resolve_for_definition(self, definition: str, refs: Iterable[UnitRef]) -> List[HandlerUnit]:
        units: List[HandlerUnit] = []
        missing: List[str] = []
        for ref in refs:
            if isinstance(ref, HandlerUnit):
                units.append(ref)
            elif self._handlers.is_registered(ref):
                units.append(self._handlers.get(ref))
            else:
                missing.append(f"handler '{ref}' is not registered")
        if missing:
            raise InvalidDefinitionError(definition, missing)
        return units

    def _store(self, name: str, definition: Definition) -> None:
        with self._definitions_lock:
            replaced = self._definitions.get(name)
            self._definitions[name] = definition
        if replaced is not None:
            self._logger.info("Replaced definition", definition=name, kind=type(definition).__name__)
        else:
            self._logger.debug("Stored definition", definition=name, kind=type(definition).__name__)

    def build_chain(self, name: str, handler_names: Sequence[UnitRef]) -> Chain:
        """
        Build and store a chain from registered handler names.

        Raises:
            InvalidDefinitionError: If a handler is unknown or listed twice
        """
        chain = Chain(self._resolve_for_definition(name, handler_names), name=name)
        self._store(name, chain)
        return chain

    def build_state_machine(
        self,
        name: str,
        states: Mapping[str, UnitRef],
        transitions: Iterable[Union[Transition, Sequence]],
        initial: str,
    ) -> StateMachine:
        """
        Build and store a state machine whose states are bound to registered handlers.

        Raises:
            InvalidDefinitionError: If a handler is unknown, the initial state is
                undefined or a transition references an undefined state
        """
        state_names = list(states.keys())
        units = self._resolve_for_definition(name, states.values())
        machine = StateMachine(
            name,
            dict(zip(state_names, units)),
            transitions,
            initial,
            warn_unreachable=self._config.warn_on_unreachable_states,
        )
        self._store(name, machine)
        return machine

    def get_definition(self, name: str) -> Definition:
        """
        Look up a chain or state machine.

        Raises:
            DefinitionNotFoundError: If nothing is stored under ``name``
        """
        with self._definitions_lock:
            definition = self._definitions.get(name)
        if definition is None:
            raise DefinitionNotFoundError(name)
        return definition

    def definitions(self) -> List[str]:
        with self._definitions_lock:
            return list(self._definitions.keys())

    # Notification and command API

    def subscribe(self, event_type: str, unit: UnitRef) -> bool:
        return self._subscriptions.subscribe(event_type, self._resolve(unit))

    def unsubscribe(self, event_type: str, unit_name: str) -> bool:
        return self._subscriptions.unsubscribe(event_type, unit_name)

    def notify(self, event_type: str, payload: Optional[Mapping[str, Any]] = None) -> List[Outcome]:
        return self._subscriptions.notify(event_type, payload)

    def enqueue_command(self, unit: UnitRef, context: Optional[Context] = None):
        return self._commands.enqueue(self._resolve(unit), context)

    def drain_commands(self, cancellation: Optional[CancellationPort] = None) -> List[CommandReceipt]:
        return self._commands.drain(cancellation)

    # Execution API

    def _cancellation_for_run(self, cancellation: Optional[CancellationPort]) -> Optional[CancellationPort]:
        if cancellation is None and self._config.default_deadline_seconds:
            return Deadline(self._config.default_deadline_seconds)
        return cancellation

    def run(
        self,
        name: str,
        context: Optional[Context] = None,
        cancellation: Optional[CancellationPort] = None,
    ) -> DispatchResult:
        """
        Execute the chain or state machine stored under ``name``.

        Reject, an unhandled chain and a terminal state are returned as data.
        A Fault is returned as an error value unless ``raise_on_fault`` is set.

        Args:
            name: Definition name
            context: Initial context; a fresh one is used if omitted
            cancellation: Token checked between handler steps

        Returns:
            DispatchResult with final context, outcome and trace

        Raises:
            DefinitionNotFoundError: If no definition is stored under ``name``
            HandlerFaultError: If the run faulted and ``raise_on_fault`` is set
        """
        definition = self.get_definition(name)
        context = context if context is not None else Context()
        cancellation = self._cancellation_for_run(cancellation)
        trace = Trace()
        start_time = self._metrics.start_timer()

        if isinstance(definition, Chain):
            final_context, outcome = definition.dispatch(context, cancellation, trace)
            result = DispatchResult(name, final_context, outcome, trace)
        else:
            instance = definition.start(context, trace)
            self._run_to_completion(instance, cancellation)
            outcome = instance.last_outcome
            if not instance.is_terminal and not outcome.is_cancelled:
                outcome = Outcome.from_fault(
                    definition.unit_for(instance.current_state).name,
                    StepLimitExceededError(name, self._config.max_state_steps),
                    reason="step limit exceeded",
                )
            result = DispatchResult(name, instance.context, outcome, trace, instance.current_state)

        if not self._config.trace_enabled:
            result = DispatchResult(result.definition, result.context, result.outcome, Trace(), result.final_state)

        self._metrics.record_outcome("run", outcome.kind.value, start_time, {"definition": name})
        self._log_result(result)

        if outcome.is_fault and self._config.raise_on_fault:
            result.raise_for_fault()
        return result

    def _run_to_completion(self, instance: StateMachineInstance, cancellation: Optional[CancellationPort]) -> None:
        while not instance.is_terminal and instance.steps < self._config.max_state_steps:
            instance.advance(cancellation)
            if not instance.is_terminal and instance.last_outcome.is_cancelled:
                return

    def _log_result(self, result: DispatchResult) -> None:
        outcome = result.outcome
        if outcome.is_fault:
            fault_context = FaultContext("run", outcome.fault, definition=result.definition)
            self._logger.error("Run faulted", **fault_context.to_dict())
            return
        log = self._logger.warning if outcome.is_reject else self._logger.info
        log(
            "Run completed",
            definition=result.definition,
            outcome=outcome.kind.value,
            reason=outcome.reason,
            steps=len(result.trace),
            revision=result.context.revision,
            final_state=result.final_state,
        )

    # Session API

    def start_session(self, machine_name: str, context: Optional[Context] = None) -> StateMachineInstance:
        """
        Start a state machine session for step-by-step advancing.

        Raises:
            DefinitionNotFoundError: If ``machine_name`` is not a stored state machine
        """
        definition = self.get_definition(machine_name)
        if not isinstance(definition, StateMachine):
            raise DefinitionNotFoundError(machine_name)
        return definition.start(context if context is not None else Context())

    def advance(
        self,
        instance: StateMachineInstance,
        cancellation: Optional[CancellationPort] = None,
    ) -> StateMachineInstance:
        """Advance a session one step."""
        instance.advance(cancellation)
        self._logger.debug(
            "Advanced session",
            machine=instance.machine.name,
            state=instance.current_state,
            outcome=str(instance.last_outcome),
            terminal=instance.is_terminal,
        )
        return instance
