"""State machine definition and per-session instance."""
import logging
from collections import deque
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from handlerkit.domain.base.exceptions import InvalidDefinitionError, ValidationError
from handlerkit.domain.base.ports import CancellationPort
from handlerkit.domain.context import Context
from handlerkit.domain.handler import (
    HandlerUnit,
    Outcome,
    OutcomeKind,
    cancellation_outcome,
    execute_step,
)
from handlerkit.domain.state_machine.transition import Transition
from handlerkit.domain.trace import Trace

logger = logging.getLogger(__name__)


class StateMachine:
    """
    Immutable state machine definition.

    Each state is bound to exactly one handler unit. Transitions are keyed by
    source state and evaluated in declaration order against the outcome of
    that state's unit; the first matching transition wins. A state without a
    matching transition ends the session.

    Construction validates the definition: an undefined initial state or a
    transition that references an undefined state raises
    InvalidDefinitionError. States unreachable from the initial state are only
    reported (``unreachable_states``) since they are dead weight, not unsafe.
    """

    def __init__(
        self,
        name: str,
        states: Mapping[str, HandlerUnit],
        transitions: Iterable[Union[Transition, Sequence]],
        initial: str,
        warn_unreachable: bool = True,
    ):
        problems: List[str] = []

        if not states:
            problems.append("at least one state is required")
        for state, unit in states.items():
            if not isinstance(unit, HandlerUnit):
                problems.append(f"state '{state}' is not bound to a HandlerUnit")
        if initial not in states:
            problems.append(f"initial state '{initial}' is not defined")

        coerced: List[Transition] = []
        for raw in transitions:
            try:
                coerced.append(Transition.coerce(raw))
            except ValidationError as e:
                problems.append(str(e))

        for transition in coerced:
            if transition.source not in states:
                problems.append(f"transition {transition.describe()} has undefined source '{transition.source}'")
            if transition.target not in states:
                problems.append(f"transition {transition.describe()} has undefined target '{transition.target}'")

        if problems:
            raise InvalidDefinitionError(name, problems)

        table: Dict[str, List[Transition]] = {state: [] for state in states}
        for transition in coerced:
            table[transition.source].append(transition)

        self._name = name
        self._initial = initial
        self._states: Mapping[str, HandlerUnit] = MappingProxyType(dict(states))
        self._transitions: Mapping[str, Tuple[Transition, ...]] = MappingProxyType(
            {state: tuple(edges) for state, edges in table.items()}
        )
        self._unreachable = frozenset(self._find_unreachable())

        if self._unreachable and warn_unreachable:
            logger.warning(
                "State machine %s has states unreachable from %s: %s",
                name,
                initial,
                ", ".join(sorted(self._unreachable)),
            )

    def _find_unreachable(self) -> set:
        seen = {self._initial}
        queue = deque([self._initial])
        while queue:
            state = queue.popleft()
            for transition in self._transitions[state]:
                if transition.target not in seen:
                    seen.add(transition.target)
                    queue.append(transition.target)
        return set(self._states) - seen

    @property
    def name(self) -> str:
        return self._name

    @property
    def initial(self) -> str:
        return self._initial

    @property
    def states(self) -> Mapping[str, HandlerUnit]:
        return self._states

    @property
    def unreachable_states(self) -> FrozenSet[str]:
        return self._unreachable

    def unit_for(self, state: str) -> HandlerUnit:
        return self._states[state]

    def transitions_from(self, state: str) -> Tuple[Transition, ...]:
        return self._transitions.get(state, ())

    def is_structurally_terminal(self, state: str) -> bool:
        """True if the state has no outgoing transitions at all."""
        return not self._transitions.get(state)

    def next_state(self, state: str, outcome: Outcome, context: Context) -> Optional[str]:
        """Target of the first transition from ``state`` matching ``outcome``, if any."""
        for transition in self._transitions.get(state, ()):
            if transition.matches(outcome, context):
                return transition.target
        return None

    def start(self, context: Optional[Context] = None, trace: Optional[Trace] = None) -> "StateMachineInstance":
        """Create a new session positioned at the initial state."""
        return StateMachineInstance(self, context if context is not None else Context(), trace)

    def __repr__(self) -> str:
        return f"StateMachine(name={self._name!r}, initial={self._initial!r}, states={list(self._states)!r})"


class StateMachineInstance:
    """
    Mutable per-session state: current state, context and last outcome.

    Instances can be dropped by the caller between ``advance`` calls; they
    hold no resources.
    """

    def __init__(self, machine: StateMachine, context: Context, trace: Optional[Trace] = None):
        self._machine = machine
        self._context = context
        self._current = machine.initial
        self._last_outcome: Optional[Outcome] = None
        self._terminal = False
        self._steps = 0
        self._history: List[str] = [machine.initial]
        self._trace = trace if trace is not None else Trace()

    @property
    def machine(self) -> StateMachine:
        return self._machine

    @property
    def current_state(self) -> str:
        return self._current

    @property
    def context(self) -> Context:
        return self._context

    @property
    def last_outcome(self) -> Optional[Outcome]:
        return self._last_outcome

    @property
    def is_terminal(self) -> bool:
        return self._terminal

    @property
    def steps(self) -> int:
        return self._steps

    @property
    def history(self) -> List[str]:
        return list(self._history)

    @property
    def trace(self) -> Trace:
        return self._trace

    def advance(self, cancellation: Optional[CancellationPort] = None) -> "StateMachineInstance":
        """
        Run the current state's handler and follow the matching transition.

        Terminal is reported only after a state's unit has run and no
        transition matched its outcome, so entering a state with no outgoing
        transitions takes one more advance to finish the session. Terminal
        instances are left unchanged. A fired cancellation records a
        Cancelled outcome without running anything and keeps the instance
        resumable. A Fault ends the session with the pre-step context.

        Returns:
            This instance, for chaining
        """
        if self._terminal:
            return self

        cancelled = cancellation_outcome(cancellation)
        if cancelled is not None:
            self._last_outcome = cancelled
            return self

        unit = self._machine.unit_for(self._current)
        step = execute_step(
            unit,
            self._context,
            self._trace,
            unmatched_label=OutcomeKind.PASS_THROUGH.value,
        )
        self._steps += 1
        self._context = step.context
        self._last_outcome = step.outcome

        if step.outcome.is_fault:
            self._terminal = True
            return self

        try:
            target = self._machine.next_state(self._current, step.outcome, self._context)
        except Exception as e:
            logger.error(
                "Transition condition from %s in %s raised %s: %s",
                self._current,
                self._machine.name,
                type(e).__name__,
                e,
            )
            self._last_outcome = Outcome.from_fault(unit.name, e)
            self._terminal = True
            return self

        if target is None:
            self._terminal = True
        else:
            self._current = target
            self._history.append(target)
        return self

    def __repr__(self) -> str:
        return (
            f"StateMachineInstance(machine={self._machine.name!r}, state={self._current!r}, "
            f"terminal={self._terminal}, steps={self._steps})"
        )
