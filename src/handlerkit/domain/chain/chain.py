"""Chain - ordered handler units with first-match-wins semantics."""
from typing import Iterable, Iterator, List, Optional, Tuple

from handlerkit.domain.base.exceptions import InvalidDefinitionError
from handlerkit.domain.base.ports import CancellationPort
from handlerkit.domain.context import Context
from handlerkit.domain.handler import (
    HandlerUnit,
    Outcome,
    cancellation_outcome,
    execute_step,
)
from handlerkit.domain.trace import Trace


class Chain:
    """
    Immutable ordered sequence of handler units.

    Units are held by reference. "Modifying" a chain returns a new Chain, so a
    built chain can be shared read-only between concurrent dispatches.
    """

    __slots__ = ("_name", "_units")

    def __init__(self, units: Iterable[HandlerUnit] = (), name: str = "chain"):
        units = tuple(units)
        problems: List[str] = []
        seen = set()
        for unit in units:
            if not isinstance(unit, HandlerUnit):
                problems.append(f"{unit!r} is not a HandlerUnit")
                continue
            if unit.name in seen:
                problems.append(f"duplicate handler '{unit.name}'")
            seen.add(unit.name)
        if problems:
            raise InvalidDefinitionError(name, problems)

        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_units", units)

    def __setattr__(self, key, value):
        raise AttributeError("Chain is immutable")

    @property
    def name(self) -> str:
        return self._name

    @property
    def units(self) -> Tuple[HandlerUnit, ...]:
        return self._units

    def handler_names(self) -> List[str]:
        return [unit.name for unit in self._units]

    def append(self, unit: HandlerUnit) -> "Chain":
        return Chain(self._units + (unit,), self._name)

    def extend(self, units: Iterable[HandlerUnit]) -> "Chain":
        return Chain(self._units + tuple(units), self._name)

    def without(self, name: str) -> "Chain":
        return Chain((unit for unit in self._units if unit.name != name), self._name)

    def dispatch(
        self,
        context: Context,
        cancellation: Optional[CancellationPort] = None,
        trace: Optional[Trace] = None,
    ) -> Tuple[Context, Outcome]:
        """
        Run the chain against ``context``.

        Units are evaluated in order. ``Handled`` stops the chain, ``PassThrough``
        moves on, ``Reject`` stops and is surfaced, ``Fault`` stops with the
        pre-step context. Cancellation is checked before every unit. An
        exhausted chain yields ``PassThrough``.

        Args:
            context: Context owned by this dispatch
            cancellation: Optional token checked between units
            trace: Optional trace to append evaluations to

        Returns:
            Tuple of (final context, outcome)
        """
        for unit in self._units:
            cancelled = cancellation_outcome(cancellation)
            if cancelled is not None:
                return context, cancelled

            step = execute_step(unit, context, trace)
            context = step.context
            if step.outcome.stops_dispatch:
                return context, step.outcome

        return context, Outcome.pass_through()

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[HandlerUnit]:
        return iter(self._units)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return item in self.handler_names()
        return item in self._units

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chain):
            return NotImplemented
        return self._name == other._name and self._units == other._units

    def __hash__(self) -> int:
        return hash((Chain, self._name, self._units))

    def __repr__(self) -> str:
        return f"Chain(name={self._name!r}, handlers={self.handler_names()!r})"
