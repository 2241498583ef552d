"""Transition value object for state machines."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence, Union

from handlerkit.domain.base.exceptions import ValidationError
from handlerkit.domain.context import Context
from handlerkit.domain.handler import Outcome, OutcomeKind

TransitionPredicate = Callable[[Outcome, Context], bool]
TransitionCondition = Union[OutcomeKind, TransitionPredicate]


@dataclass(frozen=True)
class Transition:
    """Edge from ``source`` to ``target`` taken when ``condition`` holds."""
    source: str
    target: str
    condition: TransitionCondition

    def __post_init__(self):
        if isinstance(self.condition, str) and not isinstance(self.condition, OutcomeKind):
            try:
                object.__setattr__(self, "condition", OutcomeKind(self.condition))
            except ValueError:
                raise ValidationError(
                    f"Unknown outcome '{self.condition}' in transition {self.source} -> {self.target}"
                ) from None
        elif not isinstance(self.condition, OutcomeKind) and not callable(self.condition):
            raise ValidationError(
                f"Transition {self.source} -> {self.target} needs an OutcomeKind or a callable condition"
            )

    @classmethod
    def on(cls, source: str, outcome: Union[OutcomeKind, str], target: str) -> Transition:
        """Transition taken when the step's outcome kind equals ``outcome``."""
        return cls(source=source, target=target, condition=outcome)

    @classmethod
    def when(cls, source: str, predicate: TransitionPredicate, target: str) -> Transition:
        """Transition taken when ``predicate(outcome, context)`` is true."""
        return cls(source=source, target=target, condition=predicate)

    @classmethod
    def coerce(cls, value: Union[Transition, Sequence]) -> Transition:
        """Accept a Transition or a ``(source, condition, target)`` triple."""
        if isinstance(value, Transition):
            return value
        if isinstance(value, (tuple, list)) and len(value) == 3:
            source, condition, target = value
            return cls(source=source, target=target, condition=condition)
        raise ValidationError(f"Cannot build a transition from {value!r}")

    @property
    def is_self_transition(self) -> bool:
        return self.source == self.target

    def matches(self, outcome: Outcome, context: Context) -> bool:
        if isinstance(self.condition, OutcomeKind):
            return outcome.kind is self.condition
        return bool(self.condition(outcome, context))

    def describe(self) -> str:
        if isinstance(self.condition, OutcomeKind):
            label = self.condition.value
        else:
            label = getattr(self.condition, "__name__", "predicate")
        return f"{self.source} --{label}--> {self.target}"
