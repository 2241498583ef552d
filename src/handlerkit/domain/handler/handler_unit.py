"""HandlerUnit - the atomic predicate + action behavior."""
from __future__ import annotations

from typing import Callable, Tuple, Union

from handlerkit.domain.base.exceptions import ValidationError
from handlerkit.domain.context import Context
from handlerkit.domain.handler.outcome import Outcome

Predicate = Callable[[Context], bool]
ActionResult = Union[Tuple[Context, Outcome], Outcome]
Action = Callable[[Context], ActionResult]


class MalformedActionResultError(TypeError):
    """Raised when an action returns something other than (Context, Outcome) or Outcome."""

    def __init__(self, handler: str, value: object):
        super().__init__(
            f"Handler '{handler}' returned {type(value).__name__}; "
            "expected (Context, Outcome) or Outcome"
        )
        self.handler = handler


def always(_: Context) -> bool:
    """Predicate that matches every context."""
    return True


class HandlerUnit:
    """
    A named, immutable behavior: a pure predicate deciding applicability and
    an action producing a context and an outcome.

    Units compare and hash by name; two units with the same name are the same
    identity, which is what chains and registries deduplicate on.
    """

    __slots__ = ("_name", "_predicate", "_action")

    def __init__(self, name: str, predicate: Predicate, action: Action):
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Handler name must be a non-empty string")
        if not callable(predicate):
            raise ValidationError(f"Predicate of handler '{name}' is not callable")
        if not callable(action):
            raise ValidationError(f"Action of handler '{name}' is not callable")
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_predicate", predicate)
        object.__setattr__(self, "_action", action)

    def __setattr__(self, key, value):
        raise AttributeError(f"HandlerUnit '{self._name}' is immutable")

    @property
    def name(self) -> str:
        return self._name

    @property
    def predicate(self) -> Predicate:
        return self._predicate

    @property
    def action(self) -> Action:
        return self._action

    def evaluate(self, context: Context) -> bool:
        """Evaluate the predicate; exceptions propagate to the caller."""
        return bool(self._predicate(context))

    def invoke(self, context: Context) -> Tuple[Context, Outcome]:
        """
        Run the action and normalize its result.

        A bare ``Outcome`` means the action worked on the context it was
        given.

        Raises:
            MalformedActionResultError: If the action returns anything else
        """
        result = self._action(context)
        if isinstance(result, Outcome):
            return context, result
        if (
            isinstance(result, tuple)
            and len(result) == 2
            and isinstance(result[0], Context)
            and isinstance(result[1], Outcome)
        ):
            return result[0], result[1]
        raise MalformedActionResultError(self._name, result)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HandlerUnit):
            return NotImplemented
        return self._name == other._name

    def __hash__(self) -> int:
        return hash((HandlerUnit, self._name))

    def __repr__(self) -> str:
        return f"HandlerUnit(name={self._name!r})"
