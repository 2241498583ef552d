"""Outcome value objects returned by every handler step."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class OutcomeKind(str, Enum):
    """Result tags of a handler step."""
    HANDLED = "Handled"
    PASS_THROUGH = "PassThrough"
    REJECT = "Reject"
    FAULT = "Fault"
    CANCELLED = "Cancelled"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HandlerFault:
    """A defect raised inside a handler unit."""
    handler: str
    error_type: str
    message: str
    exception: Optional[BaseException] = None

    @classmethod
    def from_exception(cls, handler: str, exc: BaseException) -> HandlerFault:
        return cls(
            handler=handler,
            error_type=type(exc).__name__,
            message=str(exc),
            exception=exc,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"handler": self.handler, "errorType": self.error_type, "message": self.message}


@dataclass(frozen=True)
class Outcome:
    """
    Outcome of evaluating one handler unit, a chain or a state machine.

    ``Reject`` is an expected business result and carries a reason; ``Fault``
    is a defect and carries the offending handler; ``Cancelled`` means the
    run stopped between steps.
    """
    kind: OutcomeKind
    reason: Optional[str] = None
    fault: Optional[HandlerFault] = None

    @classmethod
    def handled(cls) -> Outcome:
        return _HANDLED

    @classmethod
    def pass_through(cls) -> Outcome:
        return _PASS_THROUGH

    @classmethod
    def reject(cls, reason: str) -> Outcome:
        return cls(OutcomeKind.REJECT, reason=reason)

    @classmethod
    def from_fault(cls, handler: str, exc: BaseException, reason: Optional[str] = None) -> Outcome:
        fault = HandlerFault.from_exception(handler, exc)
        return cls(OutcomeKind.FAULT, reason=reason or fault.message, fault=fault)

    @classmethod
    def cancelled(cls, reason: str = "cancelled") -> Outcome:
        return cls(OutcomeKind.CANCELLED, reason=reason)

    @property
    def is_handled(self) -> bool:
        return self.kind is OutcomeKind.HANDLED

    @property
    def is_pass_through(self) -> bool:
        return self.kind is OutcomeKind.PASS_THROUGH

    @property
    def is_reject(self) -> bool:
        return self.kind is OutcomeKind.REJECT

    @property
    def is_fault(self) -> bool:
        return self.kind is OutcomeKind.FAULT

    @property
    def is_cancelled(self) -> bool:
        return self.kind is OutcomeKind.CANCELLED

    @property
    def stops_dispatch(self) -> bool:
        """Whether a chain must stop after this outcome."""
        return self.kind is not OutcomeKind.PASS_THROUGH

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"outcome": self.kind.value}
        if self.reason is not None:
            result["reason"] = self.reason
        if self.fault is not None:
            result["fault"] = self.fault.to_dict()
        return result

    def __str__(self) -> str:
        if self.reason is None:
            return self.kind.value
        return f"{self.kind.value}({self.reason})"


_HANDLED = Outcome(OutcomeKind.HANDLED)
_PASS_THROUGH = Outcome(OutcomeKind.PASS_THROUGH)
