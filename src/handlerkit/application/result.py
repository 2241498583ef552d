"""Dispatch result returned by Dispatcher.run()."""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from handlerkit.domain.base.exceptions import HandlerFaultError
from handlerkit.domain.context import Context
from handlerkit.domain.handler import Outcome
from handlerkit.domain.trace import Trace


@dataclass(frozen=True)
class DispatchResult:
    """Final context, outcome and trace of one run."""
    definition: str
    context: Context
    outcome: Outcome
    trace: Trace
    final_state: Optional[str] = None

    @property
    def handled_by(self) -> Optional[str]:
        """Handler whose step produced a Handled outcome last, if any."""
        if not self.outcome.is_handled:
            return None
        for entry in reversed(self.trace.entries):
            if entry.matched and entry.outcome == self.outcome.kind.value:
                return entry.handler
        return None

    def raise_for_fault(self) -> "DispatchResult":
        """
        Raise if the run faulted, otherwise return self.

        Raises:
            HandlerFaultError: With the offending handler's name attached
        """
        if self.outcome.is_fault:
            fault = self.outcome.fault
            handler = fault.handler if fault else self.definition
            message = fault.message if fault else (self.outcome.reason or "fault")
            cause = fault.exception if fault else None
            raise HandlerFaultError(handler, message, cause) from cause
        return self

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "definition": self.definition,
            **self.outcome.to_dict(),
            "revision": self.context.revision,
            "trace": self.trace.to_list(),
        }
        if self.final_state is not None:
            result["finalState"] = self.final_state
        return result
