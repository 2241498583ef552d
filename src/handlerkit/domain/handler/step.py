"""Single handler step shared by chains and state machines."""
import logging
from dataclasses import dataclass
from typing import Optional

from handlerkit.domain.base.exceptions import RevisionConflictError
from handlerkit.domain.base.ports import CancellationPort
from handlerkit.domain.context import Context
from handlerkit.domain.handler.handler_unit import HandlerUnit
from handlerkit.domain.handler.outcome import HandlerFault, Outcome
from handlerkit.domain.trace import SKIPPED, Trace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepResult:
    """Result of evaluating one handler unit against a context."""
    handler: str
    matched: bool
    context: Context
    outcome: Outcome


def cancellation_outcome(cancellation: Optional[CancellationPort]) -> Optional[Outcome]:
    """Return a Cancelled outcome if the token has fired, else None."""
    if cancellation is not None and cancellation.is_cancelled:
        return Outcome.cancelled(cancellation.reason or "cancelled")
    return None


def execute_step(
    unit: HandlerUnit,
    context: Context,
    trace: Optional[Trace] = None,
    unmatched_label: str = SKIPPED,
) -> StepResult:
    """
    Evaluate ``unit`` against ``context``.

    The action runs on a fork, so the caller's context is only replaced when
    the step completes without a fault. A predicate that does not match yields
    PassThrough without running the action.

    Args:
        unit: Handler unit to evaluate
        context: Context owned by the current dispatch
        trace: Optional trace to append the step to
        unmatched_label: Trace label for a predicate that did not match

    Returns:
        StepResult with the adopted context and the outcome
    """
    revision_before = context.revision

    try:
        matched = unit.evaluate(context)
    except Exception as e:
        logger.error("Predicate of handler %s raised %s: %s", unit.name, type(e).__name__, e)
        outcome = Outcome.from_fault(unit.name, e)
        _record(trace, unit.name, False, outcome.kind.value, revision_before, revision_before)
        return StepResult(unit.name, False, context, outcome)

    if not matched:
        _record(trace, unit.name, False, unmatched_label, revision_before, revision_before)
        return StepResult(unit.name, False, context, Outcome.pass_through())

    try:
        new_context, outcome = unit.invoke(context.fork())
        if new_context.revision < revision_before:
            raise RevisionConflictError(revision_before, new_context.revision)
    except Exception as e:
        logger.error("Action of handler %s raised %s: %s", unit.name, type(e).__name__, e)
        outcome = Outcome.from_fault(unit.name, e)
        _record(trace, unit.name, True, outcome.kind.value, revision_before, revision_before)
        return StepResult(unit.name, True, context, outcome)

    if outcome.is_fault:
        if outcome.fault is None:
            outcome = Outcome(
                outcome.kind,
                reason=outcome.reason,
                fault=HandlerFault(unit.name, "Fault", outcome.reason or "fault reported by handler"),
            )
        _record(trace, unit.name, True, outcome.kind.value, revision_before, revision_before)
        return StepResult(unit.name, True, context, outcome)

    _record(trace, unit.name, True, outcome.kind.value, revision_before, new_context.revision)
    return StepResult(unit.name, True, new_context, outcome)


def _record(
    trace: Optional[Trace],
    handler: str,
    matched: bool,
    outcome: str,
    revision_before: int,
    revision_after: int,
) -> None:
    logger.debug(
        "Handler %s matched=%s outcome=%s revision %d -> %d",
        handler,
        matched,
        outcome,
        revision_before,
        revision_after,
    )
    if trace is not None:
        trace.record(handler, matched, outcome, revision_before, revision_after)
