import pytest

from handlerkit.domain.base.exceptions import ValidationError
from handlerkit.domain.context import Context
from handlerkit.domain.handler import (
    HandlerUnit,
    MalformedActionResultError,
    Outcome,
    OutcomeKind,
    always,
    execute_step,
)
from handlerkit.domain.trace import Trace


def test_handler_unit_requires_name_and_callables():
    with pytest.raises(ValidationError):
        HandlerUnit("", always, lambda ctx: Outcome.handled())
    with pytest.raises(ValidationError):
        HandlerUnit("x", None, lambda ctx: Outcome.handled())
    with pytest.raises(ValidationError):
        HandlerUnit("x", always, "not callable")


def test_handler_unit_is_immutable():
    unit = HandlerUnit("x", always, lambda ctx: Outcome.handled())

    with pytest.raises(AttributeError):
        unit.name = "y"


def test_handler_units_compare_by_name():
    first = HandlerUnit("x", always, lambda ctx: Outcome.handled())
    second = HandlerUnit("x", lambda ctx: False, lambda ctx: Outcome.pass_through())

    assert first == second
    assert len({first, second}) == 1


def test_invoke_accepts_bare_outcome():
    # Arrange
    unit = HandlerUnit("x", always, lambda ctx: Outcome.reject("nope"))
    context = Context()

    # Act
    new_context, outcome = unit.invoke(context)

    # Assert
    assert new_context is context
    assert outcome.is_reject
    assert outcome.reason == "nope"


def test_invoke_rejects_malformed_result():
    unit = HandlerUnit("x", always, lambda ctx: "handled")

    with pytest.raises(MalformedActionResultError):
        unit.invoke(Context())


def test_outcome_constructors():
    assert Outcome.handled().kind is OutcomeKind.HANDLED
    assert Outcome.pass_through().kind is OutcomeKind.PASS_THROUGH
    assert str(Outcome.reject("bad input")) == "Reject(bad input)"
    assert Outcome.cancelled().is_cancelled
    assert not Outcome.pass_through().stops_dispatch
    assert Outcome.reject("r").stops_dispatch


def test_fault_outcome_carries_handler_identity():
    outcome = Outcome.from_fault("Basic", ValueError("boom"))

    assert outcome.is_fault
    assert outcome.fault.handler == "Basic"
    assert outcome.fault.error_type == "ValueError"
    assert outcome.to_dict() == {
        "outcome": "Fault",
        "reason": "boom",
        "fault": {"handler": "Basic", "errorType": "ValueError", "message": "boom"},
    }


class TestExecuteStep:
    """Tests for a single handler step."""

    def test_unmatched_predicate_skips_action(self, make_unit, calls):
        # Arrange
        unit = make_unit("x", predicate=lambda ctx: False, calls=calls)
        trace = Trace()

        # Act
        step = execute_step(unit, Context(), trace)

        # Assert
        assert not step.matched
        assert step.outcome.is_pass_through
        assert calls == []
        assert trace[0].outcome == "Skipped"

    def test_action_runs_on_fork(self, make_unit):
        # Arrange
        unit = make_unit("x", writes={"a": 1})
        context = Context()

        # Act
        step = execute_step(unit, context)

        # Assert
        assert step.context.get("a") == 1
        assert step.context.revision == 1
        assert "a" not in context
        assert context.revision == 0

    def test_raising_action_faults_with_original_context(self):
        # Arrange
        def action(ctx):
            ctx.set("partial", True)
            raise RuntimeError("precondition violated")

        unit = HandlerUnit("broken", always, action)
        context = Context()
        trace = Trace()

        # Act
        step = execute_step(unit, context, trace)

        # Assert
        assert step.outcome.is_fault
        assert step.outcome.fault.handler == "broken"
        assert step.context is context
        assert "partial" not in step.context
        assert trace[0].revision_after == trace[0].revision_before

    def test_raising_predicate_faults(self):
        def predicate(ctx):
            raise KeyError("issue")

        unit = HandlerUnit("x", predicate, lambda ctx: Outcome.handled())

        step = execute_step(unit, Context())

        assert step.outcome.is_fault
        assert not step.matched

    def test_revision_regression_is_a_fault(self):
        # Arrange
        unit = HandlerUnit("x", always, lambda ctx: (Context(), Outcome.handled()))
        context = Context().set("a", 1)

        # Act
        step = execute_step(unit, context)

        # Assert
        assert step.outcome.is_fault
        assert step.outcome.fault.error_type == "RevisionConflictError"

    def test_reported_fault_gets_handler_identity(self):
        unit = HandlerUnit("x", always, lambda ctx: Outcome(OutcomeKind.FAULT, reason="bad state"))

        step = execute_step(unit, Context())

        assert step.outcome.fault.handler == "x"
        assert step.outcome.fault.message == "bad state"
