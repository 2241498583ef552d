import os
import sys

import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from handlerkit.application import Dispatcher  # noqa: E402
from handlerkit.config.schemas import DispatchConfig  # noqa: E402
from handlerkit.domain.context import Context  # noqa: E402
from handlerkit.domain.handler import HandlerUnit, Outcome, always  # noqa: E402


def _unit(name, outcome=None, predicate=None, writes=None, calls=None):
    """Build a handler unit that records its invocation and optionally writes keys."""

    def action(ctx):
        if calls is not None:
            calls.append(name)
        if writes:
            ctx.update(writes)
        return ctx, outcome or Outcome.handled()

    return HandlerUnit(name, predicate or always, action)


@pytest.fixture
def make_unit():
    """Factory for recording handler units."""
    return _unit


@pytest.fixture
def calls():
    """Shared invocation log for handler units."""
    return []


@pytest.fixture
def context():
    return Context({"issue": "Basic"})


@pytest.fixture
def dispatcher():
    return Dispatcher(config=DispatchConfig())


@pytest.fixture
def support_dispatcher(dispatcher):
    """Dispatcher with the Basic/Intermediate support escalation chain."""

    def resolve(level):
        def action(ctx):
            ctx.set("resolved_by", level)
            return ctx, Outcome.handled()

        return action

    dispatcher.register_handler("Basic", lambda ctx: ctx.get("issue") == "Basic", resolve("Basic"))
    dispatcher.register_handler(
        "Intermediate", lambda ctx: ctx.get("issue") == "Intermediate", resolve("Intermediate")
    )
    dispatcher.build_chain("support", ["Basic", "Intermediate"])
    return dispatcher
