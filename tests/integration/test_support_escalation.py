"""End-to-end tests wiring configuration, dispatcher, chains, machines and notifications."""
import threading

import pytest

from handlerkit import Context, Dispatcher, Outcome
from handlerkit.config import ConfigurationManager


@pytest.fixture
def configured_dispatcher(monkeypatch):
    monkeypatch.delenv("HANDLERKIT_CONFIG_FILE", raising=False)
    config = ConfigurationManager(overrides={"dispatch": {"max_state_steps": 50}}).get_config()
    return Dispatcher.from_config(config)


@pytest.mark.integration
def test_ticket_lifecycle(configured_dispatcher):
    """A ticket is triaged by a chain, worked by a machine and announced to subscribers."""
    dispatcher = configured_dispatcher
    announcements = []

    # Arrange: triage chain
    def assign(level):
        def action(ctx):
            ctx.set("queue", level)
            return ctx, Outcome.handled()

        return action

    dispatcher.register_handler("Basic", lambda ctx: ctx.get("issue") == "Basic", assign("basic"))
    dispatcher.register_handler("Intermediate", lambda ctx: ctx.get("issue") == "Intermediate", assign("tier2"))
    dispatcher.build_chain("triage", ["Basic", "Intermediate"])

    # Arrange: work machine
    def work(ctx):
        ctx.set("attempts", ctx.get("attempts", 0) + 1)
        if ctx.get("attempts") < 2:
            return ctx, Outcome.pass_through()
        return ctx, Outcome.handled()

    dispatcher.register_handler("Open", None, lambda ctx: Outcome.handled())
    dispatcher.register_handler("Working", None, work)
    dispatcher.register_handler("Closed", None, lambda ctx: (ctx.set("closed", True), Outcome.handled()))
    dispatcher.build_state_machine(
        "ticket",
        {"Open": "Open", "Working": "Working", "Closed": "Closed"},
        [
            ("Open", "Handled", "Working"),
            ("Working", "PassThrough", "Working"),
            ("Working", "Handled", "Closed"),
        ],
        "Open",
    )

    # Arrange: notification
    def announce(ctx):
        announcements.append(ctx.get("queue"))
        return ctx, Outcome.handled()

    dispatcher.register_handler("Announce", None, announce)
    dispatcher.subscribe("ticket.closed", "Announce")

    # Act
    triaged = dispatcher.run("triage", Context({"issue": "Intermediate"}))
    worked = dispatcher.run("ticket", triaged.context)
    outcomes = dispatcher.notify("ticket.closed", worked.context.to_dict())

    # Assert
    assert triaged.handled_by == "Intermediate"
    assert worked.outcome.is_handled
    assert worked.final_state == "Closed"
    assert worked.context.get("attempts") == 2
    assert worked.context.get("closed") is True
    assert [entry.handler for entry in worked.trace] == ["Open", "Working", "Working", "Closed"]
    assert worked.context.revision > triaged.context.revision
    assert announcements == ["tier2"]
    assert outcomes[0].is_handled


@pytest.mark.integration
def test_concurrent_runs_share_definitions(support_dispatcher):
    """Many threads run the same chain, each with its own context."""
    results = {}

    def run(index):
        issue = "Basic" if index % 2 else "Intermediate"
        results[index] = support_dispatcher.run("support", Context({"issue": issue, "n": index}))

    threads = [threading.Thread(target=run, args=(i,)) for i in range(40)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 40
    for index, result in results.items():
        expected = "Basic" if index % 2 else "Intermediate"
        assert result.context.get("resolved_by") == expected
        assert result.context.get("n") == index
        assert result.context.revision == 1
