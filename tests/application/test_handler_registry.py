import threading

import pytest

from handlerkit.application import HandlerRegistry
from handlerkit.domain.base.exceptions import HandlerNotFoundError
from handlerkit.domain.handler import Outcome, always


class TestHandlerRegistry:
    """Tests for handler registration."""

    def setup_method(self):
        """Set up test fixtures."""
        self.registry = HandlerRegistry()

    def test_register_and_get(self, make_unit):
        unit = make_unit("Basic")

        self.registry.register(unit)

        assert self.registry.get("Basic") is unit
        assert self.registry.is_registered("Basic")
        assert len(self.registry) == 1

    def test_register_handler_builds_unit(self):
        unit = self.registry.register_handler("Basic", always, lambda ctx: Outcome.handled())

        assert unit.name == "Basic"
        assert self.registry.names() == ["Basic"]

    def test_reregistering_supersedes_binding(self, make_unit):
        # Arrange
        original = make_unit("Basic")
        replacement = make_unit("Basic", outcome=Outcome.reject("closed"))
        self.registry.register(original)

        # Act
        self.registry.register(replacement)

        # Assert
        assert self.registry.get("Basic") is replacement
        assert len(self.registry) == 1

    def test_get_missing_raises(self):
        with pytest.raises(HandlerNotFoundError) as exc_info:
            self.registry.get("Unknown")

        assert exc_info.value.entity_name == "Unknown"

    def test_resolve_preserves_order(self, make_unit):
        self.registry.register(make_unit("A"))
        self.registry.register(make_unit("B"))

        units = self.registry.resolve(["B", "A"])

        assert [unit.name for unit in units] == ["B", "A"]

    def test_resolve_missing_raises(self, make_unit):
        self.registry.register(make_unit("A"))

        with pytest.raises(HandlerNotFoundError):
            self.registry.resolve(["A", "B"])

    def test_unregister(self, make_unit):
        self.registry.register(make_unit("A"))

        assert self.registry.unregister("A") is True
        assert self.registry.unregister("A") is False
        assert not self.registry.is_registered("A")

    def test_concurrent_registration(self, make_unit):
        threads = [
            threading.Thread(target=self.registry.register, args=(make_unit(f"handler-{i}"),))
            for i in range(50)
        ]

        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(self.registry) == 50
