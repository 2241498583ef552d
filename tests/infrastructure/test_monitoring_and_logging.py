import logging
import threading

import pytest
import structlog

from handlerkit.application import Dispatcher
from handlerkit.config.schemas import LogDestination, LogFileConfig, LoggingConfig
from handlerkit.domain.handler import HandlerFault, Outcome
from handlerkit.infrastructure.error import FaultContext
from handlerkit.infrastructure.logging import get_logger, setup_logging
from handlerkit.infrastructure.logging.logger import DetailedFormatter
from handlerkit.infrastructure.monitoring import MetricsCollector


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging() changes to the root logger."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestMetricsCollector:
    """Tests for run metrics."""

    def setup_method(self):
        """Set up test fixtures."""
        self.metrics = MetricsCollector()

    def test_record_outcome_records_duration_and_count(self):
        # Arrange
        start = self.metrics.start_timer()

        # Act
        self.metrics.record_outcome("run", "Handled", start, {"definition": "support"})

        # Assert
        duration = self.metrics.get_metrics("run_duration")[0]
        assert duration.value >= 0
        assert duration.tags == {"definition": "support", "outcome": "Handled"}
        assert self.metrics.count("run_handled") == 1

    def test_record_outcome_without_timer(self):
        self.metrics.record_outcome("notify", "Fault", None)

        assert self.metrics.count("notify_duration") == 0
        assert self.metrics.count("notify_fault") == 1

    def test_clear_metrics(self):
        self.metrics.record_outcome("run", "Handled", None)

        self.metrics.clear_metrics()

        assert self.metrics.get_metrics() == []

    def test_concurrent_recording(self):
        threads = [
            threading.Thread(target=self.metrics.record_outcome, args=("run", "Handled", None))
            for _ in range(25)
        ]

        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert self.metrics.count("run_handled") == 25


def test_fault_context_to_dict():
    # Arrange
    fault = HandlerFault.from_exception("Basic", ValueError("bad ticket"))

    # Act
    data = FaultContext("run", fault, definition="support").to_dict()

    # Assert
    assert data["operation"] == "run"
    assert data["handler"] == "Basic"
    assert data["error_type"] == "ValueError"
    assert data["error_message"] == "bad ticket"
    assert data["definition"] == "support"
    assert data["thread_id"] == threading.get_ident()
    assert "timestamp" in data


def test_detailed_formatter_adds_caller_info():
    formatter = DetailedFormatter("%(caller_info)s %(message)s")
    record = logging.LogRecord("handlerkit", logging.INFO, "/tmp/mod.py", 12, "hello", None, None, func="run")

    assert formatter.format(record) == "mod.run:12 hello"


def test_setup_logging_writes_to_rotating_file(tmp_path, restore_root_logger):
    # Arrange
    log_file = tmp_path / "logs" / "handlerkit.log"
    config = LoggingConfig(
        level="debug",
        destination=LogDestination.FILE,
        file=LogFileConfig(path=str(log_file)),
    )

    # Act
    setup_logging(config)
    get_logger("handlerkit.test").info("Run completed", definition="support")
    for handler in logging.getLogger().handlers:
        handler.flush()

    # Assert
    content = log_file.read_text()
    assert "Run completed" in content
    assert "definition='support'" in content


def test_building_dispatcher_keeps_host_structlog_configuration():
    # Arrange
    host_processors = [structlog.processors.JSONRenderer()]
    structlog.configure(processors=host_processors)

    try:
        # Act
        dispatcher = Dispatcher()
        dispatcher.register_handler("Basic", None, lambda ctx: Outcome.handled())

        # Assert
        assert structlog.get_config()["processors"] == host_processors
    finally:
        structlog.reset_defaults()
