"""In-memory metrics for dispatch runs."""
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from handlerkit.infrastructure.logging import get_logger


@dataclass
class MetricData:
    name: str
    value: float
    timestamp: datetime
    tags: Dict[str, str]


class MetricsCollector:
    """Collector for dispatch metrics."""

    def __init__(self):
        self._logger = get_logger(__name__)
        self._metrics: List[MetricData] = []
        self._lock = threading.Lock()

    def start_timer(self) -> float:
        """Start a timer for performance measurement."""
        return time.perf_counter()

    def record_outcome(
        self,
        operation: str,
        outcome: str,
        start_time: Optional[float],
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        """Record the duration and outcome count of one run."""
        tags = dict(tags or {})
        tags["outcome"] = outcome
        if start_time is not None:
            duration = (time.perf_counter() - start_time) * 1000  # Convert to milliseconds
            self._record_metric(f"{operation}_duration", duration, tags)
        self._record_metric(f"{operation}_{outcome.lower()}", 1, tags)

    def _record_metric(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        """Record a metric."""
        metric = MetricData(
            name=name,
            value=value,
            timestamp=datetime.now(timezone.utc),
            tags=tags or {},
        )
        with self._lock:
            self._metrics.append(metric)
        self._logger.debug("Recorded metric", metric=name, value=value)

    def get_metrics(self, name: Optional[str] = None) -> List[MetricData]:
        """Get recorded metrics, optionally filtered by name."""
        with self._lock:
            metrics = list(self._metrics)
        if name is None:
            return metrics
        return [metric for metric in metrics if metric.name == name]

    def count(self, name: str) -> int:
        return len(self.get_metrics(name))

    def clear_metrics(self) -> None:
        """Clear all recorded metrics."""
        with self._lock:
            self._metrics.clear()
