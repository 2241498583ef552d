"""Monitoring package."""

from .metrics import MetricData, MetricsCollector

__all__ = ["MetricData", "MetricsCollector"]
