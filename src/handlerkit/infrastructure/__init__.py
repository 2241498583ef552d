"""Infrastructure layer - logging, cancellation, fault context and metrics."""

from .cancellation import CancellationToken, Deadline

__all__ = ["CancellationToken", "Deadline"]
