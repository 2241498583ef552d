"""Error handling package."""

from .context import FaultContext

__all__ = ["FaultContext"]
