"""Domain ports for infrastructure concerns."""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class CancellationPort(Protocol):
    """Port checked between handler steps to stop a run early."""

    @property
    def is_cancelled(self) -> bool:
        """Whether the run should stop before the next step."""
        ...

    @property
    def reason(self) -> Optional[str]:
        """Why the run was cancelled, if it was."""
        ...
