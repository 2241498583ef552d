"""Fault context for logging handler defects."""

import threading
from datetime import datetime, timezone
from typing import Any, Dict

from handlerkit.domain.handler import HandlerFault


class FaultContext:
    """Rich context information for a handler fault."""

    def __init__(self, operation: str, fault: HandlerFault, **additional_context):
        self.operation = operation
        self.fault = fault
        self.timestamp = datetime.now(timezone.utc)
        self.thread_id = threading.get_ident()
        self.additional_context = additional_context

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for logging."""
        return {
            "operation": self.operation,
            "handler": self.fault.handler,
            "error_type": self.fault.error_type,
            "error_message": self.fault.message,
            "timestamp": self.timestamp.isoformat(),
            "thread_id": self.thread_id,
            **self.additional_context,
        }
