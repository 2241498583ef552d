"""Command Queue - deferred execution of handler units.

Commands are (handler unit, context) pairs executed in FIFO order when the
queue is drained. A drain works on the commands queued when it started;
commands enqueued while it runs wait for the next drain.
"""

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List, Optional
from uuid import uuid4

from handlerkit.domain.base.ports import CancellationPort
from handlerkit.domain.context import Context
from handlerkit.domain.handler import (
    HandlerUnit,
    Outcome,
    cancellation_outcome,
    execute_step,
)
from handlerkit.infrastructure.error import FaultContext
from handlerkit.infrastructure.logging import get_logger


@dataclass(frozen=True)
class Command:
    """A queued invocation of a handler unit."""
    unit: HandlerUnit
    context: Context
    command_id: str = field(default_factory=lambda: str(uuid4()))
    queued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class CommandReceipt:
    """Result of executing one queued command."""
    command_id: str
    handler: str
    matched: bool
    context: Context
    outcome: Outcome


class CommandQueue:
    """Thread-safe FIFO of commands."""

    def __init__(self):
        self._queue: Deque[Command] = deque()
        self._lock = threading.Lock()
        self._logger = get_logger(__name__)

    def enqueue(self, unit: HandlerUnit, context: Optional[Context] = None) -> Command:
        """Queue ``unit`` for execution against ``context``."""
        command = Command(unit=unit, context=context if context is not None else Context())
        with self._lock:
            self._queue.append(command)
        self._logger.debug("Queued command", handler=unit.name, command_id=command.command_id)
        return command

    def drain(self, cancellation: Optional[CancellationPort] = None) -> List[CommandReceipt]:
        """
        Execute the queued commands in order.

        A faulting command is logged and recorded; the remaining commands still
        run. If ``cancellation`` fires between commands, or a command raises
        something that is not an ``Exception`` (KeyboardInterrupt,
        SystemExit), the commands not yet started go back to the front of the
        queue and the interruption propagates.

        Returns:
            One receipt per executed command
        """
        with self._lock:
            batch = list(self._queue)
            self._queue.clear()

        receipts: List[CommandReceipt] = []
        started = 0
        try:
            for command in batch:
                cancelled = cancellation_outcome(cancellation)
                if cancelled is not None:
                    self._logger.info(
                        "Command drain cancelled",
                        executed=started,
                        requeued=len(batch) - started,
                        reason=cancelled.reason,
                    )
                    break

                started += 1
                step = execute_step(command.unit, command.context)
                if step.outcome.is_fault:
                    fault_context = FaultContext(
                        "drain",
                        step.outcome.fault,
                        command_id=command.command_id,
                    )
                    self._logger.error("Command faulted", **fault_context.to_dict())
                receipts.append(
                    CommandReceipt(
                        command_id=command.command_id,
                        handler=command.unit.name,
                        matched=step.matched,
                        context=step.context,
                        outcome=step.outcome,
                    )
                )
        finally:
            # Commands that never started go back to the front, whatever stopped the drain
            if started < len(batch):
                self._requeue(batch[started:])
        return receipts

    def _requeue(self, commands: List[Command]) -> None:
        with self._lock:
            self._queue.extendleft(reversed(commands))

    def pending(self) -> List[str]:
        """Handler names of the queued commands, in execution order."""
        with self._lock:
            return [command.unit.name for command in self._queue]

    def clear(self) -> int:
        """Drop every queued command and return how many were dropped."""
        with self._lock:
            dropped = len(self._queue)
            self._queue.clear()
        return dropped

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)
