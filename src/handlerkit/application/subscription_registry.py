"""Subscription Registry - fan-out notification of subscribed handler units.

Subscribers are kept per event type in subscription order and are unique by
name. Every notify takes a snapshot of the subscribers under the lock and then
delivers outside it, so subscribers added or removed during a fan-out only
affect later notifications.
"""

import threading
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from handlerkit.domain.base.exceptions import ValidationError
from handlerkit.domain.events import Event
from handlerkit.domain.handler import HandlerUnit, Outcome, execute_step
from handlerkit.infrastructure.error import FaultContext
from handlerkit.infrastructure.logging import get_logger


class SubscriptionRegistry:
    """Thread-safe event type to subscriber mapping."""

    def __init__(self):
        self._subscribers: Dict[str, List[HandlerUnit]] = {}
        self._lock = threading.RLock()
        self._logger = get_logger(__name__)

    def subscribe(self, event_type: str, unit: HandlerUnit) -> bool:
        """
        Subscribe ``unit`` to ``event_type``.

        Subscribing a name that is already subscribed for the event type is a
        no-op.

        Returns:
            True if a new subscription was added

        Raises:
            ValidationError: If ``event_type`` is empty
        """
        if not isinstance(event_type, str) or not event_type.strip():
            raise ValidationError("Event type must be a non-empty string")
        with self._lock:
            subscribers = self._subscribers.setdefault(event_type, [])
            if any(existing.name == unit.name for existing in subscribers):
                return False
            subscribers.append(unit)
        self._logger.debug("Subscribed handler", event_type=event_type, handler=unit.name)
        return True

    def unsubscribe(self, event_type: str, unit_name: str) -> bool:
        """
        Remove the subscription of ``unit_name`` for ``event_type``.

        Unsubscribing a name that is not subscribed is a no-op.

        Returns:
            True if a subscription was removed
        """
        with self._lock:
            subscribers = self._subscribers.get(event_type)
            if not subscribers:
                return False
            remaining = [unit for unit in subscribers if unit.name != unit_name]
            if len(remaining) == len(subscribers):
                return False
            if remaining:
                self._subscribers[event_type] = remaining
            else:
                del self._subscribers[event_type]
        self._logger.debug("Unsubscribed handler", event_type=event_type, handler=unit_name)
        return True

    def _snapshot(self, event_type: str) -> Tuple[HandlerUnit, ...]:
        with self._lock:
            return tuple(self._subscribers.get(event_type, ()))

    def subscribers(self, event_type: str) -> List[str]:
        """Names of the current subscribers, in notification order."""
        return [unit.name for unit in self._snapshot(event_type)]

    def event_types(self) -> List[str]:
        with self._lock:
            return list(self._subscribers.keys())

    def notify(self, event_type: str, payload: Optional[Mapping[str, Any]] = None) -> List[Outcome]:
        """
        Deliver ``payload`` to every subscriber of ``event_type``.

        Each subscriber gets its own context seeded from a deep copy of the
        payload. A fault in one subscriber is logged and recorded and delivery
        continues. There is no retry.

        Returns:
            One outcome per subscriber in the snapshot, in subscription order

        Raises:
            ValidationError: If ``event_type`` is empty
        """
        try:
            event = Event(event_type=event_type, payload=payload or {})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid event: {e}") from e
        return self.notify_event(event)

    def notify_event(self, event: Event) -> List[Outcome]:
        """Deliver a prebuilt event; see notify()."""
        subscribers = self._snapshot(event.event_type)
        if not subscribers:
            self._logger.debug("No subscribers", event_type=event.event_type)
            return []

        outcomes: List[Outcome] = []
        for unit in subscribers:
            step = execute_step(unit, event.to_context())
            if step.outcome.is_fault:
                fault_context = FaultContext(
                    "notify",
                    step.outcome.fault,
                    event_type=event.event_type,
                    event_id=event.event_id,
                )
                self._logger.error("Subscriber faulted", **fault_context.to_dict())
            outcomes.append(step.outcome)
        return outcomes

    def clear(self) -> None:
        """Remove every subscription."""
        with self._lock:
            self._subscribers.clear()

    def count(self, event_type: Optional[str] = None) -> int:
        with self._lock:
            if event_type is not None:
                return len(self._subscribers.get(event_type, ()))
            return sum(len(units) for units in self._subscribers.values())
