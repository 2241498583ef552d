"""Handler Registry - name to handler unit bindings.

Re-registering a name replaces the binding atomically. Chains and state
machines built earlier keep the units they captured at build time.
"""

import threading
from typing import Dict, Iterable, List

from handlerkit.domain.base.exceptions import HandlerNotFoundError
from handlerkit.domain.handler import Action, HandlerUnit, Predicate
from handlerkit.infrastructure.logging import get_logger


class HandlerRegistry:
    """Thread-safe registry of handler units keyed by name."""

    def __init__(self):
        self._units: Dict[str, HandlerUnit] = {}
        self._lock = threading.RLock()
        self._logger = get_logger(__name__)

    def register(self, unit: HandlerUnit) -> HandlerUnit:
        """
        Bind ``unit`` under its name, superseding any previous binding.

        Args:
            unit: Handler unit to register

        Returns:
            The registered unit
        """
        with self._lock:
            superseded = unit.name in self._units
            self._units[unit.name] = unit
        if superseded:
            self._logger.info("Superseded handler", handler=unit.name)
        else:
            self._logger.debug("Registered handler", handler=unit.name)
        return unit

    def register_handler(self, name: str, predicate: Predicate, action: Action) -> HandlerUnit:
        """Create and register a handler unit."""
        return self.register(HandlerUnit(name, predicate, action))

    def unregister(self, name: str) -> bool:
        """
        Remove a binding.

        Returns:
            True if the handler was removed, False if it was not registered
        """
        with self._lock:
            removed = self._units.pop(name, None) is not None
        if removed:
            self._logger.debug("Unregistered handler", handler=name)
        return removed

    def get(self, name: str) -> HandlerUnit:
        """
        Look up a handler unit.

        Raises:
            HandlerNotFoundError: If nothing is registered under ``name``
        """
        with self._lock:
            unit = self._units.get(name)
        if unit is None:
            raise HandlerNotFoundError(name)
        return unit

    def resolve(self, names: Iterable[str]) -> List[HandlerUnit]:
        """Look up several handler units, preserving order."""
        with self._lock:
            snapshot = dict(self._units)
        units = []
        for name in names:
            if name not in snapshot:
                raise HandlerNotFoundError(name)
            units.append(snapshot[name])
        return units

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return name in self._units

    def names(self) -> List[str]:
        with self._lock:
            return list(self._units.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._units)
