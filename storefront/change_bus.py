"""
In-memory change bus for store slices.

The store publishes a StateChange every time one of its slices is mutated;
a presentation layer (or a test) subscribes to the slices it renders. This is
the observer mechanism that replaces an ambient UI context provider.

Design decisions:
- Synchronous delivery on the caller's thread/loop
- Slice-based subscriptions, plus "*" for every slice
- Handlers are called in registration order
- A handler that raises is logged and does not stop the others
- Optional change log for debugging and tests
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from uuid import uuid4

logger = logging.getLogger("change_bus")

ALL_SLICES = "*"


@dataclass
class StateChange:
    """
    Record of a slice mutation.

    Attributes:
        slice: Name of the slice that changed (e.g. "cart")
        value: The slice's new value
        operation: Store operation that caused the change
        change_id: Unique identifier for this change
        timestamp: When the change happened
    """
    slice: str
    value: Any
    operation: str
    change_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return f"StateChange({self.slice}, op={self.operation}, id={self.change_id[:8]})"


ChangeHandler = Callable[[StateChange], None]


class ChangeBus:
    """
    Pub/sub for store slice changes.

    Example usage:
        bus = ChangeBus()
        bus.subscribe("cart", lambda change: render_cart(change.value))
        bus.publish(StateChange(slice="cart", value=[], operation="clear_cart"))
    """

    def __init__(self, keep_log: bool = True):
        self._subscribers: dict[str, list[ChangeHandler]] = defaultdict(list)
        self._change_log: list[StateChange] = []
        self._keep_log = keep_log

    def subscribe(self, slice_name: str, handler: ChangeHandler) -> None:
        self._subscribers[slice_name].append(handler)
        logger.debug(f"Subscribed handler to '{slice_name}' changes")

    def subscribe_all(self, handler: ChangeHandler) -> None:
        self._subscribers[ALL_SLICES].append(handler)
        logger.debug("Subscribed handler to ALL changes")

    def unsubscribe(self, slice_name: str, handler: ChangeHandler) -> bool:
        """Returns True if the handler was found and removed."""
        try:
            self._subscribers[slice_name].remove(handler)
            return True
        except ValueError:
            return False

    def publish(self, change: StateChange) -> int:
        """
        Deliver a change to every interested handler.

        Returns:
            Number of handlers that received the change
        """
        if self._keep_log:
            self._change_log.append(change)

        logger.debug(f"Publishing: {change}")

        handlers = self._subscribers.get(change.slice, []) + self._subscribers.get(ALL_SLICES, [])
        for handler in handlers:
            try:
                handler(change)
            except Exception as e:
                logger.error(f"Handler raised exception for {change}: {e}")
        return len(handlers)

    def get_subscriber_count(self, slice_name: str) -> int:
        return len(self._subscribers.get(slice_name, []))

    def get_change_log(self, slice_name: Optional[str] = None) -> list[StateChange]:
        """Copy of the change log, optionally filtered to one slice."""
        if slice_name is None:
            return self._change_log.copy()
        return [c for c in self._change_log if c.slice == slice_name]

    def clear_change_log(self) -> None:
        self._change_log.clear()

    def clear_subscribers(self) -> None:
        self._subscribers.clear()
