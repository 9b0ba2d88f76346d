"""
Self-expiring queue of user-facing notifications.

Any store operation can append a toast-style message; each one disappears on
its own after a fixed delay, independently of the others and of any later
state change.

Design decisions:
- Expiry is scheduled on the running asyncio loop when there is one
- Without a running loop, expired entries are pruned lazily on read
- Every message is logged and kept in a history list for demos and tests
- An optional callback fires whenever the live list changes
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from storefront.models import Notification, NotificationLevel

logger = logging.getLogger("notifications")

DEFAULT_TTL = 5.0


class NotificationQueue:
    """
    Ephemeral notification list.

    Example:
        queue = NotificationQueue(ttl=5.0)
        queue.add("success", "Wireless Router added to cart!")
        queue.items  # live notifications, oldest first
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        on_change: Optional[Callable[[list[Notification]], None]] = None,
    ):
        """
        Args:
            ttl: Seconds each notification stays visible
            on_change: Called with the live list after every add or removal
        """
        self.ttl = ttl
        self.on_change = on_change
        self.history: list[Notification] = []
        self._live: list[Notification] = []
        self._expires_at: dict[str, float] = {}
        self._handles: dict[str, asyncio.TimerHandle] = {}

    def add(self, level: str, message: str) -> Notification:
        """Append a notification and schedule its removal."""
        notification = Notification(type=NotificationLevel(level), message=message)
        self._prune()
        self._live.append(notification)
        self.history.append(notification)
        self._expires_at[notification.id] = time.monotonic() + self.ttl

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._handles[notification.id] = loop.call_later(self.ttl, self.dismiss, notification.id)

        if notification.type == NotificationLevel.ERROR:
            logger.warning(f"[{notification.type.upper()}] {message}")
        else:
            logger.info(f"[{notification.type.upper()}] {message}")

        self._changed()
        return notification

    def dismiss(self, notification_id: str) -> bool:
        """Remove a notification now. Returns False if it was already gone."""
        handle = self._handles.pop(notification_id, None)
        if handle is not None:
            handle.cancel()
        self._expires_at.pop(notification_id, None)
        before = len(self._live)
        self._live = [n for n in self._live if n.id != notification_id]
        if len(self._live) == before:
            return False
        self._changed()
        return True

    def clear(self) -> None:
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()
        self._expires_at.clear()
        self._live.clear()
        self._changed()

    @property
    def items(self) -> list[Notification]:
        """Live notifications, oldest first."""
        self._prune()
        return list(self._live)

    def messages(self) -> list[str]:
        return [n.message for n in self.items]

    def _prune(self) -> None:
        now = time.monotonic()
        expired = [nid for nid, at in self._expires_at.items() if at <= now]
        for nid in expired:
            self.dismiss(nid)

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(list(self._live))
