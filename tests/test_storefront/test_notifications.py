"""
Tests for the self-expiring notification queue.
"""

import asyncio
import logging

from storefront.notifications import NotificationQueue


class TestNotificationQueue:
    """Tests for NotificationQueue."""

    def test_add_and_read(self):
        queue = NotificationQueue()

        notification = queue.add("success", "Aura Desk Lamp 101 added to cart!")

        assert queue.items == [notification]
        assert queue.messages() == ["Aura Desk Lamp 101 added to cart!"]
        assert notification.type == "success"

    def test_dismiss(self):
        queue = NotificationQueue()
        a = queue.add("info", "a")
        queue.add("info", "b")

        assert queue.dismiss(a.id)
        assert not queue.dismiss(a.id)
        assert queue.messages() == ["b"]

    def test_history_outlives_dismissal(self):
        queue = NotificationQueue()
        queue.add("info", "a")
        queue.clear()

        assert queue.items == []
        assert [n.message for n in queue.history] == ["a"]

    def test_on_change_callback(self):
        seen = []
        queue = NotificationQueue(on_change=lambda live: seen.append(len(live)))

        n = queue.add("info", "a")
        queue.dismiss(n.id)

        assert seen == [1, 0]

    def test_error_logged_as_warning(self, caplog):
        queue = NotificationQueue()

        with caplog.at_level(logging.INFO, logger="notifications"):
            queue.add("error", "Invalid coupon code.")
            queue.add("success", "Coupon NOVA10 applied!")

        levels = [r.levelname for r in caplog.records if r.name == "notifications"]
        assert levels == ["WARNING", "INFO"]

    def test_lazy_expiry_without_loop(self, monkeypatch):
        """Test that expired entries disappear on read when no loop runs."""
        clock = [1000.0]
        monkeypatch.setattr("storefront.notifications.time.monotonic", lambda: clock[0])
        queue = NotificationQueue(ttl=5.0)
        queue.add("info", "first")

        clock[0] += 3
        queue.add("info", "second")
        assert queue.messages() == ["first", "second"]

        clock[0] += 2.5
        assert queue.messages() == ["second"]

    async def test_scheduled_expiry_on_loop(self):
        """Test that each notification removes itself after the ttl."""
        queue = NotificationQueue(ttl=0.05)
        queue.add("info", "short lived")

        assert len(queue.items) == 1
        await asyncio.sleep(0.15)

        assert queue.items == []

    async def test_expiry_is_independent(self):
        queue = NotificationQueue(ttl=0.3)
        queue.add("info", "early")
        await asyncio.sleep(0.2)
        queue.add("info", "late")
        await asyncio.sleep(0.2)

        assert queue.messages() == ["late"]
