"""
Tests for the change bus.

These tests verify the pub/sub mechanism a presentation layer uses to
re-render store slices.
"""

import pytest

from storefront.change_bus import ChangeBus, StateChange


class TestStateChange:
    """Tests for StateChange."""

    def test_create_change(self):
        change = StateChange(slice="cart", value=[], operation="clear_cart")

        assert change.slice == "cart"
        assert change.operation == "clear_cart"
        assert change.change_id is not None
        assert change.timestamp is not None

    def test_change_ids_are_unique(self):
        a = StateChange(slice="cart", value=[], operation="x")
        b = StateChange(slice="cart", value=[], operation="x")

        assert a.change_id != b.change_id

    def test_str(self):
        text = str(StateChange(slice="wishlist", value=[], operation="toggle_wishlist"))

        assert "wishlist" in text
        assert "toggle_wishlist" in text


class TestChangeBus:
    """Tests for ChangeBus pub/sub."""

    @pytest.fixture
    def bus(self) -> ChangeBus:
        return ChangeBus()

    def test_subscribe_and_publish(self, bus: ChangeBus):
        received = []
        bus.subscribe("cart", received.append)

        delivered = bus.publish(StateChange(slice="cart", value=[1], operation="add_to_cart"))

        assert delivered == 1
        assert received[0].value == [1]

    def test_other_slices_not_delivered(self, bus: ChangeBus):
        received = []
        bus.subscribe("cart", received.append)

        assert bus.publish(StateChange(slice="wishlist", value=[], operation="x")) == 0
        assert received == []

    def test_subscribe_all(self, bus: ChangeBus):
        received = []
        bus.subscribe_all(received.append)

        bus.publish(StateChange(slice="cart", value=[], operation="x"))
        bus.publish(StateChange(slice="locale", value="hi", operation="y"))

        assert [c.slice for c in received] == ["cart", "locale"]

    def test_handler_error_does_not_stop_others(self, bus: ChangeBus):
        received = []

        def broken(change):
            raise RuntimeError("render failed")

        bus.subscribe("cart", broken)
        bus.subscribe("cart", received.append)

        assert bus.publish(StateChange(slice="cart", value=[], operation="x")) == 2
        assert len(received) == 1

    def test_unsubscribe(self, bus: ChangeBus):
        received = []
        bus.subscribe("cart", received.append)

        assert bus.unsubscribe("cart", received.append)
        assert not bus.unsubscribe("cart", received.append)
        assert bus.get_subscriber_count("cart") == 0

    def test_change_log(self, bus: ChangeBus):
        bus.publish(StateChange(slice="cart", value=[], operation="a"))
        bus.publish(StateChange(slice="orders", value=[], operation="b"))

        assert len(bus.get_change_log()) == 2
        assert [c.operation for c in bus.get_change_log("orders")] == ["b"]

        bus.clear_change_log()
        assert bus.get_change_log() == []

    def test_log_disabled(self):
        bus = ChangeBus(keep_log=False)
        bus.publish(StateChange(slice="cart", value=[], operation="a"))

        assert bus.get_change_log() == []
