"""Tests for subscription handles and snapshot views."""

from unittest.mock import MagicMock

from booking_calendar.realtime.subscription import SnapshotView, Subscription


class TestSubscription:
    def test_unsubscribe_cancels_once(self):
        cancel = MagicMock()
        subscription = Subscription("calendar", cancel)

        subscription.unsubscribe()
        subscription.unsubscribe()

        cancel.assert_called_once()
        assert not subscription.active

    def test_calling_handle_unsubscribes(self):
        cancel = MagicMock()
        subscription = Subscription("bookings", cancel)
        subscription()
        cancel.assert_called_once()

    def test_context_manager(self):
        cancel = MagicMock()
        with Subscription("bookings", cancel) as subscription:
            assert subscription.active
        cancel.assert_called_once()

    def test_repr_shows_state(self):
        subscription = Subscription("calendar", lambda: None)
        assert "active" in repr(subscription)
        subscription.unsubscribe()
        assert "closed" in repr(subscription)


class TestSnapshotView:
    def test_holds_latest_snapshot(self):
        view = SnapshotView("calendar")
        view([1, 2])
        view([3])
        assert view.items == [3]
        assert view.update_count == 2

    def test_items_are_a_copy(self):
        view = SnapshotView("calendar")
        view([1])
        view.items.append(2)
        assert view.items == [1]

    def test_listeners_notified_until_removed(self):
        view = SnapshotView("bookings")
        seen = []
        remove = view.on_update(seen.append)

        view(["a"])
        remove()
        view(["b"])

        assert seen == [["a"]]

    def test_view_as_store_callback(self, store):
        view = SnapshotView("calendar")
        subscription = store.watch("calendar", view)
        store.set("calendar", "2024-06-01", {"date": "2024-06-01"})
        subscription.unsubscribe()

        assert [doc.id for doc in view.items] == ["2024-06-01"]
        assert view.update_count == 2
