from booking_calendar.realtime.subscription import SnapshotView, Subscription

__all__ = ["Subscription", "SnapshotView"]
