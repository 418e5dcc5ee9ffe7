from src.staff_checkin.staff_checkin.geo.model import Coordinates
from src.staff_checkin.staff_checkin.verification.location import LocationFeed, LocationFeedRegistry


def test_subscriptions_are_released_on_close():
    feed = LocationFeed()
    seen = []

    with feed.watch(seen.append):
        assert feed.active_count == 1
        feed.publish(Coordinates(latitude=1.0, longitude=2.0))

    assert feed.active_count == 0
    assert feed.publish(Coordinates(latitude=3.0, longitude=4.0)) == 0
    assert seen == [Coordinates(latitude=1.0, longitude=2.0)]


def test_close_is_idempotent():
    feed = LocationFeed()
    sub = feed.watch(lambda c: None)

    sub.close()
    sub.close()

    assert not sub.active
    assert feed.active_count == 0


def test_new_watch_starts_without_a_sample():
    feed = LocationFeed()
    feed.publish(Coordinates(latitude=6.5, longitude=3.3))
    seen = []

    feed.watch(seen.append).close()

    assert seen == []


def test_errors_reach_error_callbacks_only():
    feed = LocationFeed()
    errors = []
    feed.watch(lambda c: None, errors.append)
    feed.watch(lambda c: None)

    assert feed.publish_error("timeout") == 2
    assert errors == ["timeout"]


def test_registry_counts_across_users():
    registry = LocationFeedRegistry()
    a = registry.for_user(1).watch(lambda c: None)
    b = registry.for_user(2).watch(lambda c: None)

    assert registry.for_user(1) is registry.for_user(1)
    assert registry.active_count == 2

    a.close()
    b.close()
    assert registry.active_count == 0
