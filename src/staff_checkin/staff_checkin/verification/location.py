"""Continuous, best-effort location sampling.

Clients push GPS fixes (or geolocation errors) into a per-staff ``LocationFeed``;
a check-in flow holds a ``LocationSubscription`` for as long as it is active and
must close it on every exit path.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional

from ..geo.model import Coordinates

logger = logging.getLogger(__name__)

SampleCallback = Callable[[Coordinates], None]
ErrorCallback = Callable[[str], None]


class LocationSubscription:
    def __init__(self, feed: "LocationFeed", on_sample: SampleCallback, on_error: Optional[ErrorCallback]):
        self._feed = feed
        self.on_sample = on_sample
        self.on_error = on_error
        self._closed = False

    @property
    def active(self) -> bool:
        return not self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._feed._detach(self)

    def __enter__(self) -> "LocationSubscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class LocationFeed:
    """Location samples for one staff member, fanned out to live subscriptions."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: List[LocationSubscription] = []

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def watch(self, on_sample: SampleCallback, on_error: Optional[ErrorCallback] = None) -> LocationSubscription:
        subscription = LocationSubscription(self, on_sample, on_error)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def publish(self, coords: Coordinates) -> int:
        """Deliver a sample; returns how many subscriptions received it."""

        with self._lock:
            targets = list(self._subscriptions)
        for subscription in targets:
            if subscription.active:
                subscription.on_sample(coords)
        return len(targets)

    def publish_error(self, reason: str) -> int:
        """Report that geolocation is unsupported, denied or timed out."""

        with self._lock:
            targets = list(self._subscriptions)
        for subscription in targets:
            if subscription.active and subscription.on_error:
                subscription.on_error(reason)
        return len(targets)

    def _detach(self, subscription: LocationSubscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)


class LocationFeedRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._feeds: Dict[int, LocationFeed] = {}

    def for_user(self, user_id: int) -> LocationFeed:
        with self._lock:
            feed = self._feeds.get(int(user_id))
            if feed is None:
                feed = self._feeds[int(user_id)] = LocationFeed()
            return feed

    @property
    def active_count(self) -> int:
        with self._lock:
            feeds = list(self._feeds.values())
        return sum(feed.active_count for feed in feeds)
