"""Location tracker: latest known position plus a subscription model over a position feed."""

import logging

from src.core.config import settings
from src.core.errors import PermissionDeniedError
from src.domain.coordinate import Coordinate
from src.interface.position_feed import FeedWatch, PermissionStatus, PositionCallback, PositionFeed, WatchOptions


logger = logging.getLogger(__name__)


class Subscription:
    """Cancellation handle returned by LocationTracker.subscribe()."""

    def __init__(self, tracker: "LocationTracker", callback: PositionCallback) -> None:
        self._tracker = tracker
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        """Whether the listener still receives updates."""
        return self._active

    def cancel(self) -> None:
        """Stop receiving updates. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        self._tracker._unsubscribe(self)

    async def _deliver(self, position: Coordinate) -> None:
        await self._callback(position)


class LocationTracker:
    """Wraps a continuous position feed.

    Suppression of too-frequent or too-small updates is done by the feed using
    the configured interval and distance; every fix the feed delivers is an
    accepted update and is fanned out to all subscribers in order.
    """

    def __init__(
        self,
        feed: PositionFeed,
        *,
        min_interval_ms: int | None = None,
        min_distance_m: float | None = None,
    ) -> None:
        self._feed = feed
        self._options = WatchOptions(
            min_interval_ms=settings.location_min_interval_ms if min_interval_ms is None else min_interval_ms,
            min_distance_m=settings.location_min_distance_m if min_distance_m is None else min_distance_m,
        )
        self._current: Coordinate | None = None
        self._subscriptions: list[Subscription] = []
        self._watch: FeedWatch | None = None
        self._permission: PermissionStatus | None = None

    @property
    def permission_granted(self) -> bool:
        """True once foreground permission has been granted."""
        return self._permission == PermissionStatus.GRANTED

    @property
    def watching(self) -> bool:
        """True while the continuous feed watch is active."""
        return self._watch is not None

    async def _ensure_permission(self) -> bool:
        if self._permission is None:
            self._permission = await self._feed.request_foreground_permission()
            if self._permission != PermissionStatus.GRANTED:
                logger.warning("Permission to access location was denied")
        return self.permission_granted

    async def start(self) -> bool:
        """Request permission and start the continuous watch.

        Returns:
            False when permission is denied; subscribers then never receive updates
        """
        if self._watch is not None:
            return True
        if not await self._ensure_permission():
            return False

        self._watch = await self._feed.watch_position(self._options, self._on_fix)
        logger.info(
            "Location tracking started",
            extra={"min_interval_ms": self._options.min_interval_ms, "min_distance_m": self._options.min_distance_m},
        )
        return True

    async def stop(self) -> None:
        """Remove the feed watch and drop every subscriber."""
        if self._watch is not None:
            self._watch.remove()
            self._watch = None
            logger.info("Location tracking stopped")

        for subscription in list(self._subscriptions):
            subscription.cancel()

    def current(self) -> Coordinate | None:
        """Last known position, None before the first fix."""
        return self._current

    def subscribe(self, callback: PositionCallback) -> Subscription:
        """Register a listener for every accepted position update."""
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    async def request_one_shot(self) -> Coordinate:
        """Wait for a single fresh fix, independent of the continuous watch.

        Raises:
            PermissionDeniedError: If location access is not granted
        """
        if not await self._ensure_permission():
            msg = "Location permission denied"
            raise PermissionDeniedError(msg)

        position = await self._feed.get_current_position()
        self._current = position
        return position

    async def _on_fix(self, position: Coordinate) -> None:
        self._current = position
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            try:
                await subscription._deliver(position)
            except Exception:
                logger.exception("Position listener failed")
