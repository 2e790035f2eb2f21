"""Position feed fed by fixes pushed from the host (phone app, location relay)."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Protocol

from pydantic import BaseModel, Field

from src.core.errors import PermissionDeniedError
from src.core.geo import distance_meters
from src.domain.coordinate import Coordinate


logger = logging.getLogger(__name__)


PositionCallback = Callable[[Coordinate], Awaitable[None]]


class PermissionStatus(StrEnum):
    """Outcome of a foreground location permission request."""

    GRANTED = "granted"
    DENIED = "denied"


class WatchOptions(BaseModel):
    """Filter applied by the feed to a continuous watch."""

    min_interval_ms: int = Field(default=1000, ge=0, description="Minimum time between delivered fixes")
    min_distance_m: float = Field(default=0.5, ge=0, description="Minimum movement between delivered fixes")


class FeedWatch(Protocol):
    """Handle for an active continuous watch."""

    def remove(self) -> None:
        """Stop delivering fixes to this watch."""
        ...


class PositionFeed(Protocol):
    """Permission and location capability offered by the host platform."""

    async def request_foreground_permission(self) -> PermissionStatus:
        """Ask for foreground location access."""
        ...

    async def watch_position(self, options: WatchOptions, callback: PositionCallback) -> FeedWatch:
        """Deliver filtered fixes to callback until the returned watch is removed."""
        ...

    async def get_current_position(self) -> Coordinate:
        """Wait for a single fresh fix."""
        ...


class _Watch:
    def __init__(self, feed: "PushPositionFeed", options: WatchOptions, callback: PositionCallback) -> None:
        self._feed = feed
        self.options = options
        self.callback = callback
        self.last_position: Coordinate | None = None
        self.last_time: float | None = None

    def accepts(self, position: Coordinate, now: float) -> bool:
        if self.last_position is None or self.last_time is None:
            return True
        elapsed_ms = (now - self.last_time) * 1000
        if elapsed_ms < self.options.min_interval_ms:
            return False
        return distance_meters(self.last_position, position) >= self.options.min_distance_m

    def remove(self) -> None:
        self._feed._remove_watch(self)


class PushPositionFeed:
    """PositionFeed whose fixes arrive through push().

    Each watch suppresses fixes that come sooner than its minimum interval or
    move less than its minimum distance since the last delivered fix. One-shot
    requests are satisfied by the next pushed fix regardless of filters.
    """

    def __init__(self, *, permission_granted: bool = True, clock: Callable[[], float] = time.monotonic) -> None:
        self._permission_granted = permission_granted
        self._clock = clock
        self._watches: list[_Watch] = []
        self._waiters: list[asyncio.Future[Coordinate]] = []

    async def request_foreground_permission(self) -> PermissionStatus:
        """Report the permission the host configured for this feed."""
        return PermissionStatus.GRANTED if self._permission_granted else PermissionStatus.DENIED

    async def watch_position(self, options: WatchOptions, callback: PositionCallback) -> _Watch:
        """Register a continuous watch."""
        watch = _Watch(self, options, callback)
        self._watches.append(watch)
        logger.debug(
            "Position watch registered",
            extra={"min_interval_ms": options.min_interval_ms, "min_distance_m": options.min_distance_m},
        )
        return watch

    def _remove_watch(self, watch: _Watch) -> None:
        if watch in self._watches:
            self._watches.remove(watch)
            logger.debug("Position watch removed")

    @property
    def active_watches(self) -> int:
        """Number of registered watches."""
        return len(self._watches)

    async def get_current_position(self) -> Coordinate:
        """Wait for the next pushed fix."""
        if not self._permission_granted:
            msg = "Location permission denied"
            raise PermissionDeniedError(msg)

        waiter: asyncio.Future[Coordinate] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            return await waiter
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)

    async def push(self, position: Coordinate) -> bool:
        """Offer a fix from the host.

        Returns:
            True if at least one watch accepted the fix
        """
        if not self._permission_granted:
            logger.debug("Dropping fix: location permission denied")
            return False

        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(position)

        now = self._clock()
        accepted = False
        for watch in list(self._watches):
            if not watch.accepts(position, now):
                continue
            watch.last_position = position
            watch.last_time = now
            accepted = True
            await watch.callback(position)

        if not accepted:
            logger.debug("Fix suppressed by watch filters")
        return accepted
