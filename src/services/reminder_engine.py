"""Reminder engine: wires location updates through geofence evaluation into notifications."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from src.core.config import Constants, settings
from src.core.errors import TaskNotFoundError
from src.core.logging import log_with_task_context, span
from src.core.storage import KeyValueStore
from src.domain.coordinate import Coordinate
from src.domain.favorite import FavoriteLocation
from src.domain.geofence import TransitionKind
from src.domain.task import Task
from src.interface.position_feed import PositionFeed
from src.models.service_models import PositionUpdateResult
from src.services.address_resolver import AddressResolver
from src.services.favorites_registry import FavoritesRegistry
from src.services.geofence_evaluator import evaluate_geofences
from src.services.location_tracker import LocationTracker, Subscription
from src.services.notification_service import NotificationDispatcher
from src.services.task_store import TaskStore


logger = logging.getLogger(__name__)


class ReminderEngine:
    """Composes tracker, evaluator, stores, resolver and dispatcher.

    Geofences are evaluated only in response to tracker updates. When location
    permission is denied the engine keeps working as a plain to-do list and
    never notifies.
    """

    def __init__(
        self,
        *,
        tasks: TaskStore,
        favorites: FavoritesRegistry,
        tracker: LocationTracker,
        dispatcher: NotificationDispatcher,
        resolver: AddressResolver,
        radius_m: float | None = None,
    ) -> None:
        self.tasks = tasks
        self.favorites = favorites
        self.tracker = tracker
        self.dispatcher = dispatcher
        self.resolver = resolver
        self.radius_m = settings.arrival_radius_m if radius_m is None else radius_m
        self._subscription: Subscription | None = None
        self._background: set[asyncio.Task[Any]] = set()

    @property
    def geofencing_available(self) -> bool:
        """True while position updates drive geofence evaluation."""
        return self._subscription is not None and self._subscription.active

    # ---- lifecycle ----

    async def start(self) -> None:
        """Hydrate both stores and subscribe to position updates."""
        with span("reminder_engine.start"):
            await self.tasks.load()
            await self.favorites.load()

            if not await self.tracker.start():
                logger.warning("Geofencing disabled: location permission denied")
                return

            self._subscription = self.tracker.subscribe(self.handle_position)
            logger.info("Reminder engine started", extra={"radius_m": self.radius_m})

    async def stop(self) -> None:
        """Unsubscribe, stop the feed watch and cancel pending background work."""
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        await self.tracker.stop()

        pending = list(self._background)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.info("Reminder engine stopped")

    def _spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._background_done)
        return task

    def _background_done(self, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background task %s failed: %s", task.get_name(), exc)

    async def wait_idle(self) -> None:
        """Wait for queued notifications and background address lookups to finish."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ---- position updates ----

    async def handle_position(self, position: Coordinate) -> PositionUpdateResult:
        """Evaluate every geofence against a new position and queue an alert per entry."""
        with span("reminder_engine.handle_position"):
            transitions = evaluate_geofences(position, self.tasks.list(), radius_m=self.radius_m)
            applied = await self.tasks.apply_transitions(transitions) if transitions else []

            notified: list[str] = []
            for transition in applied:
                task = self.tasks.get(transition.task_id)
                if task is None:
                    continue
                log_with_task_context(
                    logger,
                    "info",
                    "Geofence transition",
                    task,
                    kind=str(transition.kind),
                    distance_m=round(transition.distance_m, 1),
                )
                if transition.kind == TransitionKind.ENTERED:
                    # Fire-and-forget; stop() cancels alerts still in flight
                    self._spawn(self.dispatcher.notify(task), name=f"notify-{task.id}")
                    notified.append(task.id)

            return PositionUpdateResult(applied=applied, notified=notified)

    # ---- task commands ----

    async def add_task(self, name: str) -> Task:
        """Create a new task."""
        return await self.tasks.create(name)

    async def set_description(self, task_id: str, text: str | None) -> Task:
        """Replace a task's description."""
        return await self.tasks.set_description(task_id, text)

    async def toggle_completed(self, task_id: str) -> Task:
        """Complete or reopen a task. Reopening never notifies until the next update."""
        return await self.tasks.toggle_completed(task_id)

    async def delete_task(self, task_id: str) -> Task:
        """Delete a task; it drops out of all later evaluations."""
        return await self.tasks.delete(task_id)

    async def clear_completed(self) -> list[Task]:
        """Delete every completed task."""
        return await self.tasks.delete_completed()

    async def assign_location(
        self,
        task_id: str,
        location: Coordinate,
        address: str | None = None,
        *,
        wait_for_address: bool = False,
    ) -> Task:
        """Pin a task to a coordinate.

        Without an explicit address the place is resolved once, in the
        background unless wait_for_address is set. A late result is dropped if
        the task has been moved elsewhere in the meantime.
        """
        task = await self.tasks.set_location(task_id, location, address)
        if address is not None:
            return task

        if not wait_for_address:
            self._spawn(self._resolve_address(task_id, location), name=f"resolve-address-{task_id}")
            return task

        updated = await self._resolve_address(task_id, location)
        return updated or task

    async def _resolve_address(self, task_id: str, location: Coordinate) -> Task | None:
        address = await self.resolver.resolve(location)
        if address is None:
            return None
        return await self.tasks.set_address(task_id, address, expected_location=location)

    async def assign_current_location(self, task_id: str, *, wait_for_address: bool = False) -> Task:
        """Pin a task to a fresh one-shot fix.

        Raises:
            TaskNotFoundError: If the task does not exist
            PermissionDeniedError: If location access is not granted
        """
        if self.tasks.get(task_id) is None:
            msg = f"Task not found: {task_id}"
            raise TaskNotFoundError(msg)
        position = await self.tracker.request_one_shot()
        return await self.assign_location(task_id, position, wait_for_address=wait_for_address)

    async def assign_favorite(self, task_id: str, index: int) -> Task:
        """Copy a favorite's location and address onto a task."""
        favorite = self.favorites.get(index)
        return await self.tasks.set_location(task_id, favorite.location, favorite.address or favorite.name)

    async def clear_location(self, task_id: str) -> Task:
        """Remove a task's geofence."""
        return await self.tasks.set_location(task_id, None)

    def location_label(self, task_id: str) -> str:
        """Favorite name for the task's address, else the address, else a placeholder."""
        task = self.tasks.get(task_id)
        if task is None or not task.address:
            return Constants.NO_LOCATION_LABEL
        favorite = self.favorites.find_by_address(task.address)
        return favorite.name if favorite is not None else task.address

    def pending_tasks(self) -> list[Task]:
        """Open tasks in insertion order."""
        return [task for task in self.tasks.list() if not task.completed]

    def completed_tasks(self) -> list[Task]:
        """Completed tasks in insertion order."""
        return [task for task in self.tasks.list() if task.completed]

    def tasks_with_locations(self) -> list[Task]:
        """Tasks that carry a geofence, for map views."""
        return [task for task in self.tasks.list() if task.location is not None]

    # ---- favorites ----

    async def add_favorite(self, name: str, location: Coordinate, address: str | None = None) -> FavoriteLocation:
        """Save a favorite, reverse geocoding its address when none is given."""
        if address is None and name.strip():
            address = await self.resolver.lookup_address(location)
        return await self.favorites.add(name, location, address)

    async def remove_favorite(self, index: int) -> FavoriteLocation:
        """Delete a favorite by position."""
        return await self.favorites.remove(index)


def build_engine(*, storage: KeyValueStore, feed: PositionFeed) -> ReminderEngine:
    """Assemble an engine from settings around the given storage and feed."""
    tasks = TaskStore(storage)
    favorites = FavoritesRegistry(storage)
    return ReminderEngine(
        tasks=tasks,
        favorites=favorites,
        tracker=LocationTracker(feed),
        dispatcher=NotificationDispatcher(),
        resolver=AddressResolver(favorites),
    )
