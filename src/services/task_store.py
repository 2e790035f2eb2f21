"""Task store: owns the task collection and applies geofence transitions."""

import asyncio
import logging
import time
from collections.abc import Iterable
from typing import Any

from pydantic import TypeAdapter, ValidationError

from src.core.config import Constants
from src.core.errors import InvalidArgumentError, PersistenceError, TaskNotFoundError
from src.core.logging import span
from src.core.storage import KeyValueStore
from src.domain.coordinate import Coordinate
from src.domain.geofence import GeofenceTransition, TransitionKind
from src.domain.task import Task


logger = logging.getLogger(__name__)

_tasks_adapter = TypeAdapter(list[Task])


class TaskStore:
    """In-memory task collection with write-through persistence.

    Every mutation runs under one asyncio lock and saves the full task list
    before returning. Tasks are immutable; mutations swap in updated copies,
    so snapshots handed out by list() never change underneath the caller.

    The ``notified`` latch belongs to the geofence evaluator and only changes
    through apply_transitions(), except that clearing a location also clears it.
    """

    def __init__(self, storage: KeyValueStore, *, storage_key: str = Constants.TASKS_STORAGE_KEY) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._tasks: dict[str, Task] = {}
        self._lock = asyncio.Lock()
        self._last_id = 0

    async def load(self) -> None:
        """Hydrate from storage. Failures are logged and leave the store empty."""
        with span("task_store.load"):
            try:
                payload = await self._storage.load(self._storage_key)
            except PersistenceError:
                logger.exception("Failed to load tasks")
                return

            if payload is None:
                return

            try:
                tasks = _tasks_adapter.validate_json(payload)
            except ValidationError:
                logger.exception("Stored tasks are malformed; starting empty")
                return

            async with self._lock:
                self._tasks = {task.id: task for task in tasks}
                for task in tasks:
                    if task.id.isdigit():
                        self._last_id = max(self._last_id, int(task.id))
            logger.info("Loaded %d tasks", len(tasks))

    async def _persist(self) -> None:
        payload = _tasks_adapter.dump_json(list(self._tasks.values())).decode()
        try:
            await self._storage.save(self._storage_key, payload)
        except PersistenceError:
            # In-memory state stays authoritative; the next save writes the full list.
            logger.exception("Failed to save tasks")

    def _next_id(self) -> str:
        # Creation time in ns, bumped so ids stay unique within the process
        self._last_id = max(time.time_ns(), self._last_id + 1)
        return str(self._last_id)

    def _require(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            msg = f"Task not found: {task_id}"
            raise TaskNotFoundError(msg)
        return task

    async def _update(self, task_id: str, **changes: Any) -> Task:
        async with self._lock:
            task = self._require(task_id)
            updated = task.model_copy(update=changes)
            self._tasks[task_id] = updated
            await self._persist()
        return updated

    async def create(self, name: str) -> Task:
        """Create a task with defaults; blank names are rejected."""
        clean_name = name.strip()
        if not clean_name:
            msg = "Task name must not be empty"
            raise InvalidArgumentError(msg)

        with span("task_store.create"):
            async with self._lock:
                task = Task(id=self._next_id(), name=clean_name)
                self._tasks[task.id] = task
                await self._persist()

        logger.info("Created task %s %r", task.id, task.name)
        return task

    async def set_location(self, task_id: str, location: Coordinate | None, address: str | None = None) -> Task:
        """Pin a task to a coordinate, optionally with its resolved address.

        Passing None removes the geofence and clears the address and latch.
        """
        if location is None:
            task = await self._update(task_id, location=None, address=None, notified=False)
            logger.info("Cleared location of task %s", task_id)
            return task

        changes: dict[str, Any] = {"location": location}
        if address is not None:
            changes["address"] = address
        task = await self._update(task_id, **changes)
        logger.info("Set location of task %s to (%s, %s)", task_id, location.latitude, location.longitude)
        return task

    async def set_address(
        self,
        task_id: str,
        address: str | None,
        *,
        expected_location: Coordinate | None = None,
    ) -> Task | None:
        """Store a resolved address.

        When expected_location is given the address is only applied if the task
        still sits at that coordinate; returns None when skipped or the task is gone.
        """
        async with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return None
            if expected_location is not None and task.location != expected_location:
                logger.debug("Skipping stale address for task %s", task_id)
                return None
            updated = task.model_copy(update={"address": address})
            self._tasks[task_id] = updated
            await self._persist()
        return updated

    async def set_description(self, task_id: str, text: str | None) -> Task:
        """Replace a task's description."""
        return await self._update(task_id, description=text)

    async def toggle_completed(self, task_id: str) -> Task:
        """Flip the completed flag. The notified latch is left untouched."""
        async with self._lock:
            task = self._require(task_id)
            updated = task.model_copy(update={"completed": not task.completed})
            self._tasks[task_id] = updated
            await self._persist()

        logger.info("Task %s completed=%s", task_id, updated.completed)
        return updated

    async def delete(self, task_id: str) -> Task:
        """Remove a task permanently."""
        async with self._lock:
            task = self._require(task_id)
            del self._tasks[task_id]
            await self._persist()

        logger.info("Deleted task %s", task_id)
        return task

    async def delete_completed(self) -> list[Task]:
        """Remove every completed task and return the removed ones."""
        async with self._lock:
            removed = [task for task in self._tasks.values() if task.completed]
            if not removed:
                return []
            for task in removed:
                del self._tasks[task.id]
            await self._persist()

        logger.info("Cleared %d completed tasks", len(removed))
        return removed

    async def apply_transitions(self, transitions: Iterable[GeofenceTransition]) -> list[GeofenceTransition]:
        """Apply evaluator output with compare-and-set semantics.

        A transition only lands if the task still exists, is open, still sits
        at the location the distance was measured against, and its latch
        still holds the value the evaluator saw.
        Returns the transitions that were applied.
        """
        applied: list[GeofenceTransition] = []
        async with self._lock:
            for transition in transitions:
                task = self._tasks.get(transition.task_id)
                if task is None or task.completed or task.location != transition.location:
                    continue
                expected_before = transition.kind == TransitionKind.LEFT
                if task.notified != expected_before:
                    continue
                self._tasks[task.id] = task.model_copy(update={"notified": transition.notified})
                applied.append(transition)

            if applied:
                await self._persist()
        return applied

    def get(self, task_id: str) -> Task | None:
        """Return a task by id, or None."""
        return self._tasks.get(task_id)

    def list(self) -> list[Task]:
        """Snapshot of all tasks in insertion order."""
        return list(self._tasks.values())
