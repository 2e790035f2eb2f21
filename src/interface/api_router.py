"""HTTP endpoints for pushing position fixes and managing tasks and favorites."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request

from src.core.errors import GeoNudgeError, TaskNotFoundError, classify_error_with_response
from src.domain.create_models import FavoriteCreate, PositionFix, TaskCreate
from src.domain.favorite import FavoriteLocation
from src.domain.task import Task
from src.domain.update_models import DescriptionUpdate, LocationUpdate
from src.interface.position_feed import PushPositionFeed
from src.services.reminder_engine import ReminderEngine


router = APIRouter(tags=["reminders"])
logger = logging.getLogger(__name__)


def _engine(request: Request) -> ReminderEngine:
    return request.app.state.engine


def _feed(request: Request) -> PushPositionFeed:
    return request.app.state.feed


def _http_error(exc: GeoNudgeError) -> HTTPException:
    error = classify_error_with_response(exc)
    logger.info("Request rejected: %s (%s)", error.code, error.message)
    return HTTPException(
        status_code=error.http_status,
        detail={"code": error.code, "message": error.message, "suggestion": error.suggestion},
    )


# ---- positions ----


@router.post("/positions")
async def push_position(fix: PositionFix, request: Request) -> dict[str, Any]:
    """Offer a position fix to the tracker.

    Accepted fixes are evaluated against every task geofence before this
    returns; arrival alerts are sent in the background. Fixes arriving too soon or too close to the previous one are
    suppressed.
    """
    try:
        position = fix.to_coordinate()
    except GeoNudgeError as e:
        raise _http_error(e) from e

    accepted = await _feed(request).push(position)
    return {"accepted": accepted, "geofencing_available": _engine(request).geofencing_available}


# ---- tasks ----


@router.get("/tasks")
async def list_tasks(request: Request, completed: bool | None = None) -> list[Task]:
    """List tasks, optionally only open or only completed ones."""
    engine = _engine(request)
    if completed is None:
        return engine.tasks.list()
    return engine.completed_tasks() if completed else engine.pending_tasks()


@router.post("/tasks", status_code=201)
async def create_task(body: TaskCreate, request: Request) -> Task:
    try:
        return await _engine(request).add_task(body.name)
    except GeoNudgeError as e:
        raise _http_error(e) from e


@router.post("/tasks/clear-completed")
async def clear_completed(request: Request) -> dict[str, Any]:
    """Delete every completed task."""
    removed = await _engine(request).clear_completed()
    return {"removed": [task.id for task in removed]}


@router.get("/tasks/{task_id}")
async def get_task(task_id: str, request: Request) -> dict[str, Any]:
    """Return a task along with its display label."""
    engine = _engine(request)
    task = engine.tasks.get(task_id)
    if task is None:
        raise _http_error(TaskNotFoundError(f"Task not found: {task_id}"))
    return {**task.model_dump(mode="json"), "location_label": engine.location_label(task_id)}


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, request: Request) -> Task:
    try:
        return await _engine(request).delete_task(task_id)
    except GeoNudgeError as e:
        raise _http_error(e) from e


@router.put("/tasks/{task_id}/description")
async def update_description(task_id: str, body: DescriptionUpdate, request: Request) -> Task:
    try:
        return await _engine(request).set_description(task_id, body.description)
    except GeoNudgeError as e:
        raise _http_error(e) from e


@router.post("/tasks/{task_id}/toggle")
async def toggle_task(task_id: str, request: Request) -> Task:
    try:
        return await _engine(request).toggle_completed(task_id)
    except GeoNudgeError as e:
        raise _http_error(e) from e


@router.put("/tasks/{task_id}/location")
async def assign_location(task_id: str, body: LocationUpdate, request: Request) -> Task:
    """Pin a task to a coordinate. Without an address one is resolved in the background."""
    try:
        return await _engine(request).assign_location(task_id, body.to_coordinate(), body.address)
    except GeoNudgeError as e:
        raise _http_error(e) from e


@router.delete("/tasks/{task_id}/location")
async def clear_location(task_id: str, request: Request) -> Task:
    try:
        return await _engine(request).clear_location(task_id)
    except GeoNudgeError as e:
        raise _http_error(e) from e


@router.post("/tasks/{task_id}/location/current")
async def assign_current_location(task_id: str, request: Request) -> Task:
    """Pin a task to the next fix pushed to /positions."""
    try:
        return await _engine(request).assign_current_location(task_id)
    except GeoNudgeError as e:
        raise _http_error(e) from e


@router.post("/tasks/{task_id}/location/favorite/{index}")
async def assign_favorite(task_id: str, index: int, request: Request) -> Task:
    try:
        return await _engine(request).assign_favorite(task_id, index)
    except GeoNudgeError as e:
        raise _http_error(e) from e


# ---- favorites ----


@router.get("/favorites")
async def list_favorites(request: Request) -> list[FavoriteLocation]:
    return _engine(request).favorites.list()


@router.post("/favorites", status_code=201)
async def create_favorite(body: FavoriteCreate, request: Request) -> FavoriteLocation:
    """Save a favorite; its address is reverse geocoded when omitted."""
    try:
        return await _engine(request).add_favorite(body.name, body.to_coordinate(), body.address)
    except GeoNudgeError as e:
        raise _http_error(e) from e


@router.delete("/favorites/{index}")
async def delete_favorite(index: int, request: Request) -> FavoriteLocation:
    try:
        return await _engine(request).remove_favorite(index)
    except GeoNudgeError as e:
        raise _http_error(e) from e
