"""Pure geofence evaluation: position + tasks -> latch transitions."""

from collections.abc import Iterable

from src.core.config import Constants
from src.core.geo import distance_meters
from src.domain.coordinate import Coordinate
from src.domain.geofence import GeofenceTransition, TransitionKind
from src.domain.task import Task


ARRIVAL_RADIUS_METERS = Constants.ARRIVAL_RADIUS_METERS


def evaluate_task(
    position: Coordinate,
    task: Task,
    *,
    radius_m: float = ARRIVAL_RADIUS_METERS,
) -> GeofenceTransition | None:
    """Compute the transition for a single task, if any.

    Two states per task: armed (notified=False) and triggered (notified=True).
    Entry needs the distance strictly inside the radius, exit strictly outside;
    a distance exactly on the radius never transitions. Completed tasks and
    tasks without a location are skipped.
    """
    if task.completed or task.location is None:
        return None

    distance = distance_meters(position, task.location)

    if distance < radius_m and not task.notified:
        return GeofenceTransition(
            task_id=task.id, kind=TransitionKind.ENTERED, distance_m=distance, location=task.location
        )
    if distance > radius_m and task.notified:
        return GeofenceTransition(
            task_id=task.id, kind=TransitionKind.LEFT, distance_m=distance, location=task.location
        )
    return None


def evaluate_geofences(
    position: Coordinate,
    tasks: Iterable[Task],
    *,
    radius_m: float = ARRIVAL_RADIUS_METERS,
) -> list[GeofenceTransition]:
    """Compute latch transitions for every open, located task.

    Does not mutate the tasks; the caller applies the result.
    """
    transitions = []
    for task in tasks:
        transition = evaluate_task(position, task, radius_m=radius_m)
        if transition is not None:
            transitions.append(transition)
    return transitions
