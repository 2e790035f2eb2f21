"""Domain models and DTOs."""

from src.domain.coordinate import Coordinate
from src.domain.create_models import FavoriteCreate, PositionFix, TaskCreate
from src.domain.favorite import FavoriteLocation
from src.domain.geofence import GeofenceTransition, TransitionKind
from src.domain.task import Task
from src.domain.update_models import DescriptionUpdate, LocationUpdate


__all__ = [
    "Coordinate",
    "DescriptionUpdate",
    "FavoriteCreate",
    "FavoriteLocation",
    "GeofenceTransition",
    "LocationUpdate",
    "PositionFix",
    "Task",
    "TaskCreate",
    "TransitionKind",
]
