"""Geofence transition models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from src.domain.coordinate import Coordinate


class TransitionKind(StrEnum):
    """Direction of a geofence latch change."""

    ENTERED = "entered"  # Armed -> Triggered, notifies
    LEFT = "left"  # Triggered -> Armed, silent


class GeofenceTransition(BaseModel):
    """A latch change computed for one task from one position update."""

    model_config = ConfigDict(frozen=True)

    task_id: str = Field(..., description="Task whose latch changes")
    kind: TransitionKind = Field(..., description="Entered or left")
    distance_m: float = Field(..., description="Distance from the position to the task location")
    location: Coordinate = Field(..., description="Task location the distance was measured against")

    @property
    def notified(self) -> bool:
        """Value of the task's notified flag after this transition."""
        return self.kind == TransitionKind.ENTERED
