"""Task domain model."""

from pydantic import BaseModel, ConfigDict, Field

from src.domain.coordinate import Coordinate


class Task(BaseModel):
    """A to-do item, optionally pinned to a place.

    Instances are immutable; the task store swaps in updated copies.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Opaque unique id assigned at creation")
    name: str = Field(..., min_length=1, description="Display name")
    completed: bool = Field(default=False, description="Whether the task is done")
    location: Coordinate | None = Field(default=None, description="Geofence centre, None for no geofence")
    address: str | None = Field(default=None, description="Place name resolved when the location was assigned")
    notified: bool = Field(default=False, description="Latch set while the user is inside the geofence")
    description: str | None = Field(default=None, description="Free text notes")
