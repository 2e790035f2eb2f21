"""Pydantic request models for creating records."""

from pydantic import BaseModel, Field

from src.domain.coordinate import Coordinate


class TaskCreate(BaseModel):
    """Payload for creating a task."""

    name: str = Field(..., description="Task name")


class FavoriteCreate(BaseModel):
    """Payload for saving a favorite location."""

    name: str = Field(..., description="Favorite name")
    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees")
    address: str | None = Field(default=None, description="Known address; resolved when omitted")

    def to_coordinate(self) -> Coordinate:
        """Validated coordinate for this payload."""
        return Coordinate.of(self.latitude, self.longitude)


class PositionFix(BaseModel):
    """A position sample pushed by the host."""

    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees")

    def to_coordinate(self) -> Coordinate:
        """Validated coordinate for this payload."""
        return Coordinate.of(self.latitude, self.longitude)
