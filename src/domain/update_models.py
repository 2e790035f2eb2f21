"""Update models for task mutations."""

from pydantic import BaseModel

from src.domain.coordinate import Coordinate


class DescriptionUpdate(BaseModel):
    """Update payload for a task description."""

    description: str


class LocationUpdate(BaseModel):
    """Update payload pinning a task to a coordinate."""

    latitude: float
    longitude: float
    address: str | None = None

    def to_coordinate(self) -> Coordinate:
        """Validated coordinate for this payload."""
        return Coordinate.of(self.latitude, self.longitude)
