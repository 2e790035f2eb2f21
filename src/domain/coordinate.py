"""Coordinate value object."""

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.core.errors import InvalidArgumentError


class Coordinate(BaseModel):
    """Immutable latitude/longitude pair in decimal degrees."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in degrees")

    @classmethod
    def of(cls, latitude: float, longitude: float) -> "Coordinate":
        """Build a coordinate, raising InvalidArgumentError when out of range."""
        try:
            return cls(latitude=latitude, longitude=longitude)
        except ValidationError as e:
            msg = f"Malformed coordinate ({latitude}, {longitude})"
            raise InvalidArgumentError(msg) from e
