"""Favorite location domain model."""

from pydantic import BaseModel, ConfigDict, Field

from src.domain.coordinate import Coordinate


class FavoriteLocation(BaseModel):
    """User-named, reusable coordinate shortcut."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Display name chosen by the user")
    location: Coordinate = Field(..., description="Saved coordinate")
    address: str | None = Field(default=None, description="Resolved address, if known")
