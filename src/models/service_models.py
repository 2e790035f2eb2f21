"""Pydantic models for service layer return types."""

from pydantic import BaseModel, Field

from src.domain.geofence import GeofenceTransition


class NotificationResult(BaseModel):
    """Outcome of a proximity notification attempt. Informational only."""

    task_id: str
    success: bool
    error: str | None = None


class PositionUpdateResult(BaseModel):
    """What a single position update changed."""

    applied: list[GeofenceTransition]
    notified: list[str] = Field(default_factory=list, description="Task ids whose arrival alert was queued")
