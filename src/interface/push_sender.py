"""Push notification sender posting title/body/data to the host notification surface."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field

from src.core.config import constants, settings


logger = logging.getLogger(__name__)


# HTTP status code constants for error handling
HTTP_CLIENT_ERROR_START = 400
HTTP_CLIENT_ERROR_END = 500


class SendNotificationResult(BaseModel):
    """Result of a push notification request."""

    success: bool = Field(..., description="Whether the request was accepted")
    notification_id: str | None = Field(None, description="Identifier returned by the notification surface")
    error: str | None = Field(None, description="Error message if failed")


def _extract_notification_id(data: Any) -> str | None:
    """Pull an id out of the response body, if the surface returns one."""
    if not isinstance(data, dict):
        return None
    raw_id = data.get("id")
    return str(raw_id) if raw_id is not None else None


async def send_push_notification(
    *,
    title: str,
    body: str,
    data: dict[str, Any],
) -> SendNotificationResult:
    """Request immediate delivery of a notification. Single attempt, no retry."""
    if not settings.notification_url:
        return SendNotificationResult(success=False, error="Notification URL not configured")

    payload = {"title": title, "body": body, "data": data}
    headers = {"Content-Type": "application/json"}
    if settings.notification_api_key:
        headers["X-Api-Key"] = settings.notification_api_key

    try:
        async with httpx.AsyncClient(timeout=constants.API_TIMEOUT_SECONDS) as client:
            response = await client.post(settings.notification_url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        return SendNotificationResult(success=False, error=f"Request failed: {e!s}")

    if response.is_success:
        try:
            notification_id = _extract_notification_id(response.json())
        except ValueError:
            notification_id = None
        return SendNotificationResult(success=True, notification_id=notification_id)

    if HTTP_CLIENT_ERROR_START <= response.status_code < HTTP_CLIENT_ERROR_END:
        return SendNotificationResult(success=False, error=f"Client error: {response.text}")

    return SendNotificationResult(success=False, error=f"Server error: {response.status_code}")
