"""Notification dispatcher for proximity alerts."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from src.core.config import Constants
from src.core.logging import span
from src.domain.task import Task
from src.interface import push_sender
from src.models.service_models import NotificationResult


logger = logging.getLogger(__name__)


SendNotification = Callable[..., Awaitable[push_sender.SendNotificationResult]]


def build_proximity_payload(task: Task) -> dict[str, Any]:
    """Title, body and data for a task's arrival notification."""
    return {
        "title": Constants.PROXIMITY_NOTIFICATION_TITLE,
        "body": f"Task: {task.name}",
        "data": {"taskId": task.id},
    }


class NotificationDispatcher:
    """Fires one immediate alert per geofence entry.

    Delivery is fire-and-forget: failures are logged and never raised, and
    nothing is retried.
    """

    def __init__(self, send: SendNotification | None = None) -> None:
        self._send = send

    async def notify(self, task: Task) -> NotificationResult:
        """Send the arrival notification for a task."""
        # Resolved per call so tests can patch push_sender.send_push_notification
        send = self._send or push_sender.send_push_notification
        with span("notification_service.notify"):
            try:
                result = await send(**build_proximity_payload(task))
            except Exception as e:
                logger.exception("Error sending proximity notification for task %s", task.id)
                return NotificationResult(task_id=task.id, success=False, error=str(e))

            if result.success:
                logger.info("Proximity notification sent for task=%s name=%r", task.id, task.name)
            else:
                logger.warning("Proximity notification failed for task=%s error=%s", task.id, result.error)

            return NotificationResult(task_id=task.id, success=result.success, error=result.error)
