"""Observability setup built on Pydantic Logfire.

Modules log through the standard library (``logging.getLogger(__name__)``);
Logfire picks those records up once configured. Outbound httpx calls to the
geocoder and the notification surface are traced, and engine operations are
wrapped in spans.

Typical use:
    logger = logging.getLogger(__name__)
    logger.info("Geofence transition", extra={"task_id": task.id})

    with span("task_store.create"):
        ...

    log_with_task_context(logger, "info", "Notified", task, distance_m=812.4)
"""

import logging

import logfire
from fastapi import FastAPI

from src.core.config import settings
from src.domain.task import Task


def configure_logfire() -> None:
    """Configure Logfire for this service.

    Spans and logs are only exported when LOGFIRE_TOKEN is set; otherwise
    everything stays local.
    """
    logfire.configure(
        token=settings.logfire_token,
        service_name="geonudge",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire="if-token-present",
    )
    logfire.instrument_httpx()

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured", extra={"environment": settings.environment})


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every request handled by the app."""
    logfire.instrument_fastapi(app)
    logger = logging.getLogger(__name__)
    logger.info("FastAPI instrumentation configured")


def span(name: str) -> logfire.LogfireSpan:
    """Open a Logfire span named after the service operation, e.g. ``reminder_engine.handle_position``."""
    return logfire.span(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: object,
) -> None:
    """Log at the named level with context passed as ``extra`` fields.

    Args:
        logger: Logger instance to use
        level: Log level ("debug", "info", "warning", "error", "critical")
        message: Log message
        **context: Structured fields such as task_id or distance_m
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)


def log_with_task_context(
    logger: logging.Logger,
    level: str,
    message: str,
    task: Task,
    **extra: object,
) -> None:
    """Log with the identifying fields of a task attached.

    Usage:
        log_with_task_context(logger, "info", "Geofence transition", task, kind="entered")
    """
    context = {"task_id": task.id, "task_name": task.name, "completed": task.completed, **extra}
    log_with_context(logger, level, message, **context)
