from src.services import (
    address_resolver,
    favorites_registry,
    notification_service,
    reminder_engine,
    task_store,
)


__all__ = [
    "address_resolver",
    "favorites_registry",
    "notification_service",
    "reminder_engine",
    "task_store",
]
