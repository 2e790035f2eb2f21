"""Pytest configuration and fixtures for unit tests."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest

from src.interface.position_feed import PushPositionFeed
from src.interface.push_sender import SendNotificationResult
from src.services.address_resolver import AddressResolver
from src.services.favorites_registry import FavoritesRegistry
from src.services.location_tracker import LocationTracker
from src.services.notification_service import NotificationDispatcher
from src.services.reminder_engine import ReminderEngine
from src.services.task_store import TaskStore
from tests.unit.mocks import FakeClock, FakeGeocoder, InMemoryKeyValueStore


@pytest.fixture
def storage():
    """Provides a fresh InMemoryKeyValueStore for each test."""
    return InMemoryKeyValueStore()


@pytest.fixture
def task_store(storage):
    return TaskStore(storage)


@pytest.fixture
def favorites(storage):
    return FavoritesRegistry(storage, match_decimals=5)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def feed(clock):
    return PushPositionFeed(clock=clock)


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def mock_send():
    """Notification sender that always succeeds."""
    return AsyncMock(return_value=SendNotificationResult(success=True, notification_id="notif_1"))


@pytest.fixture
def make_engine(storage, favorites, task_store, geocoder, mock_send):
    """Factory for engines over the shared in-memory collaborators."""

    def _make(feed: PushPositionFeed) -> ReminderEngine:
        return ReminderEngine(
            tasks=task_store,
            favorites=favorites,
            tracker=LocationTracker(feed, min_interval_ms=0, min_distance_m=0),
            dispatcher=NotificationDispatcher(send=mock_send),
            resolver=AddressResolver(favorites, reverse_geocode=geocoder),
        )

    return _make


@pytest.fixture
async def engine(make_engine, feed) -> AsyncGenerator[ReminderEngine]:
    """Started engine with location permission granted."""
    engine = make_engine(feed)
    await engine.start()
    yield engine
    await engine.stop()
