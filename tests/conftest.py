"""Pytest configuration and shared fixtures."""

from collections.abc import Generator

import pytest

from src.core.config import settings


@pytest.fixture(autouse=True)
def offline_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Keep every test off the network unless it patches httpx itself."""
    monkeypatch.setattr(settings, "notification_url", None)
    monkeypatch.setattr(settings, "notification_api_key", None)
    monkeypatch.setattr(settings, "geocoding_enabled", False)
    monkeypatch.setattr(settings, "location_permission_granted", True)
    yield
