"""Tests for the aiosqlite key-value store."""

import pytest

from src.core.errors import PersistenceError
from src.core.storage import SQLiteKeyValueStore, get_db_path


@pytest.fixture
async def sqlite_store(tmp_path):
    store = SQLiteKeyValueStore(str(tmp_path / "nested" / "test.db"))
    yield store
    await store.close()


def test_get_db_path_resolves(tmp_path):
    assert get_db_path(str(tmp_path / "x.db")) == (tmp_path / "x.db").resolve()


@pytest.mark.integration
class TestSQLiteKeyValueStore:
    """Test load/save against a real SQLite file."""

    @pytest.mark.asyncio
    async def test_missing_key_loads_none(self, sqlite_store):
        assert await sqlite_store.load("Tasks") is None

    @pytest.mark.asyncio
    async def test_save_then_load(self, sqlite_store):
        await sqlite_store.save("Tasks", "[]")

        assert await sqlite_store.load("Tasks") == "[]"

    @pytest.mark.asyncio
    async def test_save_overwrites(self, sqlite_store):
        await sqlite_store.save("Tasks", "[1]")
        await sqlite_store.save("Tasks", "[2]")

        assert await sqlite_store.load("Tasks") == "[2]"

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, sqlite_store):
        await sqlite_store.save("Tasks", "tasks")
        await sqlite_store.save("favoriteLocations", "favorites")

        assert await sqlite_store.load("Tasks") == "tasks"
        assert await sqlite_store.load("favoriteLocations") == "favorites"

    @pytest.mark.asyncio
    async def test_survives_reopen(self, tmp_path):
        path = str(tmp_path / "reopen.db")
        first = SQLiteKeyValueStore(path)
        await first.save("Tasks", "persisted")
        await first.close()

        second = SQLiteKeyValueStore(path)
        try:
            assert await second.load("Tasks") == "persisted"
        finally:
            await second.close()

    @pytest.mark.asyncio
    async def test_unusable_path_raises_persistence_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        store = SQLiteKeyValueStore(str(blocker / "test.db"))

        with pytest.raises(PersistenceError):
            await store.load("Tasks")

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, sqlite_store):
        await sqlite_store.save("Tasks", "[]")

        await sqlite_store.close()
        await sqlite_store.close()
