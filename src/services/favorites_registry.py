"""Favorites registry: user-named coordinates with write-through persistence."""

import asyncio
import logging

from pydantic import TypeAdapter, ValidationError

from src.core.config import Constants, settings
from src.core.errors import InvalidArgumentError, OutOfRangeError, PersistenceError
from src.core.logging import span
from src.core.storage import KeyValueStore
from src.domain.coordinate import Coordinate
from src.domain.favorite import FavoriteLocation


logger = logging.getLogger(__name__)

_favorites_adapter = TypeAdapter(list[FavoriteLocation])


class FavoritesRegistry:
    """Ordered collection of favorite locations.

    Duplicates are allowed; callers decide whether a name or place is already saved.
    Coordinate matching rounds both sides to ``match_decimals`` places unless an
    explicit tolerance (in degrees) is given.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        *,
        storage_key: str = Constants.FAVORITES_STORAGE_KEY,
        match_decimals: int | None = None,
    ) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._match_decimals = settings.favorite_match_decimals if match_decimals is None else match_decimals
        self._favorites: list[FavoriteLocation] = []
        self._lock = asyncio.Lock()

    async def load(self) -> None:
        """Hydrate from storage. Failures are logged and leave the registry empty."""
        with span("favorites_registry.load"):
            try:
                payload = await self._storage.load(self._storage_key)
            except PersistenceError:
                logger.exception("Failed to load favorite locations")
                return

            if payload is None:
                return

            try:
                favorites = _favorites_adapter.validate_json(payload)
            except ValidationError:
                logger.exception("Stored favorite locations are malformed; starting empty")
                return

            async with self._lock:
                self._favorites = favorites
            logger.info("Loaded %d favorite locations", len(favorites))

    async def _persist(self) -> None:
        payload = _favorites_adapter.dump_json(self._favorites).decode()
        try:
            await self._storage.save(self._storage_key, payload)
        except PersistenceError:
            # In-memory state stays authoritative; the next save writes the full list.
            logger.exception("Failed to save favorite locations")

    async def add(self, name: str, location: Coordinate, address: str | None = None) -> FavoriteLocation:
        """Append a favorite. Blank names are rejected; duplicates are not."""
        clean_name = name.strip()
        if not clean_name:
            msg = "Favorite name must not be empty"
            raise InvalidArgumentError(msg)

        favorite = FavoriteLocation(name=clean_name, location=location, address=address)
        async with self._lock:
            self._favorites.append(favorite)
            await self._persist()

        logger.info("Added favorite location %r", clean_name)
        return favorite

    async def remove(self, index: int) -> FavoriteLocation:
        """Remove the favorite at index."""
        async with self._lock:
            self._check_index(index)
            favorite = self._favorites.pop(index)
            await self._persist()

        logger.info("Removed favorite location %r", favorite.name)
        return favorite

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._favorites):
            msg = f"Favorite index {index} out of range (have {len(self._favorites)})"
            raise OutOfRangeError(msg)

    def get(self, index: int) -> FavoriteLocation:
        """Return the favorite at index."""
        self._check_index(index)
        return self._favorites[index]

    def list(self) -> list[FavoriteLocation]:
        """Snapshot of all favorites in insertion order."""
        return list(self._favorites)

    def find_by_address(self, address: str) -> FavoriteLocation | None:
        """First favorite whose address equals the given string exactly."""
        return next((fav for fav in self._favorites if fav.address == address), None)

    def find_by_location(self, location: Coordinate, tolerance: float = 0.0) -> FavoriteLocation | None:
        """First favorite at the given coordinate.

        Args:
            location: Coordinate to look up
            tolerance: Maximum per-axis difference in degrees; 0 compares rounded values

        Returns:
            Matching favorite or None
        """
        return next((fav for fav in self._favorites if self._same_place(fav.location, location, tolerance)), None)

    def _same_place(self, a: Coordinate, b: Coordinate, tolerance: float) -> bool:
        if tolerance > 0:
            return abs(a.latitude - b.latitude) <= tolerance and abs(a.longitude - b.longitude) <= tolerance
        places = self._match_decimals
        return round(a.latitude, places) == round(b.latitude, places) and round(a.longitude, places) == round(
            b.longitude, places
        )
