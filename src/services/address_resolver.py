"""Resolve a coordinate to a human-readable place."""

import logging
from collections.abc import Awaitable, Callable

from src.core.logging import span
from src.domain.coordinate import Coordinate
from src.interface import geocoder
from src.services.favorites_registry import FavoritesRegistry


logger = logging.getLogger(__name__)


ReverseGeocode = Callable[[Coordinate], Awaitable[str | None]]


class AddressResolver:
    """Favorites first, then reverse geocoding."""

    def __init__(self, favorites: FavoritesRegistry, reverse_geocode: ReverseGeocode | None = None) -> None:
        self._favorites = favorites
        self._reverse_geocode = reverse_geocode

    async def resolve(self, location: Coordinate) -> str | None:
        """Favorite name at this coordinate, else the geocoded address, else None."""
        favorite = self._favorites.find_by_location(location)
        if favorite is not None:
            return favorite.name
        return await self.lookup_address(location)

    async def lookup_address(self, location: Coordinate) -> str | None:
        """Reverse geocode only, skipping the favorites registry."""
        lookup = self._reverse_geocode or geocoder.reverse_geocode
        with span("address_resolver.reverse_geocode"):
            try:
                return await lookup(location)
            except Exception:
                logger.exception("Reverse geocoder raised for (%s, %s)", location.latitude, location.longitude)
                return None
