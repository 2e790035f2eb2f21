"""Reverse geocoding against a Nominatim-compatible endpoint."""

import logging

import httpx

from src.core.config import constants, settings
from src.domain.coordinate import Coordinate


logger = logging.getLogger(__name__)


async def reverse_geocode(location: Coordinate) -> str | None:
    """Best-effort formatted address for a coordinate.

    Returns None when geocoding is disabled, the service has no result, or the
    request fails.
    """
    if not settings.geocoding_enabled:
        return None

    params = {
        "lat": location.latitude,
        "lon": location.longitude,
        "format": "jsonv2",
    }
    headers = {"User-Agent": settings.geocoder_user_agent}

    try:
        async with httpx.AsyncClient(timeout=constants.API_TIMEOUT_SECONDS) as client:
            response = await client.get(settings.geocoder_url, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(
            "Reverse geocoding failed",
            extra={"latitude": location.latitude, "longitude": location.longitude, "error": str(e)},
        )
        return None

    if not isinstance(data, dict):
        return None
    address = data.get("display_name")
    if not isinstance(address, str) or not address.strip():
        logger.debug("No address for (%s, %s)", location.latitude, location.longitude)
        return None
    return address
