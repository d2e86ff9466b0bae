"""
Address checks and geocoding for Itinerario.

Addresses are validated with a couple of cheap structural checks before
anything is sent to a geocoder. Geocoding wraps the ``geopy`` library
and OpenStreetMap's Nominatim service; results are cached in memory so
that repeated imports of the same addresses do not hit the service
again.

Example usage:

    from itinerario.geocode import geocode_address
    coords = geocode_address("Piazza del Duomo, 1, Milano")

The route optimiser never calls into this module; callers resolve
coordinates first and hand plain latitude/longitude pairs over.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Optional, Tuple

from geopy.exc import GeocoderServiceError, GeocoderTimedOut
from geopy.geocoders import Nominatim

from itinerario.config import settings

logger = logging.getLogger(__name__)

_STREET_NUMBER = re.compile(r"[,\s]\d+")

_geocoder: Optional[Nominatim] = None


def validate_address(address: Optional[str]) -> bool:
    """Return True if the address looks like "street, number, city".

    The address must be at least 5 characters long and consist of at
    least two comma separated parts.
    """
    if not address or len(address.strip()) < 5:
        return False
    return len(address.split(",")) >= 2


def has_street_number(address: str) -> bool:
    return _STREET_NUMBER.search(address) is not None


def format_address(address: str, street_number: Optional[str] = None) -> str:
    """Insert a street number into an address that lacks one.

    The number goes right before the first comma, or is appended after a
    comma when the address has none. Addresses that already carry a
    number, or calls without ``street_number``, are returned unchanged.
    """
    if has_street_number(address) or not street_number:
        return address
    comma_index = address.find(",")
    if comma_index > 0:
        return f"{address[:comma_index]}, {street_number}{address[comma_index:]}"
    return f"{address}, {street_number}"


def _get_geocoder() -> Nominatim:
    """Return a singleton Nominatim geocoder instance."""
    global _geocoder
    if _geocoder is None:
        _geocoder = Nominatim(user_agent=settings.geocoder_user_agent)
    return _geocoder


@lru_cache(maxsize=256)
def geocode_address(address: str) -> Optional[Tuple[float, float]]:
    """Geocode an address and return (latitude, longitude) or ``None``.

    A timeout or service error is retried once with a longer timeout.
    Failures are logged and reported as ``None``.

    Args:
        address: Free form text to geocode.

    Returns:
        A tuple of (lat, lon) if geocoding succeeds, otherwise ``None``.
    """
    geocoder = _get_geocoder()
    try:
        location = geocoder.geocode(address, timeout=settings.geocode_timeout_seconds)
    except (GeocoderTimedOut, GeocoderServiceError) as exc:
        logger.info("Geocoding %r failed (%s), retrying once", address, exc)
        try:
            location = geocoder.geocode(address, timeout=settings.geocode_retry_timeout_seconds)
        except (GeocoderTimedOut, GeocoderServiceError) as retry_exc:
            logger.warning("Could not geocode %r: %s", address, retry_exc)
            return None
    if location is None:
        logger.warning("No match found when geocoding %r", address)
        return None
    logger.debug("Geocoded %r -> (%s, %s)", address, location.latitude, location.longitude)
    return location.latitude, location.longitude
