"""Reverse geocoding of GPS coordinates to a place name."""

import logging

from geopy.geocoders import Nominatim

from imagelens.config import GEOCODER_USER_AGENT

logger = logging.getLogger(__name__)

_geocoder: Nominatim | None = None


def get_geocoder() -> Nominatim:
    """Get or create the shared Nominatim geocoder."""
    global _geocoder
    if _geocoder is None:
        _geocoder = Nominatim(user_agent=GEOCODER_USER_AGENT, timeout=10)
    return _geocoder


def reverse_geocode(lat: float, lon: float, geocoder=None) -> str | None:
    """Resolve coordinates to a short "city, state, country" name.

    Args:
        lat: Signed decimal latitude
        lon: Signed decimal longitude
        geocoder: Optional geopy-compatible geocoder, defaults to Nominatim

    Returns:
        Place name, or None if nothing was found or the lookup failed
    """
    geocoder = geocoder or get_geocoder()
    try:
        location = geocoder.reverse((lat, lon), exactly_one=True, language="en")
    except Exception as e:
        logger.warning(f"Reverse geocode failed for ({lat}, {lon}): {e}")
        return None

    if location is None:
        return None

    address = (getattr(location, "raw", None) or {}).get("address", {})
    city = (
        address.get("city")
        or address.get("town")
        or address.get("village")
        or address.get("suburb")
    )
    state = address.get("state") or address.get("region")
    country = address.get("country")
    parts = [part for part in (city, state, country) if part]
    if parts:
        return ", ".join(parts)
    return getattr(location, "address", None) or None
