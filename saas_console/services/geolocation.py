"""
IP Geolocation

Best-effort lookup of a visitor's city and coordinates. Any failure yields
an "Unknown" location; a share view never fails because of this service.
"""
from typing import NamedTuple, Optional
import logging
import httpx

from saas_console.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

UNKNOWN_LOCATION = "Unknown"
DEFAULT_COUNTRY = "KH"
LOOPBACK_ADDRESSES = ("127.0.0.1", "::1")


class GeoLocation(NamedTuple):
    location: str
    lat: Optional[float] = None
    lon: Optional[float] = None


def lookup_ip(ip: Optional[str]) -> str:
    """Address actually sent to the service; local development uses a fixed public IP."""
    if not ip or ip in LOOPBACK_ADDRESSES:
        return settings.GEOIP_LOOPBACK_FALLBACK_IP
    return ip


async def locate_ip(ip: Optional[str]) -> GeoLocation:
    if not settings.GEOIP_URL:
        return GeoLocation(UNKNOWN_LOCATION)

    url = f"{settings.GEOIP_URL.rstrip('/')}/{lookup_ip(ip)}"

    async with httpx.AsyncClient(timeout=settings.GEOIP_TIMEOUT) as client:
        try:
            resp = await client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"Geolocation lookup failed for {ip}: {e}")
            return GeoLocation(UNKNOWN_LOCATION)

    if resp.status_code != 200:
        logger.warning(f"Geolocation service returned {resp.status_code} for {ip}")
        return GeoLocation(UNKNOWN_LOCATION)

    try:
        data = resp.json()
    except ValueError:
        logger.warning(f"Geolocation service returned invalid JSON for {ip}")
        return GeoLocation(UNKNOWN_LOCATION)

    city = data.get("city") or UNKNOWN_LOCATION
    country = data.get("country") or DEFAULT_COUNTRY
    return GeoLocation(f"{city}, {country}", data.get("lat"), data.get("lon"))
