"""Device position lookup as a single-shot call with a fixed timeout.

Each geolocator completes with a Location or raises GeolocationFailure
carrying one of the four GeolocationReason values.
"""

import asyncio
import logging
from typing import Protocol

import httpx

from weatherdash.config.schema import AppConfig, GeolocationMode
from weatherdash.errors import GeolocationFailure, GeolocationReason
from weatherdash.models.location import Location

logger = logging.getLogger(__name__)

IP_GEOLOCATION_URL = "https://ipapi.co/json/"
DEFAULT_TIMEOUT = 10.0


class Geolocator(Protocol):
    async def locate(self) -> Location: ...


class IpGeolocator:
    """Approximate position from the public IP address (ipapi.co)."""

    def __init__(self, url: str = IP_GEOLOCATION_URL, timeout: float = DEFAULT_TIMEOUT):
        self.url = url
        self.timeout = timeout

    async def locate(self) -> Location:
        try:
            return await asyncio.wait_for(self._lookup(), timeout=self.timeout)
        except TimeoutError as e:
            logger.warning("Geolocation timed out after %.1fs", self.timeout)
            raise GeolocationFailure(GeolocationReason.TIMEOUT) from e

    async def _lookup(self) -> Location:
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.get(self.url)
        except httpx.TimeoutException as e:
            raise GeolocationFailure(GeolocationReason.TIMEOUT) from e
        except httpx.RequestError as e:
            logger.error("Geolocation request failed: %s", e)
            raise GeolocationFailure(GeolocationReason.POSITION_UNAVAILABLE) from e

        if resp.status_code in (401, 403, 429):
            raise GeolocationFailure(GeolocationReason.PERMISSION_DENIED)
        if resp.status_code >= 400:
            raise GeolocationFailure(GeolocationReason.POSITION_UNAVAILABLE)

        data = resp.json()
        lat = data.get("latitude")
        lon = data.get("longitude")
        if data.get("error") or lat is None or lon is None:
            logger.warning("Geolocation returned no position: %s", data.get("reason"))
            raise GeolocationFailure(GeolocationReason.POSITION_UNAVAILABLE)

        return Location(
            latitude=float(lat),
            longitude=float(lon),
            name=data.get("city") or "",
            country=data.get("country_code") or data.get("country") or "",
            state=data.get("region") or "",
        )


class StaticGeolocator:
    """Fixed position, for hosts without a usable network position."""

    def __init__(self, location: Location):
        self.location = location

    async def locate(self) -> Location:
        return self.location


class UnsupportedGeolocator:
    async def locate(self) -> Location:
        raise GeolocationFailure(GeolocationReason.UNSUPPORTED)


def build_geolocator(config: AppConfig) -> Geolocator:
    mode = config.ops.geolocation
    if mode == GeolocationMode.IP:
        return IpGeolocator(
            url=config.api.geolocation_url,
            timeout=config.ops.geolocation_timeout_seconds,
        )
    if mode == GeolocationMode.STATIC:
        loc = config.location
        return StaticGeolocator(
            Location(
                latitude=loc.latitude,
                longitude=loc.longitude,
                name=loc.name,
                country=loc.country,
            )
        )
    return UnsupportedGeolocator()
