"""Open-Meteo air-quality client (keyless) for the current US AQI reading."""

import logging

import httpx

from weatherdash.errors import NetworkFailure
from weatherdash.ingest.parser import parse_air_quality
from weatherdash.models.weather import AirQualityReading

logger = logging.getLogger(__name__)

AIR_QUALITY_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"


class AirQualityClient:
    def __init__(self, base_url: str = AIR_QUALITY_URL, timeout: float = 10.0):
        self.base_url = base_url
        self.timeout = timeout

    async def current(self, lat: float, lon: float) -> AirQualityReading | None:
        params = {
            "latitude": lat,
            "longitude": lon,
            "current": "us_aqi,pm2_5,pm10",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(self.base_url, params=params)
        except httpx.RequestError as e:
            logger.warning("Air-quality request failed: %s", e)
            raise NetworkFailure() from e

        if resp.status_code >= 400:
            logger.warning("Air-quality API returned %d", resp.status_code)
            raise NetworkFailure(status_code=resp.status_code)
        return parse_air_quality(resp.json())
