"""OpenWeatherMap API client: current conditions, forecast, One Call, geocoding."""

import logging

import httpx

from weatherdash.config.schema import ApiConfig
from weatherdash.errors import MissingConfiguration, NetworkFailure, NotFound
from weatherdash.ingest.parser import (
    parse_current,
    parse_forecast,
    parse_geocode,
    parse_one_call_uv,
)
from weatherdash.models.location import Location
from weatherdash.models.weather import CurrentConditions, WeatherSample

logger = logging.getLogger(__name__)

OWM_BASE_URL = "https://api.openweathermap.org/data/2.5"
OWM_ONE_CALL_URL = "https://api.openweathermap.org/data/3.0/onecall"
OWM_GEO_URL = "https://api.openweathermap.org/geo/1.0"

# Temperatures always come back in Celsius; display conversion is local
REQUEST_UNITS = "metric"


class OpenWeatherClient:
    """Async wrapper around the OpenWeatherMap REST endpoints.

    Endpoints used:
    - /data/2.5/weather   current conditions by lat/lon or city name
    - /data/2.5/forecast  5 days in 3-hour steps
    - /data/3.0/onecall   UV index (subscription; optional)
    - /geo/1.0/direct     place-name search
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = OWM_BASE_URL,
        one_call_url: str = OWM_ONE_CALL_URL,
        geo_url: str = OWM_GEO_URL,
        timeout: float = 10.0,
    ):
        if not api_key:
            raise MissingConfiguration()
        self.api_key = api_key
        self.base_url = base_url
        self.one_call_url = one_call_url
        self.geo_url = geo_url
        self.timeout = timeout

    @classmethod
    def from_config(cls, api: ApiConfig) -> "OpenWeatherClient":
        return cls(
            api_key=api.api_key,
            base_url=api.base_url,
            one_call_url=api.one_call_url,
            geo_url=api.geo_url,
            timeout=api.timeout_seconds,
        )

    async def _get(self, url: str, params: dict) -> dict | list:
        params = {**params, "appid": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(url, params=params)
        except httpx.RequestError as e:
            logger.error("OpenWeatherMap request failed: %s -> %s", url, e)
            raise NetworkFailure(status_code=None) from e

        if resp.status_code == 404:
            raise NotFound()
        if resp.status_code >= 400:
            logger.error("OpenWeatherMap %d: %s", resp.status_code, url)
            raise NetworkFailure(status_code=resp.status_code)
        return resp.json()

    # --- Weather ---

    async def current_weather(self, lat: float, lon: float) -> CurrentConditions:
        raw = await self._get(
            f"{self.base_url}/weather",
            {"lat": lat, "lon": lon, "units": REQUEST_UNITS},
        )
        return parse_current(raw)

    async def current_weather_by_city(self, city: str) -> CurrentConditions:
        """Current conditions for a city name. Unknown city raises NotFound."""
        raw = await self._get(
            f"{self.base_url}/weather", {"q": city, "units": REQUEST_UNITS}
        )
        return parse_current(raw)

    async def forecast(self, lat: float, lon: float) -> list[WeatherSample]:
        raw = await self._get(
            f"{self.base_url}/forecast",
            {"lat": lat, "lon": lon, "units": REQUEST_UNITS},
        )
        return parse_forecast(raw)

    async def uv_index(self, lat: float, lon: float) -> float | None:
        """UV index from the One Call endpoint (needs a subscription)."""
        raw = await self._get(
            self.one_call_url,
            {
                "lat": lat,
                "lon": lon,
                "units": REQUEST_UNITS,
                "exclude": "minutely,hourly,daily,alerts",
            },
        )
        return parse_one_call_uv(raw)

    # --- Geocoding ---

    async def geocode(self, query: str, limit: int = 1) -> list[Location]:
        """Direct place-name search. Returns up to `limit` candidates."""
        raw = await self._get(
            f"{self.geo_url}/direct", {"q": query, "limit": limit}
        )
        return parse_geocode(raw if isinstance(raw, list) else [])
