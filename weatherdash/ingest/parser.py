"""Parsers from provider JSON payloads into immutable weather models."""

import logging

from weatherdash.errors import ProviderResponseError
from weatherdash.forecast.units import round_half_up
from weatherdash.models.location import Location
from weatherdash.models.weather import (
    AirQualityReading,
    Condition,
    CurrentConditions,
    WeatherSample,
)

logger = logging.getLogger(__name__)


def _optional_int(value) -> int | None:
    return int(value) if value is not None else None


def _optional_float(value) -> float | None:
    return float(value) if value is not None else None


def parse_condition(item: dict) -> Condition:
    weather = (item.get("weather") or [{}])[0]
    return Condition(
        code=weather.get("icon", ""),
        main=weather.get("main", ""),
        description=weather.get("description", ""),
    )


def parse_sample(item: dict) -> WeatherSample:
    """Parse one OpenWeatherMap sample (current or forecast list entry).

    Wind degree, gust and cloudiness stay None when the provider omits them.
    """
    try:
        main = item["main"]
        temp = float(main["temp"])
        wind = item.get("wind") or {}
        clouds = item.get("clouds") or {}
        return WeatherSample(
            timestamp=int(item["dt"]),
            temperature_c=temp,
            temp_min_c=float(main.get("temp_min", temp)),
            temp_max_c=float(main.get("temp_max", temp)),
            feels_like_c=_optional_float(main.get("feels_like")),
            humidity_pct=int(main.get("humidity", 0)),
            pressure_hpa=int(main.get("pressure", 0)),
            wind_speed_ms=float(wind.get("speed", 0.0)),
            wind_degrees=_optional_int(wind.get("deg")),
            wind_gust_ms=_optional_float(wind.get("gust")),
            cloudiness_pct=_optional_int(clouds.get("all")),
            condition=parse_condition(item),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderResponseError(f"Malformed weather sample: {e}") from e


def parse_forecast(payload: dict) -> list[WeatherSample]:
    """Parse the 5-day/3-hour forecast list, keeping provider order."""
    items = payload.get("list")
    if items is None:
        raise ProviderResponseError("Forecast payload has no 'list'")
    return [parse_sample(item) for item in items]


def parse_current(payload: dict) -> CurrentConditions:
    sample = parse_sample(payload)
    sys_block = payload.get("sys") or {}
    coord = payload.get("coord") or {}
    try:
        sunrise = int(sys_block["sunrise"])
        sunset = int(sys_block["sunset"])
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderResponseError(f"Current payload missing sunrise/sunset: {e}") from e

    return CurrentConditions(
        sample=sample,
        name=payload.get("name", ""),
        country=sys_block.get("country", ""),
        sunrise=sunrise,
        sunset=sunset,
        visibility_m=_optional_int(payload.get("visibility")),
        latitude=_optional_float(coord.get("lat")),
        longitude=_optional_float(coord.get("lon")),
        uv_index=_optional_float(payload.get("uvi")),
    )


def parse_one_call_uv(payload: dict) -> float | None:
    """UV index from a One Call response, None when absent."""
    current = payload.get("current") or {}
    return _optional_float(current.get("uvi"))


def parse_air_quality(payload: dict) -> AirQualityReading | None:
    """Current US AQI reading from an Open-Meteo air-quality response."""
    current = payload.get("current") or {}
    aqi = current.get("us_aqi")
    if aqi is None:
        logger.debug("Air-quality payload has no us_aqi value")
        return None
    return AirQualityReading(
        aqi=round_half_up(float(aqi)),
        pm2_5=_optional_float(current.get("pm2_5")),
        pm10=_optional_float(current.get("pm10")),
    )


def parse_geocode(results: list[dict]) -> list[Location]:
    """Candidate locations from the direct geocoding endpoint."""
    locations = []
    for r in results or []:
        try:
            locations.append(
                Location(
                    latitude=float(r["lat"]),
                    longitude=float(r["lon"]),
                    name=r.get("name", ""),
                    country=r.get("country", ""),
                    state=r.get("state") or "",
                )
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed geocoding result: %s", r)
    return locations
