"""Output formatters and the console presentation adapter."""

import json
import sys
from dataclasses import asdict
from datetime import datetime, tzinfo
from typing import TextIO

from weatherdash.forecast.snapshot import format_time
from weatherdash.forecast.units import convert_temperature, round_half_up
from weatherdash.models.location import Location
from weatherdash.models.weather import DailyForecast, WeatherSample, WeatherView


def _temp(celsius: float, view: WeatherView) -> int:
    return round_half_up(convert_temperature(celsius, view.settings.temp_unit))


def daily_card(day: DailyForecast, view: WeatherView, tz: tzinfo | None = None) -> dict:
    return {
        "date": day.date_key,
        "day_name": datetime.fromtimestamp(day.representative_timestamp, tz=tz).strftime("%A"),
        "high": _temp(day.temp_max_c, view),
        "low": _temp(day.temp_min_c, view),
        "icon_code": day.condition.code,
        "description": day.condition.description,
        "samples": day.sample_count,
    }


def hourly_card(sample: WeatherSample, view: WeatherView, tz: tzinfo | None = None) -> dict:
    return {
        "time": format_time(
            datetime.fromtimestamp(sample.timestamp, tz=tz), view.settings.time_format
        ),
        "temp": _temp(sample.temperature_c, view),
        "icon_code": sample.condition.code,
        "main": sample.condition.main,
        "description": sample.condition.description,
    }


def view_to_dict(view: WeatherView, tz: tzinfo | None = None) -> dict:
    """JSON-ready view model for programmatic consumers."""
    return {
        "generation": view.generation,
        "fetched_at": view.fetched_at,
        "settings": view.settings.model_dump(mode="json"),
        "current": asdict(view.snapshot),
        "forecast_available": view.forecast_available,
        "hourly": [hourly_card(s, view, tz) for s in view.hourly],
        "daily": [daily_card(d, view, tz) for d in view.daily],
    }


def format_view_json(view: WeatherView, tz: tzinfo | None = None) -> str:
    return json.dumps(view_to_dict(view, tz), indent=2)


def format_view_text(view: WeatherView, tz: tzinfo | None = None) -> str:
    """Plain text dashboard."""
    s = view.snapshot
    lines = [
        f"=== {s.name}, {s.country} | {s.observed_at} ===",
        f"{s.temperature}°{s.temp_symbol} {s.condition_main} ({s.condition_description}), "
        f"feels like {s.feels_like}°{s.temp_symbol}",
        f"Humidity {s.humidity} | Pressure {s.pressure} | Clouds {s.cloudiness} "
        f"| Visibility {s.visibility}",
        f"Wind {s.wind_speed} {s.wind_direction} | Gusts {s.wind_gust}",
        f"Sunrise {s.sunrise} | Sunset {s.sunset} | Moon {s.moon_phase}",
        f"UV {s.uv_index if s.uv_index is not None else 'N/A'}",
    ]
    if s.air_quality is not None:
        aq = s.air_quality
        lines.append(f"Air quality {aq.aqi} ({aq.label})")

    if not view.forecast_available:
        lines.append("Forecast unavailable")
    if view.hourly:
        lines.append("-- Next hours --")
        for card in (hourly_card(h, view, tz) for h in view.hourly):
            lines.append(f"  {card['time']:>8}  {card['temp']:>4}°  {card['main']}")
    if view.daily:
        lines.append("-- Daily --")
        for card in (daily_card(d, view, tz) for d in view.daily):
            lines.append(
                f"  {card['day_name']:<9} {card['high']:>4}° / {card['low']:>4}°  "
                f"{card['description']}"
            )
    return "\n".join(lines)


def format_suggestions(locations: list[Location]) -> str:
    if not locations:
        return "No matches"
    return "\n".join(f"  {loc.suggestion_label}" for loc in locations)


class ConsoleRenderer:
    """Renderer that prints to a text stream."""

    def __init__(
        self,
        stream: TextIO | None = None,
        as_json: bool = False,
        tz: tzinfo | None = None,
    ):
        self.stream = stream or sys.stdout
        self.as_json = as_json
        self.tz = tz
        self.errors: list[str] = []

    def render(self, view: WeatherView) -> None:
        text = format_view_json(view, self.tz) if self.as_json else format_view_text(view, self.tz)
        print(text, file=self.stream)

    def show_error(self, message: str) -> None:
        self.errors.append(message)
        print(f"Error: {message}", file=self.stream)
