"""Weather controller: owns app state and runs every fetch-and-render cycle.

All mutation of the current location and settings goes through controller
methods on the event loop, so no locking is needed. Each weather load gets
a generation id; a result that finishes after a newer load started is
dropped instead of rendered.
"""

import asyncio
import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from weatherdash.app.scheduler import AutoRefresher, Debouncer
from weatherdash.config.schema import AppConfig, DisplaySettings
from weatherdash.errors import GeolocationFailure, NotFound, WeatherError
from weatherdash.forecast.aggregator import take_daily, take_hourly
from weatherdash.forecast.snapshot import build_snapshot
from weatherdash.ingest.air_quality_client import AirQualityClient
from weatherdash.ingest.geolocation import Geolocator, build_geolocator
from weatherdash.ingest.owm_client import OpenWeatherClient
from weatherdash.models.common import resolve_timezone, utc_now
from weatherdash.models.location import Location
from weatherdash.models.weather import ExtendedConditions, WeatherView
from weatherdash.storage import prefs_repo

logger = logging.getLogger(__name__)

SEARCH_FAILED_MESSAGE = "Failed to search for city. Please try again."
MIN_SUGGESTION_QUERY = 2


class Renderer(Protocol):
    """Presentation boundary. The controller never formats output itself."""

    def render(self, view: WeatherView) -> None: ...

    def show_error(self, message: str) -> None: ...


@dataclass
class AppState:
    location: Location
    settings: DisplaySettings
    generation: int = 0
    view: WeatherView | None = None
    recent_searches: list[str] = field(default_factory=list)


async def _no_result() -> None:
    return None


class WeatherController:
    def __init__(
        self,
        config: AppConfig,
        conn: sqlite3.Connection,
        renderer: Renderer,
        weather: OpenWeatherClient,
        geolocator: Geolocator,
        air_quality: AirQualityClient | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self.conn = conn
        self.renderer = renderer
        self.weather = weather
        self.geolocator = geolocator
        self.air_quality = air_quality
        self.clock = clock
        self.tz = resolve_timezone(config.display.timezone)

        loc = config.location
        self.state = AppState(
            location=Location(
                latitude=loc.latitude,
                longitude=loc.longitude,
                name=loc.name,
                country=loc.country,
            ),
            settings=prefs_repo.load_settings(conn, config.display.defaults),
            recent_searches=prefs_repo.load_recent_searches(conn),
        )

        ops = config.ops
        self.refresher = AutoRefresher(
            self._auto_refresh, interval=ops.refresh_interval_minutes * 60
        )
        self.debouncer = Debouncer(delay=ops.debounce_ms / 1000)

    # --- Lifecycle ---

    async def start(self) -> WeatherView | None:
        """Startup: geolocate (default location on failure), render, auto-refresh."""
        try:
            self.state.location = await self.geolocator.locate()
        except GeolocationFailure as e:
            logger.warning("Could not get location (%s), using default", e.reason.value)

        view = await self._show(self.state.location)
        if self.state.settings.auto_refresh:
            self.refresher.start()
        return view

    def stop(self) -> None:
        self.refresher.stop()
        self.debouncer.cancel()

    # --- Weather loading ---

    async def load_weather(self, location: Location) -> WeatherView | None:
        """Fetch everything for a location and build the view.

        Raises WeatherError when current conditions fail. Forecast failure
        leaves the forecast empty; extended failures fall back silently.
        Returns None when a newer load started while this one was in flight.
        """
        self.state.generation += 1
        generation = self.state.generation
        settings = self.state.settings
        lat, lon = location.latitude, location.longitude

        current, forecast, uv, air = await asyncio.gather(
            self.weather.current_weather(lat, lon),
            self.weather.forecast(lat, lon),
            self.weather.uv_index(lat, lon),
            self.air_quality.current(lat, lon) if self.air_quality else _no_result(),
            return_exceptions=True,
        )

        if generation != self.state.generation:
            logger.info(
                "Discarding stale weather result (generation %d, latest %d)",
                generation, self.state.generation,
            )
            return None

        if isinstance(current, BaseException):
            raise current

        forecast_available = not isinstance(forecast, BaseException)
        if not forecast_available:
            logger.error("Forecast fetch failed for %.4f,%.4f: %s", lat, lon, forecast)
            forecast = []

        if isinstance(uv, BaseException):
            logger.debug("One Call data unavailable: %s", uv)
            uv = None
        if isinstance(air, BaseException):
            logger.debug("Air-quality data unavailable: %s", air)
            air = None

        now = self.clock()
        extended = ExtendedConditions(uv_index=uv, air_quality=air)
        ops = self.config.ops
        view = WeatherView(
            snapshot=build_snapshot(current, settings, now, extended, self.tz),
            settings=settings,
            generation=generation,
            fetched_at=now.isoformat(),
            daily=take_daily(forecast, self.tz, ops.daily_days),
            hourly=take_hourly(forecast, ops.hourly_count),
            forecast_available=forecast_available,
        )
        self.state.view = view
        logger.info(
            "Loaded weather for %s (%d days, %d hours, generation %d)",
            view.snapshot.name or f"{lat:.4f},{lon:.4f}",
            len(view.daily), len(view.hourly), generation,
        )
        return view

    async def _show(self, location: Location) -> WeatherView | None:
        try:
            view = await self.load_weather(location)
        except WeatherError as e:
            logger.error("Error fetching weather data: %s", e)
            self.renderer.show_error(WeatherError.default_message)
            return None
        if view is not None:
            self.renderer.render(view)
        return view

    async def refresh(self) -> WeatherView | None:
        return await self._show(self.state.location)

    async def _auto_refresh(self) -> None:
        try:
            view = await self.load_weather(self.state.location)
        except WeatherError as e:
            logger.warning("Auto-refresh failed: %s", e)
            return
        if view is not None:
            self.renderer.render(view)

    # --- Location changes ---

    async def show_location(self, location: Location) -> WeatherView | None:
        """Switch to a location without recording it as a recent search."""
        self.state.location = location
        return await self._show(location)

    async def select_location(self, location: Location) -> WeatherView | None:
        """Switch to a chosen place and remember it as a recent search."""
        view = await self.show_location(location)
        self.state.recent_searches = prefs_repo.save_recent_search(
            self.conn, location.label, limit=self.config.ops.recent_limit
        )
        return view

    async def search(self, query: str) -> WeatherView | None:
        query = query.strip()
        if not query:
            return None

        try:
            matches = await self.weather.geocode(query, limit=1)
        except WeatherError as e:
            logger.error("City search failed for %r: %s", query, e)
            self.renderer.show_error(SEARCH_FAILED_MESSAGE)
            return None

        if not matches:
            self.renderer.show_error(NotFound.default_message)
            return None
        return await self.select_location(matches[0])

    async def show_city(self, city: str) -> WeatherView | None:
        """Resolve a city through the current-weather endpoint and show it.

        Unlike search() this skips geocoding, so an unknown name surfaces
        the provider's 404 as the not-found message.
        """
        city = city.strip()
        if not city:
            return None

        try:
            current = await self.weather.current_weather_by_city(city)
        except NotFound as e:
            logger.info("City not found: %r", city)
            self.renderer.show_error(e.user_message)
            return None
        except WeatherError as e:
            logger.error("Error fetching weather for %r: %s", city, e)
            self.renderer.show_error(WeatherError.default_message)
            return None

        if current.latitude is None or current.longitude is None:
            logger.error("Current weather for %r has no coordinates", city)
            self.renderer.show_error(WeatherError.default_message)
            return None
        return await self.select_location(
            Location(
                latitude=current.latitude,
                longitude=current.longitude,
                name=current.name,
                country=current.country,
            )
        )

    async def use_current_location(self) -> WeatherView | None:
        try:
            location = await self.geolocator.locate()
        except GeolocationFailure as e:
            logger.error("Geolocation error: %s", e.reason.value)
            self.renderer.show_error(e.user_message)
            return None
        return await self.show_location(location)

    async def replay_recent(self, label: str) -> WeatherView | None:
        """Search again for a "City, Country" entry from the recent list."""
        city = label.split(", ")[0]
        return await self.search(city)

    # --- Suggestions ---

    async def suggest(self, query: str) -> list[Location]:
        query = query.strip()
        if len(query) < MIN_SUGGESTION_QUERY:
            return []
        try:
            return await self.weather.geocode(query, limit=self.config.ops.suggestion_limit)
        except WeatherError as e:
            logger.error("Error fetching suggestions: %s", e)
            return []

    def schedule_suggestions(
        self, query: str, deliver: Callable[[list[Location]], Any]
    ) -> None:
        """Debounced suggest(): each keystroke replaces the pending lookup."""
        if len(query.strip()) < MIN_SUGGESTION_QUERY:
            self.debouncer.cancel()
            deliver([])
            return

        async def _lookup() -> None:
            deliver(await self.suggest(query))

        self.debouncer.schedule(_lookup)

    # --- Settings ---

    async def update_settings(self, **changes: Any) -> DisplaySettings:
        """Apply, persist and re-render. Invalid values raise ValidationError."""
        settings = DisplaySettings(**{**self.state.settings.model_dump(), **changes})
        self.state.settings = settings
        prefs_repo.save_settings(self.conn, settings)
        logger.info("Settings updated: %s", settings.model_dump_json())

        if settings.auto_refresh:
            self.refresher.start()
        else:
            self.refresher.stop()

        if self.state.view is not None:
            await self.refresh()
        return settings


def build_controller(
    config: AppConfig, conn: sqlite3.Connection, renderer: Renderer
) -> WeatherController:
    """Wire real provider clients. Raises MissingConfiguration without an API key."""
    api = config.api
    return WeatherController(
        config,
        conn,
        renderer,
        weather=OpenWeatherClient.from_config(api),
        geolocator=build_geolocator(config),
        air_quality=AirQualityClient(api.air_quality_url, timeout=api.timeout_seconds),
    )
