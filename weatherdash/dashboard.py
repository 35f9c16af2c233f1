"""Weather dashboard: FastAPI backend serving the view model and controls."""

import logging
import sqlite3
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from weatherdash.app.controller import WeatherController, build_controller
from weatherdash.config.loader import load_config
from weatherdash.config.schema import TemperatureUnit, TimeFormat, WindUnit
from weatherdash.errors import MissingConfiguration, NotFound
from weatherdash.models.common import resolve_timezone
from weatherdash.models.weather import WeatherView
from weatherdash.reporting.formatters import view_to_dict
from weatherdash.storage.database import open_database

logger = logging.getLogger(__name__)

CONFIG_PATH = Path("config.yaml")
DB_PATH = Path("data") / "weatherdash.db"


class DashboardRenderer:
    """Keeps the latest view and error for the HTTP layer to return."""

    def __init__(self):
        self.view: WeatherView | None = None
        self.error: str | None = None

    def render(self, view: WeatherView) -> None:
        self.view = view
        self.error = None

    def show_error(self, message: str) -> None:
        self.error = message


class SettingsUpdate(BaseModel):
    model_config = {"extra": "forbid"}

    temp_unit: TemperatureUnit | None = None
    wind_unit: WindUnit | None = None
    time_format: TimeFormat | None = None
    auto_refresh: bool | None = None


class RecentReplay(BaseModel):
    label: str


def create_app(
    controller: WeatherController | None = None,
    renderer: DashboardRenderer | None = None,
    config_path: str | Path = CONFIG_PATH,
    db_path: str | Path = DB_PATH,
) -> FastAPI:
    """Build the app. Without a controller one is wired from config at startup."""
    state: dict = {"controller": controller, "renderer": renderer or DashboardRenderer()}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        conn: sqlite3.Connection | None = None
        if state["controller"] is None:
            config = load_config(config_path)
            conn = open_database(db_path)
            try:
                state["controller"] = build_controller(config, conn, state["renderer"])
            except MissingConfiguration as e:
                logger.error("Dashboard started without an API key")
                state["renderer"].show_error(e.user_message)
        if state["controller"] is not None:
            await state["controller"].start()
        yield
        if state["controller"] is not None:
            state["controller"].stop()
        if conn is not None:
            conn.close()

    app = FastAPI(title="Weather Dashboard", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _controller() -> WeatherController:
        ctrl = state["controller"]
        if ctrl is None:
            raise HTTPException(
                status_code=503, detail=state["renderer"].error or "Not configured"
            )
        return ctrl

    def _respond(ctrl: WeatherController, view: WeatherView | None) -> dict:
        renderer: DashboardRenderer = state["renderer"]
        if view is None:
            if renderer.error:
                status = 404 if renderer.error == NotFound.default_message else 502
                raise HTTPException(status_code=status, detail=renderer.error)
            view = ctrl.state.view
            if view is None:
                raise HTTPException(status_code=404, detail="No weather loaded yet")
        return view_to_dict(view, resolve_timezone(ctrl.config.display.timezone))

    # ── Data endpoints ──────────────────────────────────────────────

    @app.get("/api/weather")
    async def get_weather():
        """Latest rendered view; loads the current location if nothing is shown yet."""
        ctrl = _controller()
        if ctrl.state.view is not None:
            return _respond(ctrl, ctrl.state.view)
        state["renderer"].error = None
        return _respond(ctrl, await ctrl.refresh())

    @app.post("/api/refresh")
    async def refresh():
        ctrl = _controller()
        state["renderer"].error = None
        return _respond(ctrl, await ctrl.refresh())

    @app.get("/api/search")
    async def search(q: str = Query(..., min_length=1, max_length=255)):
        ctrl = _controller()
        state["renderer"].error = None
        return _respond(ctrl, await ctrl.search(q))

    @app.get("/api/suggest")
    async def suggest(q: str = Query(..., max_length=255)):
        ctrl = _controller()
        locations = await ctrl.suggest(q)
        return [
            {
                "label": loc.suggestion_label,
                "name": loc.name,
                "state": loc.state,
                "country": loc.country,
                "lat": loc.latitude,
                "lon": loc.longitude,
            }
            for loc in locations
        ]

    @app.post("/api/location/current")
    async def current_location():
        ctrl = _controller()
        state["renderer"].error = None
        return _respond(ctrl, await ctrl.use_current_location())

    @app.get("/api/recent")
    async def recent():
        return _controller().state.recent_searches

    @app.post("/api/recent/replay")
    async def replay(body: RecentReplay):
        ctrl = _controller()
        state["renderer"].error = None
        return _respond(ctrl, await ctrl.replay_recent(body.label))

    # ── Settings ─────────────────────────────────────────────────────

    @app.get("/api/settings")
    async def get_settings():
        return _controller().state.settings.model_dump(mode="json")

    @app.put("/api/settings")
    async def put_settings(body: SettingsUpdate):
        ctrl = _controller()
        changes = body.model_dump(exclude_none=True)
        try:
            settings = await ctrl.update_settings(**changes)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        return settings.model_dump(mode="json")

    return app


app = create_app()
