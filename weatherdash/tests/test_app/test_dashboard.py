"""Tests for the dashboard HTTP API."""

import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from weatherdash.app.controller import WeatherController
from weatherdash.dashboard import DashboardRenderer, create_app
from weatherdash.errors import GeolocationFailure, GeolocationReason, NetworkFailure
from weatherdash.ingest.geolocation import StaticGeolocator
from weatherdash.ingest.owm_client import OpenWeatherClient
from weatherdash.models.location import Location
from weatherdash.storage.database import run_migrations

NOW = datetime(2026, 1, 5, 16, 0, tzinfo=UTC)
PARIS = Location(latitude=48.8566, longitude=2.3522, name="Paris", country="FR")
SPRINGFIELD = Location(
    latitude=39.799, longitude=-89.644, name="Springfield", country="US", state="Illinois"
)


@pytest.fixture
def shared_db(tmp_path: Path) -> sqlite3.Connection:
    """The test client serves requests from its own thread."""
    conn = sqlite3.connect(str(tmp_path / "dash.db"), check_same_thread=False)
    run_migrations(conn)
    yield conn
    conn.close()


@pytest.fixture
def weather(london_current, london_forecast) -> MagicMock:
    mock = MagicMock(spec=OpenWeatherClient)
    mock.current_weather.return_value = london_current
    mock.forecast.return_value = london_forecast
    mock.uv_index.return_value = None
    mock.geocode.return_value = [PARIS]
    return mock


@pytest.fixture
def renderer() -> DashboardRenderer:
    return DashboardRenderer()


@pytest.fixture
def geolocator() -> MagicMock:
    mock = MagicMock(spec=StaticGeolocator)
    mock.locate.return_value = PARIS
    return mock


@pytest.fixture
def client(default_config, shared_db, renderer, weather, geolocator):
    controller = WeatherController(
        default_config,
        shared_db,
        renderer,
        weather=weather,
        geolocator=geolocator,
        clock=lambda: NOW,
    )
    app = create_app(controller=controller, renderer=renderer)
    with TestClient(app) as c:
        yield c


class TestWeather:
    def test_startup_view(self, client: TestClient):
        resp = client.get("/api/weather")
        assert resp.status_code == 200
        data = resp.json()
        assert data["current"]["name"] == "London"
        assert data["current"]["temperature"] == 15
        assert data["generation"] == 1
        assert [d["date"] for d in data["daily"]] == ["2026-01-05", "2026-01-06", "2026-01-07"]

    def test_refresh(self, client: TestClient):
        resp = client.post("/api/refresh")
        assert resp.status_code == 200
        assert resp.json()["generation"] == 2

    def test_refresh_failure(self, client: TestClient, weather):
        weather.current_weather.side_effect = NetworkFailure(status_code=500)
        resp = client.post("/api/refresh")
        assert resp.status_code == 502
        assert resp.json()["detail"] == "Failed to fetch weather data. Please try again."


class TestSearch:
    def test_search(self, client: TestClient, weather):
        resp = client.get("/api/search", params={"q": "Paris"})
        assert resp.status_code == 200
        weather.geocode.assert_awaited_with("Paris", limit=1)
        assert client.get("/api/recent").json() == ["Paris, FR"]

    def test_not_found(self, client: TestClient, weather):
        weather.geocode.return_value = []
        resp = client.get("/api/search", params={"q": "Atlantis"})
        assert resp.status_code == 404
        assert resp.json()["detail"] == "City not found. Please try another search."

    def test_empty_query_rejected(self, client: TestClient):
        assert client.get("/api/search", params={"q": ""}).status_code == 422

    def test_suggest(self, client: TestClient, weather):
        weather.geocode.return_value = [SPRINGFIELD]
        resp = client.get("/api/suggest", params={"q": "Spri"})
        assert resp.status_code == 200
        [item] = resp.json()
        assert item["label"] == "Springfield, Illinois, US"
        assert item["lat"] == 39.799

    def test_suggest_short_query(self, client: TestClient):
        assert client.get("/api/suggest", params={"q": "S"}).json() == []

    def test_replay_recent(self, client: TestClient, weather):
        resp = client.post("/api/recent/replay", json={"label": "Paris, FR"})
        assert resp.status_code == 200
        weather.geocode.assert_awaited_with("Paris", limit=1)


class TestCurrentLocation:
    def test_success(self, client: TestClient):
        assert client.post("/api/location/current").status_code == 200

    def test_denied(self, client: TestClient, geolocator):
        geolocator.locate.side_effect = GeolocationFailure(
            GeolocationReason.PERMISSION_DENIED
        )
        resp = client.post("/api/location/current")
        assert resp.status_code == 502
        assert resp.json()["detail"] == "Location access was denied."


class TestSettings:
    def test_get(self, client: TestClient):
        assert client.get("/api/settings").json() == {
            "temp_unit": "metric",
            "wind_unit": "kmh",
            "time_format": "12",
            "auto_refresh": True,
        }

    def test_put_rerenders(self, client: TestClient, renderer):
        resp = client.put("/api/settings", json={"temp_unit": "imperial"})
        assert resp.status_code == 200
        assert resp.json()["temp_unit"] == "imperial"
        assert renderer.view.snapshot.temp_symbol == "F"
        assert client.get("/api/weather").json()["current"]["temperature"] == 58

    def test_put_invalid(self, client: TestClient):
        assert client.put("/api/settings", json={"temp_unit": "rankine"}).status_code == 422
        assert client.put("/api/settings", json={"theme": "dark"}).status_code == 422


class TestUnconfigured:
    def test_missing_api_key(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("")
        app = create_app(config_path=config_path, db_path=tmp_path / "dash.db")
        with TestClient(app) as c:
            resp = c.get("/api/weather")
        assert resp.status_code == 503
        assert resp.json()["detail"] == "Please set your OpenWeatherMap API key."
