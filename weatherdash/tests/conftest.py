"""Shared test fixtures."""

import json
import sqlite3
from pathlib import Path

import pytest
import yaml

from weatherdash.config.defaults import API_KEY_ENV
from weatherdash.config.schema import AppConfig
from weatherdash.ingest.parser import parse_current, parse_forecast
from weatherdash.models.weather import CurrentConditions, WeatherSample
from weatherdash.storage.database import connect, run_migrations

FIXTURE_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str):
    with open(FIXTURE_DIR / name) as f:
        return json.load(f)


@pytest.fixture(autouse=True)
def no_env_api_key(monkeypatch):
    """Keep a developer's real key out of the tests."""
    monkeypatch.delenv(API_KEY_ENV, raising=False)


@pytest.fixture
def db(tmp_path: Path) -> sqlite3.Connection:
    """Migrated temporary SQLite database."""
    conn = connect(tmp_path / "test.db")
    run_migrations(conn)
    yield conn
    conn.close()


@pytest.fixture
def default_config() -> AppConfig:
    """Defaults plus a dummy API key, with UTC day bucketing."""
    return AppConfig(api={"api_key": "test-key"}, display={"timezone": "UTC"})


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "api": {"api_key": "yaml-key"},
        "display": {"defaults": {"temp_unit": "imperial"}, "timezone": "UTC"},
        "ops": {"refresh_interval_minutes": 15},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURE_DIR


@pytest.fixture
def current_payload() -> dict:
    return load_fixture("owm_current_london.json")


@pytest.fixture
def forecast_payload() -> dict:
    return load_fixture("owm_forecast_london.json")


@pytest.fixture
def geocode_payload() -> list:
    return load_fixture("owm_geocode_springfield.json")


@pytest.fixture
def air_quality_payload() -> dict:
    return load_fixture("open_meteo_air_quality.json")


@pytest.fixture
def ipapi_payload() -> dict:
    return load_fixture("ipapi_london.json")


@pytest.fixture
def london_current(current_payload: dict) -> CurrentConditions:
    return parse_current(current_payload)


@pytest.fixture
def london_forecast(forecast_payload: dict) -> list[WeatherSample]:
    return parse_forecast(forecast_payload)
