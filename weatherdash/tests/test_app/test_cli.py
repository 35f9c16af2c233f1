"""Tests for CLI commands."""

import json
from pathlib import Path

import httpx
import pytest
import respx
import yaml

from weatherdash.cli import main

OWM = "https://api.openweathermap.org"
AIR_QUALITY = "https://air-quality-api.open-meteo.com/v1/air-quality"


@pytest.fixture
def cli_paths(tmp_path: Path) -> list[str]:
    config_path = tmp_path / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump({"api": {"api_key": "cli-key"}, "display": {"timezone": "UTC"}}, f)
    return ["--config", str(config_path), "--db", str(tmp_path / "cli.db")]


@pytest.fixture
def mock_providers(current_payload, forecast_payload, air_quality_payload):
    with respx.mock(assert_all_called=False) as router:
        router.get(f"{OWM}/data/2.5/weather", name="weather").mock(
            return_value=httpx.Response(200, json=current_payload)
        )
        router.get(f"{OWM}/data/2.5/forecast").mock(
            return_value=httpx.Response(200, json=forecast_payload)
        )
        router.get(f"{OWM}/data/3.0/onecall").mock(return_value=httpx.Response(401))
        router.get(AIR_QUALITY).mock(
            return_value=httpx.Response(200, json=air_quality_payload)
        )
        router.get(f"{OWM}/geo/1.0/direct", name="geocode").mock(
            return_value=httpx.Response(
                200,
                json=[{"name": "London", "lat": 51.5074, "lon": -0.1278, "country": "GB"}],
            )
        )
        yield router


class TestCLI:
    def test_no_command_returns_1(self, capsys):
        assert main([]) == 1

    def test_config_show_hides_key(self, cli_paths: list[str], capsys):
        assert main([*cli_paths, "config", "show"]) == 0
        out = capsys.readouterr().out
        assert "refresh_interval_minutes" in out
        assert "cli-key" not in out

    def test_config_set(self, cli_paths: list[str], capsys):
        assert main([*cli_paths, "config", "set", "ops.hourly_count=4"]) == 0
        with open(cli_paths[1]) as f:
            assert yaml.safe_load(f)["ops"]["hourly_count"] == 4

    def test_config_set_unknown_key(self, cli_paths: list[str], capsys):
        assert main([*cli_paths, "config", "set", "ops.bogus=1"]) == 1
        assert "Error" in capsys.readouterr().out

    def test_settings_set_and_show(self, cli_paths: list[str], capsys):
        assert main([*cli_paths, "settings", "set", "temp_unit=imperial"]) == 0
        capsys.readouterr()
        assert main([*cli_paths, "settings", "show"]) == 0
        assert json.loads(capsys.readouterr().out)["temp_unit"] == "imperial"

    def test_settings_set_invalid(self, cli_paths: list[str], capsys):
        assert main([*cli_paths, "settings", "set", "temp_unit=rankine"]) == 1
        assert main([*cli_paths, "settings", "set", "theme=dark"]) == 1

    def test_recent_empty(self, cli_paths: list[str], capsys):
        assert main([*cli_paths, "recent"]) == 0
        assert "No recent searches" in capsys.readouterr().out

    def test_missing_api_key(self, tmp_path: Path, capsys):
        result = main([
            "--config", str(tmp_path / "none.yaml"),
            "--db", str(tmp_path / "cli.db"),
            "now",
        ])
        assert result == 1
        assert "API key" in capsys.readouterr().out

    def test_lat_without_lon(self, cli_paths: list[str], capsys):
        assert main([*cli_paths, "now", "--lat", "51.5"]) == 1

    def test_now_coordinates(self, cli_paths: list[str], mock_providers, capsys):
        result = main([*cli_paths, "now", "--lat", "51.5074", "--lon", "-0.1278"])
        assert result == 0
        out = capsys.readouterr().out
        assert "London, GB" in out
        assert "Air quality 42 (Good)" in out
        assert not mock_providers["geocode"].called

    def test_city_with_coordinates_rejected(self, cli_paths: list[str], capsys):
        result = main([*cli_paths, "now", "--city", "Paris", "--lat", "1", "--lon", "2"])
        assert result == 1
        assert "cannot be combined" in capsys.readouterr().out

    def test_now_city(self, cli_paths: list[str], mock_providers, capsys):
        assert main([*cli_paths, "now", "--city", "London"]) == 0
        assert "London, GB" in capsys.readouterr().out
        assert mock_providers["weather"].calls[0].request.url.params["q"] == "London"
        assert not mock_providers["geocode"].called

        assert main([*cli_paths, "recent"]) == 0
        assert "1. London, GB" in capsys.readouterr().out

    def test_now_city_not_found(self, cli_paths: list[str], mock_providers, capsys):
        mock_providers["weather"].mock(
            return_value=httpx.Response(404, json={"cod": "404", "message": "city not found"})
        )
        assert main([*cli_paths, "now", "--city", "Atlantis"]) == 1
        assert "City not found" in capsys.readouterr().out

    def test_now_json(self, cli_paths: list[str], mock_providers, capsys):
        assert main([*cli_paths, "--json", "now"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["current"]["uv_index"] is None
        assert len(data["daily"]) == 3

    def test_search_records_recent(self, cli_paths: list[str], mock_providers, capsys):
        assert main([*cli_paths, "search", "London"]) == 0
        capsys.readouterr()
        assert main([*cli_paths, "recent"]) == 0
        assert "1. London, GB" in capsys.readouterr().out

    def test_search_not_found(self, cli_paths: list[str], mock_providers, capsys):
        mock_providers["geocode"].mock(return_value=httpx.Response(200, json=[]))
        assert main([*cli_paths, "search", "Atlantis"]) == 1
        assert "City not found" in capsys.readouterr().out

    def test_suggest(self, cli_paths: list[str], mock_providers, capsys):
        assert main([*cli_paths, "suggest", "Lon"]) == 0
        assert "London, GB" in capsys.readouterr().out
        assert mock_providers["geocode"].calls[0].request.url.params["limit"] == "5"

    def test_recent_replay_out_of_range(self, cli_paths: list[str], mock_providers, capsys):
        assert main([*cli_paths, "recent", "--replay", "3"]) == 1
