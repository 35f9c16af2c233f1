"""Tests for temperature/wind conversion and compass labels."""

import pytest

from weatherdash.config.schema import TemperatureUnit, WindUnit
from weatherdash.forecast.units import (
    COMPASS_LABELS,
    convert_temperature,
    convert_wind_speed,
    format_temperature,
    format_wind_speed,
    round_half_up,
    temperature_symbol,
    wind_direction_label,
    wind_unit_label,
)


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value,expected",
        [(2.5, 3), (3.5, 4), (2.49, 2), (-2.5, -2), (-2.6, -3), (0.0, 0)],
    )
    def test_halves_round_up(self, value: float, expected: int):
        assert round_half_up(value) == expected


class TestConvertTemperature:
    def test_metric_is_identity(self):
        assert convert_temperature(21.3, TemperatureUnit.METRIC) == 21.3

    def test_freezing_point(self):
        assert convert_temperature(0, TemperatureUnit.IMPERIAL) == 32
        assert convert_temperature(0, TemperatureUnit.KELVIN) == pytest.approx(273.15)

    def test_boiling_point(self):
        assert convert_temperature(100, "imperial") == pytest.approx(212)

    def test_minus_forty_matches(self):
        assert convert_temperature(-40, "imperial") == pytest.approx(-40)

    def test_unknown_unit_raises(self):
        with pytest.raises(ValueError):
            convert_temperature(10, "rankine")


class TestConvertWindSpeed:
    def test_kmh(self):
        assert convert_wind_speed(10, WindUnit.KMH) == pytest.approx(36.0)

    def test_mph(self):
        assert convert_wind_speed(10, WindUnit.MPH) == pytest.approx(22.37)

    def test_ms_is_identity(self):
        assert convert_wind_speed(4.2, "ms") == 4.2

    def test_zero_in_every_unit(self):
        for unit in WindUnit:
            assert convert_wind_speed(0, unit) == 0


class TestWindDirectionLabel:
    @pytest.mark.parametrize(
        "degrees,expected",
        [
            (0, "N"),
            (11.24, "N"),
            (11.25, "NNE"),
            (45, "NE"),
            (90, "E"),
            (180, "S"),
            (230, "SW"),
            (270, "W"),
            (348.75, "N"),
            (348.7, "NNW"),
            (359, "N"),
            (360, "N"),
            (720 + 90, "E"),
        ],
    )
    def test_buckets(self, degrees: float, expected: str):
        assert wind_direction_label(degrees) == expected

    def test_negative_bearing_wraps(self):
        assert wind_direction_label(-90) == "W"

    def test_always_a_known_label(self):
        for degrees in range(0, 1080, 7):
            assert wind_direction_label(degrees) in COMPASS_LABELS


class TestDisplayStrings:
    def test_symbols(self):
        assert temperature_symbol("metric") == "C"
        assert temperature_symbol("imperial") == "F"
        assert temperature_symbol("kelvin") == "K"

    def test_wind_unit_labels(self):
        assert wind_unit_label("kmh") == "km/h"
        assert wind_unit_label("mph") == "mph"
        assert wind_unit_label("ms") == "m/s"

    def test_format_wind_speed_one_decimal(self):
        assert format_wind_speed(10, "kmh") == "36.0 km/h"
        assert format_wind_speed(5.1, "ms") == "5.1 m/s"

    def test_format_temperature_rounds(self):
        assert format_temperature(20.5, "metric") == "21°C"
        assert format_temperature(0, "imperial") == "32°F"
