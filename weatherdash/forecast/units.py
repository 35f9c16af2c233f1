"""Unit conversion from canonical metric (Celsius, m/s) to display units.

All functions are pure and total. Rounding is left to callers, except for
the display-string helpers at the bottom.
"""

import math

from weatherdash.config.schema import TemperatureUnit, WindUnit

COMPASS_LABELS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)
COMPASS_BUCKET_DEGREES = 22.5

KMH_PER_MS = 3.6
MPH_PER_MS = 2.237

_WIND_UNIT_LABELS = {
    WindUnit.KMH: "km/h",
    WindUnit.MPH: "mph",
    WindUnit.MS: "m/s",
}

_TEMP_SYMBOLS = {
    TemperatureUnit.METRIC: "C",
    TemperatureUnit.IMPERIAL: "F",
    TemperatureUnit.KELVIN: "K",
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity.

    Built-in round() uses banker's rounding, which would show 2.5 as 2.
    """
    return math.floor(value + 0.5)


def convert_temperature(celsius: float, unit: TemperatureUnit | str) -> float:
    unit = TemperatureUnit(unit)
    if unit == TemperatureUnit.IMPERIAL:
        return celsius * 9 / 5 + 32
    if unit == TemperatureUnit.KELVIN:
        return celsius + 273.15
    return celsius


def convert_wind_speed(meters_per_second: float, unit: WindUnit | str) -> float:
    unit = WindUnit(unit)
    if unit == WindUnit.KMH:
        return meters_per_second * KMH_PER_MS
    if unit == WindUnit.MPH:
        return meters_per_second * MPH_PER_MS
    return meters_per_second


def wind_direction_label(degrees: float) -> str:
    """Map a bearing to one of 16 compass labels, N first, clockwise."""
    normalized = degrees % 360
    index = round_half_up(normalized / COMPASS_BUCKET_DEGREES) % len(COMPASS_LABELS)
    return COMPASS_LABELS[index]


# ---- Display strings ----

def temperature_symbol(unit: TemperatureUnit | str) -> str:
    return _TEMP_SYMBOLS[TemperatureUnit(unit)]


def wind_unit_label(unit: WindUnit | str) -> str:
    return _WIND_UNIT_LABELS[WindUnit(unit)]


def format_wind_speed(meters_per_second: float, unit: WindUnit | str) -> str:
    """E.g. "36.0 km/h"."""
    value = convert_wind_speed(meters_per_second, unit)
    return f"{value:.1f} {wind_unit_label(unit)}"


def format_temperature(celsius: float, unit: TemperatureUnit | str) -> str:
    """E.g. "21°C"."""
    value = round_half_up(convert_temperature(celsius, unit))
    return f"{value}°{temperature_symbol(unit)}"
