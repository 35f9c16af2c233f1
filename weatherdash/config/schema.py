"""Pydantic v2 configuration schema with strict validation."""

from enum import StrEnum

from pydantic import BaseModel, Field


class TemperatureUnit(StrEnum):
    METRIC = "metric"
    IMPERIAL = "imperial"
    KELVIN = "kelvin"


class WindUnit(StrEnum):
    KMH = "kmh"
    MPH = "mph"
    MS = "ms"


class TimeFormat(StrEnum):
    H12 = "12"
    H24 = "24"


class GeolocationMode(StrEnum):
    IP = "ip"          # IP-based lookup (ipapi.co)
    STATIC = "static"  # fixed coordinates from location config
    OFF = "off"


class DisplaySettings(BaseModel):
    """User-adjustable display settings, persisted after every change."""

    model_config = {"extra": "forbid"}

    temp_unit: TemperatureUnit = TemperatureUnit.METRIC
    wind_unit: WindUnit = WindUnit.KMH
    time_format: TimeFormat = TimeFormat.H12
    auto_refresh: bool = True


class ApiConfig(BaseModel):
    model_config = {"extra": "forbid"}

    api_key: str = ""
    base_url: str = "https://api.openweathermap.org/data/2.5"
    one_call_url: str = "https://api.openweathermap.org/data/3.0/onecall"
    geo_url: str = "https://api.openweathermap.org/geo/1.0"
    air_quality_url: str = "https://air-quality-api.open-meteo.com/v1/air-quality"
    geolocation_url: str = "https://ipapi.co/json/"
    timeout_seconds: float = Field(default=10.0, gt=0.0)


class DisplayConfig(BaseModel):
    model_config = {"extra": "forbid"}

    defaults: DisplaySettings = DisplaySettings()
    # IANA zone name used for day bucketing; host local zone when unset
    timezone: str | None = None


class LocationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    name: str = "London"
    country: str = "GB"
    latitude: float = Field(default=51.5074, ge=-90.0, le=90.0)
    longitude: float = Field(default=-0.1278, ge=-180.0, le=180.0)


class OpsConfig(BaseModel):
    model_config = {"extra": "forbid"}

    refresh_interval_minutes: int = Field(default=10, ge=1)
    debounce_ms: int = Field(default=300, ge=0)
    geolocation: GeolocationMode = GeolocationMode.IP
    geolocation_timeout_seconds: float = Field(default=10.0, gt=0.0)
    hourly_count: int = Field(default=8, ge=1, le=40)
    daily_days: int = Field(default=7, ge=1, le=7)
    recent_limit: int = Field(default=5, ge=1)
    suggestion_limit: int = Field(default=5, ge=1)


class AppConfig(BaseModel):
    model_config = {"extra": "forbid"}

    api: ApiConfig = ApiConfig()
    display: DisplayConfig = DisplayConfig()
    location: LocationConfig = LocationConfig()
    ops: OpsConfig = OpsConfig()
